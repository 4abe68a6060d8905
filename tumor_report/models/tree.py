"""Decision tree trainer with a cost-complexity pruning pass."""

from dataclasses import dataclass

import numpy as np
import pandas as pd
from sklearn.model_selection import cross_val_score
from sklearn.tree import DecisionTreeClassifier, export_text

from tumor_report.config import PRUNE_CCP_ALPHA, SEED, TREE_CV_FOLDS
from tumor_report.utils import get_logger

log = get_logger(__name__)


@dataclass
class TreeResult:
    unpruned: DecisionTreeClassifier
    pruned: DecisionTreeClassifier
    ccp_alpha: float
    complexity_table: pd.DataFrame
    importances: pd.Series
    rules: str


class DecisionTreeTrainer:
    """
    Fits an unpruned gini tree, tabulates error against the complexity
    parameter, then refits with a fixed ``ccp_alpha`` as the pruned tree.

    The complexity table has one row per alpha on the pruning path of the
    unpruned tree: number of leaves, training error and k-fold
    cross-validated error.
    """

    def __init__(self, ccp_alpha: float = PRUNE_CCP_ALPHA, seed: int = SEED,
                 cv_folds: int = TREE_CV_FOLDS):
        self.ccp_alpha = ccp_alpha
        self.seed = seed
        self.cv_folds = cv_folds

    def _make(self, ccp_alpha: float) -> DecisionTreeClassifier:
        return DecisionTreeClassifier(
            criterion="gini", ccp_alpha=ccp_alpha, random_state=self.seed
        )

    def fit(self, X_train: pd.DataFrame, y_train: pd.Series) -> TreeResult:
        log.info("Fitting unpruned decision tree (ccp_alpha=0)")
        unpruned = self._make(0.0).fit(X_train, y_train)
        log.info(
            "  unpruned: depth=%d, leaves=%d",
            unpruned.get_depth(), unpruned.get_n_leaves(),
        )

        table = self.complexity_table(unpruned, X_train, y_train)

        log.info("Refitting pruned tree (ccp_alpha=%.3f)", self.ccp_alpha)
        pruned = self._make(self.ccp_alpha).fit(X_train, y_train)
        log.info(
            "  pruned: depth=%d, leaves=%d",
            pruned.get_depth(), pruned.get_n_leaves(),
        )

        feature_names = list(X_train.columns)
        importances = pd.Series(
            pruned.feature_importances_, index=feature_names
        ).sort_values(ascending=False)

        return TreeResult(
            unpruned=unpruned,
            pruned=pruned,
            ccp_alpha=self.ccp_alpha,
            complexity_table=table,
            importances=importances,
            rules=export_text(pruned, feature_names=feature_names),
        )

    def complexity_table(self, tree: DecisionTreeClassifier,
                         X_train: pd.DataFrame, y_train: pd.Series) -> pd.DataFrame:
        path = tree.cost_complexity_pruning_path(X_train, y_train)
        # Stratified folds cannot exceed the minority class count
        folds = min(self.cv_folds, int(y_train.value_counts().min()))
        if folds < 2:
            log.warning("Too few samples per class for cross-validated error")

        rows = []
        for alpha in path.ccp_alphas:
            alpha = max(float(alpha), 0.0)
            model = self._make(alpha).fit(X_train, y_train)
            cv_error = np.nan
            if folds >= 2:
                cv_error = 1.0 - cross_val_score(
                    self._make(alpha), X_train, y_train, cv=folds
                ).mean()
            rows.append({
                "ccp_alpha": alpha,
                "n_leaves": int(model.get_n_leaves()),
                "train_error": 1.0 - model.score(X_train, y_train),
                "cv_error": float(cv_error),
            })

        table = pd.DataFrame(rows).drop_duplicates(subset="ccp_alpha")
        log.info("Complexity table: %d pruning levels", len(table))
        return table.reset_index(drop=True)
