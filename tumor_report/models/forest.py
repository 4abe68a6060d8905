"""Bagging and random forest trainer with an mtry sweep."""

from dataclasses import dataclass

import pandas as pd
from sklearn.ensemble import RandomForestClassifier

from tumor_report.config import FOREST_TREES, MTRY_CANDIDATES, SEED
from tumor_report.models.sweep import SweepResult, sweep_and_select
from tumor_report.utils import get_logger

log = get_logger(__name__)


@dataclass
class ForestResult:
    bagging: RandomForestClassifier
    forest: RandomForestClassifier
    mtry: int
    sweep: SweepResult
    bagging_importances: pd.Series
    forest_importances: pd.Series


class ForestTrainer:
    """
    Bootstrap ensembles of trees.

    Bagging considers every feature at each split. The random forest draws
    ``max_features=m`` candidates per split, with ``m`` chosen by sweeping
    the candidate range and keeping the lowest out-of-bag error.
    """

    def __init__(self, n_estimators: int = FOREST_TREES,
                 mtry_candidates=MTRY_CANDIDATES, seed: int = SEED):
        self.n_estimators = n_estimators
        self.mtry_candidates = list(mtry_candidates)
        self.seed = seed

    def _make(self, max_features) -> RandomForestClassifier:
        return RandomForestClassifier(
            n_estimators=self.n_estimators,
            max_features=max_features,
            bootstrap=True,
            oob_score=True,
            random_state=self.seed,
        )

    def fit(self, X_train: pd.DataFrame, y_train: pd.Series) -> ForestResult:
        n_features = X_train.shape[1]
        feature_names = list(X_train.columns)

        log.info(
            "Fitting bagging ensemble (%d trees, mtry=%d)",
            self.n_estimators, n_features,
        )
        bagging = self._make(None).fit(X_train, y_train)
        log.info("  bagging OOB error=%.4f", 1.0 - bagging.oob_score_)

        candidates = [m for m in self.mtry_candidates if 1 <= m < n_features]
        dropped = sorted(set(self.mtry_candidates) - set(candidates))
        if dropped:
            log.warning("Skipping mtry values outside 1..%d: %s", n_features - 1, dropped)

        log.info("Sweeping random forest mtry over %s", candidates)
        sweep = sweep_and_select(
            "mtry",
            candidates,
            fit=lambda m: self._make(m).fit(X_train, y_train),
            score=lambda model: 1.0 - model.oob_score_,
            higher_is_better=False,
            score_name="oob_error",
        )

        return ForestResult(
            bagging=bagging,
            forest=sweep.best_model,
            mtry=sweep.best_value,
            sweep=sweep,
            bagging_importances=pd.Series(
                bagging.feature_importances_, index=feature_names
            ).sort_values(ascending=False),
            forest_importances=pd.Series(
                sweep.best_model.feature_importances_, index=feature_names
            ).sort_values(ascending=False),
        )
