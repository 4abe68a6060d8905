"""Runs the decision tree, forest and KNN trainers on one split."""

import time

from tumor_report.config import (
    FOREST_TREES,
    K_CANDIDATES,
    MTRY_CANDIDATES,
    PRUNE_CCP_ALPHA,
    SEED,
)
from tumor_report.errors import ModelFitError
from tumor_report.models.forest import ForestTrainer
from tumor_report.models.knn import KNNTrainer
from tumor_report.models.tree import DecisionTreeTrainer
from tumor_report.utils import get_logger

log = get_logger(__name__)


class ModelTrainer:
    """Trains the three model families and collects the fitted models."""

    def __init__(
        self,
        seed: int = SEED,
        ccp_alpha: float = PRUNE_CCP_ALPHA,
        n_estimators: int = FOREST_TREES,
        mtry_candidates=MTRY_CANDIDATES,
        k_candidates=K_CANDIDATES,
    ):
        # Each trainer owns its random_state; nothing reseeds a global generator
        self.tree_trainer = DecisionTreeTrainer(ccp_alpha=ccp_alpha, seed=seed)
        self.forest_trainer = ForestTrainer(
            n_estimators=n_estimators, mtry_candidates=mtry_candidates, seed=seed
        )
        self.knn_trainer = KNNTrainer(k_candidates=k_candidates)

    @staticmethod
    def check_training_set(X_train, y_train):
        if len(X_train) == 0:
            raise ModelFitError("Training set is empty")
        classes = sorted(set(y_train.tolist()))
        if len(classes) < 2:
            raise ModelFitError(
                f"Training set contains a single class {classes}; "
                "a binary classifier cannot be fit",
                column="diagnosis_binary",
            )

    def run(self, processed_data: dict) -> dict:
        """
        Train all model families on the training rows.

        Returns dict with per-family results and a flat name -> model map.
        """
        X_train = processed_data["X_train"]
        y_train = processed_data["y_train"]
        X_test = processed_data["X_test"]
        y_test = processed_data["y_test"]

        self.check_training_set(X_train, y_train)
        log.info(
            "Training 3 model families on %d samples (%d malignant)",
            len(X_train), int(y_train.sum()),
        )

        timings = {}

        t0 = time.time()
        tree = self.tree_trainer.fit(X_train, y_train)
        timings["decision_tree"] = round(time.time() - t0, 3)

        t0 = time.time()
        forest = self.forest_trainer.fit(X_train, y_train)
        timings["forest"] = round(time.time() - t0, 3)

        t0 = time.time()
        knn = self.knn_trainer.fit(X_train, y_train, X_test, y_test)
        timings["knn"] = round(time.time() - t0, 3)

        log.info(
            "Selected: tree ccp_alpha=%.3f, forest mtry=%d, knn k=%d",
            tree.ccp_alpha, forest.mtry, knn.best_k,
        )

        trained_models = {
            "decision_tree": tree.pruned,
            "decision_tree_unpruned": tree.unpruned,
            "bagging": forest.bagging,
            "random_forest": forest.forest,
            "knn": knn.best,
            "knn_rule_of_thumb": knn.rule_of_thumb,
        }

        return {
            "tree": tree,
            "forest": forest,
            "knn": knn,
            "trained_models": trained_models,
            "selected_params": {
                "ccp_alpha": tree.ccp_alpha,
                "mtry": forest.mtry,
                "k": knn.best_k,
                "k_rule_of_thumb": knn.rule_of_thumb_k,
            },
            "train_time_seconds": timings,
        }
