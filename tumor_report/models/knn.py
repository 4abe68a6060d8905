"""K-nearest-neighbors classifier with an explicit vote tie-break, and its trainer."""

import math
from dataclasses import dataclass

import numpy as np
import pandas as pd
from sklearn.base import BaseEstimator, ClassifierMixin
from sklearn.neighbors import NearestNeighbors

from tumor_report.config import K_CANDIDATES
from tumor_report.errors import InferenceError, ModelFitError
from tumor_report.models.sweep import SweepResult, sweep_and_select
from tumor_report.utils import get_logger

log = get_logger(__name__)

POSITIVE_CLASS = 1


class NearestNeighborVoteClassifier(ClassifierMixin, BaseEstimator):
    """
    Majority vote over the ``k`` nearest training rows (Euclidean distance).

    When two classes receive the same number of votes, the class of the
    nearest neighbor among the tied classes wins. Neighbors at equal
    distance keep the order returned by ``NearestNeighbors.kneighbors``.
    """

    def __init__(self, k: int = 5):
        self.k = k

    def fit(self, X, y):
        X = np.asarray(X, dtype=float)
        y = np.asarray(y)
        if len(X) == 0:
            raise ModelFitError("Cannot fit KNN on an empty training set")
        if not 1 <= self.k <= len(X):
            raise ModelFitError(
                f"k={self.k} must be between 1 and the training size {len(X)}"
            )
        self.index_ = NearestNeighbors(n_neighbors=self.k, metric="euclidean").fit(X)
        self.labels_ = y
        self.classes_ = np.unique(y)
        self.n_features_in_ = X.shape[1]
        return self

    def _neighbor_labels(self, X) -> np.ndarray:
        X = np.asarray(X, dtype=float)
        if X.ndim != 2 or X.shape[1] != self.n_features_in_:
            raise InferenceError(
                f"Expected {self.n_features_in_} features, got shape {X.shape}"
            )
        _, idx = self.index_.kneighbors(X)
        return self.labels_[idx]

    def predict_proba(self, X) -> np.ndarray:
        """Vote fraction per class, columns ordered as ``classes_``."""
        labels = self._neighbor_labels(X)
        return np.column_stack([(labels == c).mean(axis=1) for c in self.classes_])

    def predict(self, X) -> np.ndarray:
        labels = self._neighbor_labels(X)
        out = np.empty(len(labels), dtype=self.labels_.dtype)
        for i, row in enumerate(labels):
            values, counts = np.unique(row, return_counts=True)
            tied = values[counts == counts.max()]
            # row is ordered nearest first
            out[i] = tied[0] if len(tied) == 1 else next(v for v in row if v in tied)
        return out

    def malignant_score(self, X) -> np.ndarray:
        """
        Fraction of neighbors voting malignant, whichever class won the vote.
        """
        proba = self.predict_proba(X)
        hits = np.flatnonzero(self.classes_ == POSITIVE_CLASS)
        if len(hits) == 0:
            return np.zeros(len(proba))
        return proba[:, hits[0]]


@dataclass
class KNNResult:
    rule_of_thumb: NearestNeighborVoteClassifier
    rule_of_thumb_k: int
    best: NearestNeighborVoteClassifier
    best_k: int
    sweep: SweepResult


def rule_of_thumb_k(n_train: int) -> int:
    """``round(sqrt(n_train))``, never below 1."""
    return max(1, int(round(math.sqrt(n_train))))


class KNNTrainer:
    """Fits the rule-of-thumb k and sweeps k by test-set accuracy."""

    def __init__(self, k_candidates=K_CANDIDATES):
        self.k_candidates = list(k_candidates)

    def fit(self, X_train: pd.DataFrame, y_train: pd.Series,
            X_test: pd.DataFrame, y_test: pd.Series) -> KNNResult:
        n_train = len(X_train)

        k0 = min(rule_of_thumb_k(n_train), n_train)
        log.info("Rule-of-thumb k=round(sqrt(%d))=%d", n_train, k0)
        rot = NearestNeighborVoteClassifier(k=k0).fit(X_train, y_train)
        log.info("  k=%d test accuracy=%.4f", k0, rot.score(X_test, y_test))

        candidates = [k for k in self.k_candidates if 1 <= k <= n_train]
        dropped = sorted(set(self.k_candidates) - set(candidates))
        if dropped:
            log.warning("Skipping k values above the training size %d: %s", n_train, dropped)

        log.info("Sweeping k over %d..%d by test accuracy", min(candidates), max(candidates))
        sweep = sweep_and_select(
            "k",
            candidates,
            fit=lambda k: NearestNeighborVoteClassifier(k=k).fit(X_train, y_train),
            score=lambda model: model.score(X_test, y_test),
            higher_is_better=True,
            score_name="test_accuracy",
        )

        return KNNResult(
            rule_of_thumb=rot,
            rule_of_thumb_k=k0,
            best=sweep.best_model,
            best_k=sweep.best_value,
            sweep=sweep,
        )
