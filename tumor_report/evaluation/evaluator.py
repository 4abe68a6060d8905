"""Confusion matrices, derived metrics and ROC curves on the held-out set."""

import warnings
from dataclasses import dataclass

import numpy as np
import pandas as pd
from sklearn.exceptions import UndefinedMetricWarning
from sklearn.metrics import auc, confusion_matrix, roc_curve

from tumor_report.config import LABEL_NAMES, NEGATIVE_LABEL, POSITIVE_LABEL
from tumor_report.errors import InferenceError
from tumor_report.utils import get_logger

log = get_logger(__name__)

POSITIVE_CLASS = 1


def _ratio(num: float, den: float) -> float:
    return num / den if den else 0.0


@dataclass
class ConfusionMatrix:
    """Binary confusion counts with malignant (1) as the positive class."""

    tp: int
    fp: int
    tn: int
    fn: int

    @property
    def total(self) -> int:
        return self.tp + self.fp + self.tn + self.fn

    @property
    def accuracy(self) -> float:
        return _ratio(self.tp + self.tn, self.total)

    @property
    def precision(self) -> float:
        return _ratio(self.tp, self.tp + self.fp)

    @property
    def recall(self) -> float:
        return _ratio(self.tp, self.tp + self.fn)

    sensitivity = recall

    @property
    def specificity(self) -> float:
        return _ratio(self.tn, self.tn + self.fp)

    @property
    def f1(self) -> float:
        return _ratio(2 * self.precision * self.recall, self.precision + self.recall)

    def as_table(self) -> pd.DataFrame:
        """Predicted (rows) by actual (columns), benign first."""
        labels = [LABEL_NAMES[NEGATIVE_LABEL], LABEL_NAMES[POSITIVE_LABEL]]
        return pd.DataFrame(
            [[self.tn, self.fn], [self.fp, self.tp]],
            index=pd.Index(labels, name="Predicted"),
            columns=pd.Index(labels, name="Actual"),
        )

    def metrics(self) -> dict:
        return {
            "accuracy": round(self.accuracy, 4),
            "precision": round(self.precision, 4),
            "recall": round(self.recall, 4),
            "specificity": round(self.specificity, 4),
            "f1": round(self.f1, 4),
        }

    def to_dict(self) -> dict:
        return {"tp": self.tp, "fp": self.fp, "tn": self.tn, "fn": self.fn}


def confusion_counts(y_true, y_pred) -> ConfusionMatrix:
    """Cross-tabulate predicted against actual binary labels."""
    tn, fp, fn, tp = confusion_matrix(y_true, y_pred, labels=[0, 1]).ravel()
    return ConfusionMatrix(tp=int(tp), fp=int(fp), tn=int(tn), fn=int(fn))


@dataclass
class RocCurve:
    """ROC points ordered by decreasing threshold; fpr never decreases."""

    fpr: np.ndarray
    tpr: np.ndarray
    thresholds: np.ndarray
    auc: float

    def to_dict(self) -> dict:
        return {
            "fpr": self.fpr.tolist(),
            "tpr": self.tpr.tolist(),
            "thresholds": self.thresholds.tolist(),
            "auc": self.auc,
        }


def roc_points(y_true, scores) -> RocCurve:
    """
    Sweep the decision threshold over ``scores`` (probability of malignant).

    If the labels hold a single class the missing rate is reported as 0.0
    and the AUC as NaN.
    """
    y_true = np.asarray(y_true)
    with warnings.catch_warnings():
        warnings.simplefilter("ignore", UndefinedMetricWarning)
        fpr, tpr, thresholds = roc_curve(
            y_true, scores, pos_label=POSITIVE_CLASS, drop_intermediate=False
        )

    if len(np.unique(y_true)) < 2:
        log.warning("ROC undefined for a single-class test set; AUC set to NaN")
        return RocCurve(
            fpr=np.nan_to_num(fpr), tpr=np.nan_to_num(tpr),
            thresholds=thresholds, auc=float("nan"),
        )
    return RocCurve(fpr=fpr, tpr=tpr, thresholds=thresholds, auc=float(auc(fpr, tpr)))


def malignant_scores(model, X) -> np.ndarray:
    """Probability of the malignant class for each row of ``X``."""
    if hasattr(model, "malignant_score"):
        return model.malignant_score(X)
    proba = model.predict_proba(X)
    hits = np.flatnonzero(np.asarray(model.classes_) == POSITIVE_CLASS)
    if len(hits) == 0:
        return np.zeros(len(proba))
    return proba[:, hits[0]]


class ModelEvaluator:
    """Evaluates trained models on the held-out test set."""

    def evaluate_model(self, name: str, model, X_test, y_test) -> dict:
        expected = getattr(model, "n_features_in_", None)
        if expected is not None and X_test.shape[1] != expected:
            raise InferenceError(
                f"Model {name!r} expects {expected} features, got {X_test.shape[1]}"
            )

        y_pred = model.predict(X_test)
        scores = malignant_scores(model, X_test)
        cm = confusion_counts(y_test, y_pred)
        roc = roc_points(y_test, scores)

        return {
            "confusion": cm,
            "confusion_matrix": cm.to_dict(),
            "roc": roc,
            "roc_auc": round(roc.auc, 4),
            "predictions": np.asarray(y_pred).tolist(),
            "scores": np.asarray(scores).tolist(),
            **cm.metrics(),
        }

    def run(self, training_results: dict, processed_data: dict) -> dict:
        """
        Evaluate all trained models on the held-out test set.

        Returns a dict of model_name -> metrics plus the best model by F1.
        """
        X_test = processed_data["X_test"]
        y_test = processed_data["y_test"]
        trained_models = training_results["trained_models"]

        log.info("Evaluating %d models on %d test samples", len(trained_models), len(X_test))

        evaluations = {}
        for name, model in trained_models.items():
            metrics = self.evaluate_model(name, model, X_test, y_test)
            evaluations[name] = metrics
            log.info(
                "  %s: acc=%.4f, precision=%.4f, recall=%.4f, f1=%.4f, auc=%.4f",
                name, metrics["accuracy"], metrics["precision"],
                metrics["recall"], metrics["f1"], metrics["roc_auc"],
            )

        best_name = max(evaluations, key=lambda n: evaluations[n]["f1"])
        log.info(
            "Best model on test set: %s (F1=%.4f)",
            best_name, evaluations[best_name]["f1"],
        )

        return {
            "evaluations": evaluations,
            "best_model_name": best_name,
            "best_metrics": evaluations[best_name],
        }
