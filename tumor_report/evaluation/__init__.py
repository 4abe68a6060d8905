from tumor_report.evaluation.evaluator import (
    ConfusionMatrix,
    ModelEvaluator,
    RocCurve,
    confusion_counts,
    roc_points,
)
from tumor_report.evaluation.reporter import Reporter

__all__ = [
    "ConfusionMatrix",
    "ModelEvaluator",
    "Reporter",
    "RocCurve",
    "confusion_counts",
    "roc_points",
]
