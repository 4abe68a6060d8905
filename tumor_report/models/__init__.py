from tumor_report.models.forest import ForestResult, ForestTrainer
from tumor_report.models.knn import KNNResult, KNNTrainer, NearestNeighborVoteClassifier
from tumor_report.models.sweep import SweepResult, sweep_and_select
from tumor_report.models.trainer import ModelTrainer
from tumor_report.models.tree import DecisionTreeTrainer, TreeResult

__all__ = [
    "DecisionTreeTrainer",
    "ForestResult",
    "ForestTrainer",
    "KNNResult",
    "KNNTrainer",
    "ModelTrainer",
    "NearestNeighborVoteClassifier",
    "SweepResult",
    "TreeResult",
    "sweep_and_select",
]
