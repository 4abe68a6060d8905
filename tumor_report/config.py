"""Fixed constants for the tumor classifier comparison report."""

from pathlib import Path

# Project paths
PROJECT_ROOT = Path(__file__).parent.parent
DEFAULT_OUTPUT_DIR = "tumor_report_output"

# Input schema
ID_COLUMN = "id"
TARGET_COLUMN = "diagnosis"
BINARY_TARGET_COLUMN = "diagnosis_binary"
POSITIVE_LABEL = "M"   # malignant
NEGATIVE_LABEL = "B"   # benign
LABEL_NAMES = {"M": "Malignant", "B": "Benign"}

# The ten "mean" measurements; the _se and _worst columns are ignored
FEATURE_COLUMNS = [
    "radius_mean",
    "texture_mean",
    "perimeter_mean",
    "area_mean",
    "smoothness_mean",
    "compactness_mean",
    "concavity_mean",
    "concave points_mean",
    "symmetry_mean",
    "fractal_dimension_mean",
]

# Split
SEED = 42
TEST_FRACTION = 0.2

# Rescaling: "full" reproduces the reference report (scaler fit before the
# split, leaks test-set ranges), "train" fits on training rows only.
SCALE_FIT_MODES = ("full", "train")
DEFAULT_SCALE_FIT = "full"

# Decision tree
PRUNE_CCP_ALPHA = 0.02
TREE_CV_FOLDS = 5

# Bagging / random forest
FOREST_TREES = 500
MTRY_CANDIDATES = range(1, 10)

# K-nearest neighbors
K_CANDIDATES = range(1, 22)

# Models overlaid on the final ROC comparison, in plotting order
COMPARED_MODELS = ["decision_tree", "bagging", "random_forest", "knn"]
