"""Feature selection, label encoding, min-max rescaling and the train/test split."""

import numpy as np
import pandas as pd
from sklearn.preprocessing import MinMaxScaler

from tumor_report.config import (
    BINARY_TARGET_COLUMN,
    DEFAULT_SCALE_FIT,
    ID_COLUMN,
    POSITIVE_LABEL,
    SCALE_FIT_MODES,
    SEED,
    TARGET_COLUMN,
    TEST_FRACTION,
)
from tumor_report.data.loader import check_feature_values
from tumor_report.errors import DataQualityError
from tumor_report.utils import get_logger

log = get_logger(__name__)

LEAKAGE_NOTE = (
    "Min-max parameters were fit on the full dataset before splitting; "
    "test-set ranges influence the training features."
)


def split_indices(n: int, test_fraction: float = TEST_FRACTION,
                  seed: int = SEED) -> tuple[np.ndarray, np.ndarray]:
    """
    Draw ``round(test_fraction * n)`` distinct row positions for the test set.

    The remaining positions form the training set. Both arrays are sorted.
    The draw is not stratified and depends only on ``n`` and ``seed``.
    """
    if not 0.0 < test_fraction < 1.0:
        raise ValueError(f"test_fraction must be in (0, 1), got {test_fraction}")
    n_test = int(round(test_fraction * n))
    rng = np.random.default_rng(seed)
    test_idx = np.sort(rng.choice(n, size=n_test, replace=False))
    train_idx = np.setdiff1d(np.arange(n), test_idx)
    return train_idx, test_idx


def rescale(frame: pd.DataFrame, columns: list[str],
            reference: pd.DataFrame | None = None) -> tuple[pd.DataFrame, MinMaxScaler]:
    """
    Min-max rescale ``columns`` of ``frame`` to [0, 1].

    The scaler is fit on ``reference`` (defaults to ``frame`` itself). A
    column whose reference range is zero maps to 0.0.
    """
    reference = frame if reference is None else reference
    scaler = MinMaxScaler()
    scaler.fit(reference[columns])

    degenerate = [c for c, r in zip(columns, scaler.data_range_) if r == 0]
    for col in degenerate:
        log.warning("Column %r has zero range; rescaled values set to 0.0", col)

    out = frame.copy()
    out[columns] = scaler.transform(frame[columns])
    # MinMaxScaler leaves x - min for constant columns; pin them to 0
    if degenerate:
        out[degenerate] = 0.0
    return out, scaler


class Preprocessor:
    """Selects the modelled columns, rescales features and splits rows."""

    def __init__(self, test_fraction: float = TEST_FRACTION, seed: int = SEED,
                 fit_on: str = DEFAULT_SCALE_FIT):
        if fit_on not in SCALE_FIT_MODES:
            raise ValueError(f"Unknown scaling fit mode: {fit_on}")
        self.test_fraction = test_fraction
        self.seed = seed
        self.fit_on = fit_on
        self.scaler = None

    def select_features(self, df: pd.DataFrame, feature_names: list[str]) -> pd.DataFrame:
        """Keep id, label and features; derive the binary label; reject null or infinite values."""
        frame = df[[ID_COLUMN, TARGET_COLUMN] + list(feature_names)].copy()

        check_feature_values(frame, [TARGET_COLUMN] + list(feature_names))

        frame[BINARY_TARGET_COLUMN] = (
            frame[TARGET_COLUMN] == POSITIVE_LABEL
        ).astype(int)
        return frame.reset_index(drop=True)

    def run(self, dataset: dict) -> dict:
        """
        Full preprocessing pipeline.

        Takes a dataset dict from DatasetLoader and returns a processed dict
        with the rescaled frame and train/test splits.
        """
        feature_names = dataset["feature_names"]
        log.info("Starting preprocessing pipeline")

        frame = self.select_features(dataset["df"], feature_names)
        log.info("No missing or infinite values in %d selected features", len(feature_names))

        train_idx, test_idx = split_indices(len(frame), self.test_fraction, self.seed)
        if len(test_idx) == 0 or len(train_idx) == 0:
            raise DataQualityError(
                f"{len(frame)} row(s) give a {len(train_idx)}/{len(test_idx)} "
                f"train/test split at test_fraction={self.test_fraction}; "
                "both sets need at least one row"
            )
        log.info(
            "Split: %d train / %d test (seed=%d, %.0f%% test, unstratified)",
            len(train_idx), len(test_idx), self.seed, self.test_fraction * 100,
        )

        if self.fit_on == "full":
            frame, self.scaler = rescale(frame, feature_names)
            log.warning(LEAKAGE_NOTE)
        else:
            frame, self.scaler = rescale(
                frame, feature_names, reference=frame.iloc[train_idx]
            )
            log.info("Min-max parameters fit on training rows only")

        train = frame.iloc[train_idx]
        test = frame.iloc[test_idx]

        return {
            "frame": frame,
            "X_train": train[feature_names],
            "X_test": test[feature_names],
            "y_train": train[BINARY_TARGET_COLUMN],
            "y_test": test[BINARY_TARGET_COLUMN],
            "train_ids": train[ID_COLUMN].tolist(),
            "test_ids": test[ID_COLUMN].tolist(),
            "feature_names": feature_names,
            "scaler": self.scaler,
            "metadata": dataset["metadata"],
            "preprocessing_info": {
                "scaling": "minmax",
                "scaler_fit_on": self.fit_on,
                "leakage_note": LEAKAGE_NOTE if self.fit_on == "full" else None,
                "seed": self.seed,
                "test_fraction": self.test_fraction,
                "train_samples": len(train_idx),
                "test_samples": len(test_idx),
                "train_malignant": int(train[BINARY_TARGET_COLUMN].sum()),
                "test_malignant": int(test[BINARY_TARGET_COLUMN].sum()),
            },
        }
