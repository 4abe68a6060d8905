"""Dataset loading module for the breast-tumor diagnostic CSV."""

import numpy as np
import pandas as pd

from tumor_report.config import (
    FEATURE_COLUMNS,
    ID_COLUMN,
    LABEL_NAMES,
    NEGATIVE_LABEL,
    POSITIVE_LABEL,
    TARGET_COLUMN,
)
from tumor_report.errors import DataLoadError, DataQualityError, SchemaError
from tumor_report.utils import get_logger

log = get_logger(__name__)


def check_feature_values(frame: pd.DataFrame, columns: list[str]):
    """Raise DataQualityError at the first null or non-finite value in ``columns``."""
    for col in columns:
        values = frame[col]
        if pd.api.types.is_numeric_dtype(values):
            bad = ~np.isfinite(values.to_numpy(dtype=float, na_value=np.nan))
        else:
            bad = values.isnull().to_numpy()
        if bad.any():
            row = int(bad.nonzero()[0][0])
            value = values.iloc[row]
            kind = "null" if pd.isnull(value) else f"non-finite ({value})"
            raise DataQualityError(
                f"{int(bad.sum())} null or non-finite value(s), first is {kind} at id "
                f"{frame[ID_COLUMN].iloc[row]!r}",
                row=row, column=col,
            )


class DatasetLoader:
    """Loads the diagnostic CSV into a typed DataFrame."""

    def __init__(self, feature_names: list[str] | None = None):
        self.feature_names = list(feature_names or FEATURE_COLUMNS)

    def load_csv(self, path: str) -> dict:
        """
        Load and type-check a diagnostic CSV.

        Returns a dict with keys:
            - df: pd.DataFrame with ``id`` as str and ``diagnosis`` categorical
            - feature_names: the mean-valued feature columns used downstream
            - target_name: name of the label column
            - metadata: extra info about the dataset
        """
        log.info("Loading CSV from: %s", path)
        df = self._read(path)
        df = self._drop_empty_columns(df)
        self._check_schema(df)
        check_feature_values(df, self.feature_names)

        df[ID_COLUMN] = df[ID_COLUMN].astype(str)
        duplicated = df[ID_COLUMN].duplicated()
        if duplicated.any():
            row = int(duplicated.to_numpy().nonzero()[0][0])
            raise DataQualityError(
                f"Duplicate sample id {df[ID_COLUMN].iloc[row]!r}",
                row=row, column=ID_COLUMN,
            )

        labels = df[TARGET_COLUMN]
        if not pd.api.types.is_numeric_dtype(labels):
            labels = labels.astype(str).str.strip()
        invalid = ~labels.isin([NEGATIVE_LABEL, POSITIVE_LABEL])
        if invalid.any():
            row = int(invalid.to_numpy().nonzero()[0][0])
            raise DataQualityError(
                f"Diagnosis must be {POSITIVE_LABEL!r} or {NEGATIVE_LABEL!r}, "
                f"got {labels.iloc[row]!r}",
                row=row, column=TARGET_COLUMN,
            )
        df[TARGET_COLUMN] = pd.Categorical(
            labels, categories=[NEGATIVE_LABEL, POSITIVE_LABEL]
        )

        counts = df[TARGET_COLUMN].value_counts()
        metadata = {
            "name": str(path),
            "n_samples": len(df),
            "n_columns": df.shape[1],
            "n_features": len(self.feature_names),
            "task": "binary_classification",
            "positive_label": LABEL_NAMES[POSITIVE_LABEL],
            "negative_label": LABEL_NAMES[NEGATIVE_LABEL],
            "class_distribution": {str(k): int(v) for k, v in counts.items()},
        }

        log.info(
            "Loaded %d samples (%d columns, %d features used)",
            metadata["n_samples"], metadata["n_columns"], metadata["n_features"],
        )

        return {
            "df": df,
            "feature_names": self.feature_names,
            "target_name": TARGET_COLUMN,
            "metadata": metadata,
        }

    @staticmethod
    def _read(path: str) -> pd.DataFrame:
        try:
            df = pd.read_csv(path)
        except FileNotFoundError as e:
            raise DataLoadError(f"File not found: {path}") from e
        except pd.errors.EmptyDataError as e:
            raise DataLoadError(f"File is empty: {path}") from e
        except (pd.errors.ParserError, UnicodeDecodeError) as e:
            raise DataLoadError(f"Malformed CSV {path}: {e}") from e
        except OSError as e:
            raise DataLoadError(f"Cannot read {path}: {e}") from e
        if df.empty:
            raise DataLoadError(f"File has a header but no rows: {path}")
        return df

    @staticmethod
    def _drop_empty_columns(df: pd.DataFrame) -> pd.DataFrame:
        # The public WDBC export ends every line with a comma
        empty = [
            c for c in df.columns
            if str(c).startswith("Unnamed") and df[c].isnull().all()
        ]
        if empty:
            log.info("Dropping empty columns: %s", empty)
            df = df.drop(columns=empty)
        return df

    def _check_schema(self, df: pd.DataFrame):
        for col in [ID_COLUMN, TARGET_COLUMN] + self.feature_names:
            if col not in df.columns:
                raise SchemaError("Expected column is missing", column=col)
        for col in self.feature_names:
            if not pd.api.types.is_numeric_dtype(df[col]):
                raise SchemaError(
                    f"Feature column must be numeric, found {df[col].dtype}",
                    column=col,
                )
