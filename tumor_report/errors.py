"""Typed failures raised by the tumor report pipeline.

Every error is fatal to a run. Where the failure can be pinned to a
location in the input, ``row`` and ``column`` carry it and are included
in the message.
"""


class TumorReportError(Exception):
    """Base class for all pipeline failures."""

    def __init__(self, message: str, row=None, column: str | None = None):
        self.message = message
        self.row = row
        self.column = column
        super().__init__(self._describe())

    def _describe(self) -> str:
        where = []
        if self.row is not None:
            where.append(f"row={self.row}")
        if self.column is not None:
            where.append(f"column={self.column!r}")
        if not where:
            return self.message
        return f"{self.message} ({', '.join(where)})"


class DataLoadError(TumorReportError):
    """The input file is missing, unreadable or not parseable as CSV."""


class SchemaError(TumorReportError):
    """An expected column is absent or has the wrong type."""


class DataQualityError(TumorReportError):
    """A value is null, duplicated or outside its allowed set."""


class ModelFitError(TumorReportError):
    """A model cannot be fit on the given training data."""


class InferenceError(TumorReportError):
    """Prediction input does not match what the model was trained on."""
