"""Generic one-parameter sweep with an explicit selection rule."""

from dataclasses import dataclass
from typing import Any, Callable, Iterable

import math

import pandas as pd

from tumor_report.utils import get_logger

log = get_logger(__name__)


@dataclass
class SweepResult:
    """Outcome of a sweep: every candidate's score plus the winner."""

    param_name: str
    score_name: str
    table: pd.DataFrame
    best_value: Any
    best_score: float
    best_model: Any


def sweep_and_select(
    param_name: str,
    candidates: Iterable,
    fit: Callable[[Any], Any],
    score: Callable[[Any], float],
    higher_is_better: bool = True,
    score_name: str = "score",
) -> SweepResult:
    """
    Fit one model per candidate value and keep the best by ``score``.

    Candidates are visited in the given order and a later candidate wins
    only with a strictly better score, so ties go to the earliest value
    (the smallest, for ascending ranges).
    """
    candidates = list(candidates)
    if not candidates:
        raise ValueError(f"No candidate values to sweep for {param_name}")

    rows = []
    best_value, best_score, best_model = None, None, None

    for value in candidates:
        model = fit(value)
        s = float(score(model))
        rows.append({param_name: value, score_name: s})
        log.info("  %s=%s: %s=%.4f", param_name, value, score_name, s)

        if _is_better(s, best_score, higher_is_better):
            best_value, best_score, best_model = value, s, model

    log.info(
        "Selected %s=%s (%s=%.4f) from %d candidates",
        param_name, best_value, score_name, best_score, len(candidates),
    )

    return SweepResult(
        param_name=param_name,
        score_name=score_name,
        table=pd.DataFrame(rows),
        best_value=best_value,
        best_score=best_score,
        best_model=best_model,
    )


def _is_better(score: float, best: float | None, higher_is_better: bool) -> bool:
    # NaN never wins over a real score
    if best is None or (math.isnan(best) and not math.isnan(score)):
        return True
    return score > best if higher_is_better else score < best
