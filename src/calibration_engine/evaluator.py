"""Evaluator — score computed star ratings against reference ratings.

Provides:
    - ``absolute_errors``     : per-chart |computed - reference|
    - ``mean_absolute_error`` : average error over a chart set
    - ``max_absolute_error``  : worst single chart
    - ``evaluate_constants`` : all metrics for a chart set under one table
    - ``evaluate_config``    : the same, for a YAML table on disk
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Sequence

import numpy as np

from strain_engine.calculator import calculate
from strain_engine.constants import StrainConstants


def absolute_errors(predicted: Sequence[float], reference: Sequence[float]) -> list[float]:
    """Per-chart absolute rating error.

    Raises:
        ValueError: If the two sequences have different lengths.
    """
    if len(predicted) != len(reference):
        raise ValueError(
            f"Length mismatch: predicted={len(predicted)}, reference={len(reference)}"
        )
    diff = np.abs(np.asarray(predicted, dtype=float) - np.asarray(reference, dtype=float))
    return diff.tolist()


def mean_absolute_error(predicted: Sequence[float], reference: Sequence[float]) -> float:
    """Average absolute rating error; ``0.0`` on empty input."""
    errors = absolute_errors(predicted, reference)
    if not errors:
        return 0.0
    return float(np.mean(errors))


def max_absolute_error(predicted: Sequence[float], reference: Sequence[float]) -> float:
    """Largest absolute rating error; ``0.0`` on empty input."""
    errors = absolute_errors(predicted, reference)
    if not errors:
        return 0.0
    return float(np.max(errors))


def rate_charts(
    charts: Sequence[dict[str, Any]], constants: StrainConstants
) -> list[float]:
    """Star rating of every chart (no mods) under *constants*."""
    return [
        calculate(
            chart["notes"],
            chart["column_count"],
            overall_difficulty=chart["overall_difficulty"],
            constants=constants,
        ).star_rating
        for chart in charts
    ]


def evaluate_constants(
    charts: Sequence[dict[str, Any]], constants: StrainConstants
) -> dict[str, float]:
    """Rate *charts* under *constants* and score them against their references.

    Returns:
        A dict with keys:
            - ``mean_absolute_error`` (float)
            - ``max_absolute_error``  (float)
    """
    predicted = rate_charts(charts, constants)
    reference = [chart["reference_rating"] for chart in charts]

    return {
        "mean_absolute_error": mean_absolute_error(predicted, reference),
        "max_absolute_error": max_absolute_error(predicted, reference),
    }


def evaluate_config(
    charts: Sequence[dict[str, Any]],
    config_path: str | Path,
) -> dict[str, float]:
    """:func:`evaluate_constants` for a YAML calibration table on disk."""
    return evaluate_constants(charts, StrainConstants(config_path))
