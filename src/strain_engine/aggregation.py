"""Rating Aggregator — turn per-window strain statistics into a star rating.

Two independent statistics feed the rating:

    1. Window peaks, sorted from highest to lowest and summed with weights
       decaying by ``decay_weight`` per step. A chart that is hard for
       many windows outranks one with a single hard spike.
    2. Window sums, whose spread around their maximum gives a
       consistency error. Even charts earn a small bonus, uneven ones a
       small penalty, both faded out for low difficulties.
"""

from __future__ import annotations

from typing import Sequence

import numpy as np

from .constants import StrainConstants


def weighted_difficulty(highest_strains: Sequence[float], constants: StrainConstants) -> float:
    """Decay-weighted sum of window peaks, scaled into star range.

    Args:
        highest_strains: Peak strain per window.
        constants: Calibration table.

    Returns:
        Non-negative difficulty (``0.0`` without windows).
    """
    if len(highest_strains) == 0:
        return 0.0

    strains = np.sort(np.asarray(highest_strains, dtype=np.float64))[::-1]
    weights = constants.decay_weight ** np.arange(len(strains), dtype=np.float64)
    difficulty = float(np.sum(strains * weights))
    return difficulty * constants.difficulty_multiplier * constants.star_scaling_factor


def consistency_error(summed_strains: Sequence[float], constants: StrainConstants) -> float:
    """Normalised spread of the per-window strain sums.

    Mean over windows of ``((max - sum) / mean) ** error_exponent``,
    divided by ``error_divisor``.

    Returns:
        Non-negative error; ``0.0`` when there are no windows or the
        mean is zero.
    """
    if len(summed_strains) == 0:
        return 0.0

    sums = np.asarray(summed_strains, dtype=np.float64)
    mean = float(np.mean(sums))
    if mean <= 0.0:
        return 0.0

    peak = float(np.max(sums))
    deviations = ((peak - sums) / mean) ** constants.error_exponent
    return float(np.mean(deviations)) / constants.error_divisor


def rating_weight(difficulty: float, constants: StrainConstants) -> float:
    """Influence of the consistency adjustment, in ``[0, 1]``."""
    return min(difficulty / constants.rating_weight_divisor, 1.0)


def consistency_adjustment(error: float, weight: float, constants: StrainConstants) -> float:
    """Bonus (``error <= bonus_threshold``) or penalty multiplier.

    The result always lies in ``[1 - penalty_max * weight,
    1 + bonus_max * weight]``.

    Args:
        error: Output of :func:`consistency_error`.
        weight: Output of :func:`rating_weight`.
        constants: Calibration table.
    """
    threshold = constants.bonus_threshold
    if error <= threshold:
        closeness = (threshold - error) / threshold
        return 1 + ((closeness ** constants.bonus_exponent) * constants.bonus_max) * weight

    remaining = max(constants.penalty_range - (error - threshold), 0.0) / constants.penalty_range
    return 1 - (
        (constants.penalty_max - remaining ** constants.penalty_exponent * constants.penalty_max)
        * weight
    )


def aggregate_rating(
    highest_strains: Sequence[float],
    summed_strains: Sequence[float],
    constants: StrainConstants,
) -> tuple[float, float]:
    """Combine window statistics into the final star rating.

    Args:
        highest_strains: Peak strain per window.
        summed_strains: Summed strain per window.
        constants: Calibration table.

    Returns:
        ``(star_rating, consistency_error)``.
    """
    difficulty = weighted_difficulty(highest_strains, constants)
    error = consistency_error(summed_strains, constants)
    weight = rating_weight(difficulty, constants)

    star_rating = (1 - constants.base_damping * weight) * difficulty
    star_rating *= consistency_adjustment(error, weight, constants)
    return star_rating, error
