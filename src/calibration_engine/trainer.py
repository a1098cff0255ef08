"""Trainer — fit the hold and tail constants to reference ratings.

Each round visits the tunable keys in a fixed order. For one key, every
scaled candidate value is tried with all other keys held at their current
best, and the candidate with the lowest mean absolute rating error wins.
Rounds stop early once a full pass changes nothing.

Only the hold/tail entries move. The normal decay bases, the seed and
press strains, and the aggregation constants stay as loaded. Candidate
tables that :class:`StrainConstants` rejects (a decay base outside
``(0, 1)``, a hold factor that would shrink as more columns are held) are
never scored.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Iterator

import yaml

from strain_engine.constants import DEFAULT_CONFIG_PATH, StrainConstants

from .evaluator import evaluate_constants

logger = logging.getLogger(__name__)

# Visiting order is part of the result
TUNABLE_KEYS: tuple[str, ...] = (
    "individual_decay_hold_base",
    "hold_addition",
    "hold_factor_first",
    "hold_factor_asymptote",
    "hold_factor_approach",
    "tail_individual_bonus",
    "tail_overall_bonus",
    "tail_duration_threshold",
)

SCALE_STEPS: tuple[float, ...] = (0.5, 0.75, 0.9, 1.1, 1.25, 1.5, 2.0)


def _trial_tables(
    table: dict[str, Any], key: str
) -> Iterator[tuple[float, StrainConstants]]:
    """Yield ``(value, constants)`` for each valid rescaling of ``table[key]``."""
    current = float(table[key])
    for step in SCALE_STEPS:
        value = round(current * step, 6)
        if value <= 0 or value == current:
            continue
        trial = dict(table)
        trial[key] = value
        try:
            constants = StrainConstants.from_table(trial, source=f"trial {key}={value}")
        except ValueError as exc:
            logger.debug(f"Skipping {key}={value}: {exc}")
            continue
        yield value, constants


def _error(charts: list[dict[str, Any]], constants: StrainConstants) -> float:
    return evaluate_constants(charts, constants)["mean_absolute_error"]


def _save_table(
    path: Path, table: dict[str, Any], baseline_error: float, learned_error: float
) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    header = (
        "# Strain constants fitted by calibration_engine.trainer\n"
        f"# mean absolute rating error {baseline_error:.4f} -> {learned_error:.4f}\n\n"
    )
    with open(path, "w", encoding="utf-8") as fh:
        fh.write(header)
        yaml.safe_dump(table, fh, default_flow_style=False, sort_keys=False)


def calibrate(
    charts: list[dict[str, Any]],
    base_config_path: str | Path | None = None,
    output_config_path: str | Path | None = None,
    max_rounds: int = 3,
) -> dict[str, Any]:
    """Fit the hold/tail constants of a table to *charts*.

    Args:
        charts: Reference charts from :func:`dataset.load_reference_set`.
        base_config_path: Starting table. Defaults to the packaged one.
        output_config_path: Where to write the fitted table. Defaults to
            ``strain_constants_calibrated.yaml`` beside the starting table.
        max_rounds: Upper bound on full passes over the tunable keys.

    Returns:
        A dict with ``config`` (the fitted table), ``baseline_error``,
        ``learned_error`` and ``output_path``.

    Raises:
        FileNotFoundError: If ``base_config_path`` does not exist.
        ValueError: If ``charts`` is empty or the starting table is invalid.
    """
    if not charts:
        raise ValueError(
            "No reference charts provided. "
            "Add chart .json files with a reference_rating to the charts directory."
        )

    base_path = DEFAULT_CONFIG_PATH if base_config_path is None else Path(base_config_path)
    base = StrainConstants(base_path)
    output_path = (
        base_path.with_name("strain_constants_calibrated.yaml")
        if output_config_path is None
        else Path(output_config_path)
    )

    table = base.as_dict()
    baseline_error = _error(charts, base)
    error = baseline_error
    logger.info(f"Starting error {baseline_error:.4f} over {len(charts)} charts")

    for round_no in range(1, max_rounds + 1):
        changed = []
        for key in TUNABLE_KEYS:
            scored = [(_error(charts, c), value) for value, c in _trial_tables(table, key)]
            if not scored:
                continue
            best_error, best_value = min(scored)
            if best_error < error:
                logger.info(f"  {key}: {table[key]} -> {best_value} (error {best_error:.4f})")
                table[key] = best_value
                error = best_error
                changed.append(key)

        logger.info(f"Round {round_no}: error {error:.4f}, {len(changed)} keys moved")
        if not changed:
            break

    _save_table(output_path, table, baseline_error, error)
    logger.info(f"Calibrated table written to {output_path}")

    return {
        "config": table,
        "baseline_error": baseline_error,
        "learned_error": error,
        "output_path": output_path,
    }
