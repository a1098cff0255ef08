"""Calculator — orchestrate the strain pipeline and package the result.

Responsibilities:
    1. Validate the calculation input at the boundary.
    2. Fold the strain recurrence over the canonical note order.
    3. Bin the strains into fixed windows.
    4. Aggregate the windows into a star rating.
    5. Return :class:`DifficultyAttributes` with auxiliary values.

:func:`calculate_all` repeats the calculation for every
difficulty-adjusting mod combination. Each run is independent.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Sequence

from .aggregation import aggregate_rating
from .binning import bin_strains
from .constants import StrainConstants, default_constants
from .mods import Mod, apply_mods, difficulty_adjustment_combinations
from .notes import Note
from .strain_state import StrainState
from .transition import calculate_strains

logger = logging.getLogger(__name__)

DEFAULT_OVERALL_DIFFICULTY: float = 5.0


@dataclass
class DifficultyAttributes:
    """Result of one difficulty calculation."""

    star_rating: float
    great_hit_window: float = 0.0
    mods: tuple[Mod, ...] = ()
    column_count: int = 0
    time_rate: float = 1.0
    note_count: int = 0
    consistency_error: float = 0.0
    strains: list[StrainState] | None = field(default=None, repr=False)

    def as_dict(self) -> dict[str, Any]:
        """JSON-friendly view (strain diagnostics excluded)."""
        return {
            "star_rating": self.star_rating,
            "great_hit_window": self.great_hit_window,
            "mods": [mod.value for mod in self.mods],
            "column_count": self.column_count,
            "time_rate": self.time_rate,
            "note_count": self.note_count,
            "consistency_error": self.consistency_error,
        }


def great_hit_window(
    overall_difficulty: float, time_rate: float, constants: StrainConstants
) -> float:
    """Half-width of the great judgement window in ms of real time."""
    # Half window truncated to whole ms before the rate is applied
    return int(constants.great_hit_window(overall_difficulty) / 2) / time_rate


def calculate(
    notes: Iterable[Note],
    column_count: int,
    time_rate: float = 1.0,
    overall_difficulty: float = DEFAULT_OVERALL_DIFFICULTY,
    constants: StrainConstants | None = None,
    mods: Sequence[Mod] = (),
    keep_strains: bool = False,
) -> DifficultyAttributes:
    """Rate one chart.

    Args:
        notes: Notes in any order. Never mutated.
        column_count: Number of key columns (>= max column + 1).
        time_rate: Playback rate multiplier (> 0).
        overall_difficulty: Chart overall difficulty, for the hit window.
        constants: Calibration table. Defaults to the packaged table.
        mods: Mods already folded into the other arguments; recorded only.
        keep_strains: Attach the per-note strain states for diagnostics.

    Returns:
        :class:`DifficultyAttributes`. A chart without notes rates ``0.0``.

    Raises:
        ValueError: If *time_rate* or *column_count* is not positive, or a
            note lies outside ``[0, column_count)``.
    """
    if time_rate <= 0:
        raise ValueError(f"time_rate must be positive, got {time_rate}")
    if column_count < 1:
        raise ValueError(f"column_count must be at least 1, got {column_count}")

    if constants is None:
        constants = default_constants()

    notes = list(notes)
    if not notes:
        return DifficultyAttributes(
            star_rating=0.0,
            mods=tuple(mods),
            column_count=column_count,
            time_rate=time_rate,
            strains=[] if keep_strains else None,
        )

    for note in notes:
        if not 0 <= note.column < column_count:
            raise ValueError(
                f"Note column {note.column} outside [0, {column_count}) at {note.start_time}ms"
            )

    # ── Pipeline ──────────────────────────────────────────────
    states = calculate_strains(notes, column_count, time_rate, constants)
    intervals = bin_strains(states, time_rate, constants)
    star_rating, error = aggregate_rating(
        intervals.highest_strains, intervals.summed_strains, constants
    )

    logger.debug(
        f"Rated {len(states)} notes over {len(intervals)} windows "
        f"({column_count}K, rate {time_rate:g}): {star_rating:.4f}"
    )

    return DifficultyAttributes(
        star_rating=star_rating,
        great_hit_window=great_hit_window(overall_difficulty, time_rate, constants),
        mods=tuple(mods),
        column_count=column_count,
        time_rate=time_rate,
        note_count=len(states),
        consistency_error=error,
        strains=states if keep_strains else None,
    )


def calculate_with_mods(
    notes: Iterable[Note],
    column_count: int,
    mods: Sequence[Mod] = (),
    overall_difficulty: float = DEFAULT_OVERALL_DIFFICULTY,
    constants: StrainConstants | None = None,
) -> DifficultyAttributes:
    """Apply *mods* to the chart settings, then :func:`calculate`."""
    settings = apply_mods(mods, column_count, 1.0, overall_difficulty)
    return calculate(
        notes,
        settings.column_count,
        time_rate=settings.time_rate,
        overall_difficulty=settings.overall_difficulty,
        constants=constants,
        mods=mods,
    )


def calculate_all(
    notes: Sequence[Note],
    column_count: int,
    overall_difficulty: float = DEFAULT_OVERALL_DIFFICULTY,
    is_convert: bool = False,
    convert_notes: Callable[[int], Sequence[Note]] | None = None,
    constants: StrainConstants | None = None,
) -> list[DifficultyAttributes]:
    """Rate a chart under every difficulty-adjusting mod combination.

    Args:
        notes: The chart's notes.
        column_count: The chart's column count.
        overall_difficulty: The chart's overall difficulty.
        is_convert: Whether key mods apply (converted charts only).
        convert_notes: Re-lays the source chart out for a given column
            count. Required when *is_convert* is set.
        constants: Calibration table. Defaults to the packaged table.

    Returns:
        One :class:`DifficultyAttributes` per combination, no-mod first.

    Raises:
        ValueError: If *is_convert* is set without *convert_notes*.
    """
    if is_convert and convert_notes is None:
        raise ValueError("Converted charts need convert_notes to apply key mods")

    if constants is None:
        constants = default_constants()

    results: list[DifficultyAttributes] = []
    for combination in difficulty_adjustment_combinations(is_convert):
        chart_notes: Sequence[Note] = notes
        key_mod = next((mod for mod in combination if mod.key_count is not None), None)
        if key_mod is not None:
            chart_notes = convert_notes(key_mod.key_count)

        results.append(
            calculate_with_mods(
                chart_notes,
                column_count,
                mods=combination,
                overall_difficulty=overall_difficulty,
                constants=constants,
            )
        )
    return results
