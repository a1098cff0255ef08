"""Notes — immutable chart notes and their canonical processing order.

Responsibilities:
    - Define the :class:`Note` input record (tap or hold in one column).
    - Sort notes **deterministically** into the order the strain fold
      expects: ascending start time, then descending end time, then
      ascending column.

No strain logic lives here.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable


@dataclass(frozen=True)
class Note:
    """A single chart note.

    Args:
        column: Key column, ``0 <= column < column_count``.
        start_time: Press time in ms of chart time.
        end_time: Release time in ms. Defaults to ``start_time`` (a tap).
    """

    column: int
    start_time: float
    end_time: float | None = None

    def __post_init__(self) -> None:
        if self.end_time is None:
            object.__setattr__(self, "end_time", self.start_time)

    @property
    def is_hold(self) -> bool:
        return self.end_time > self.start_time

    @property
    def duration(self) -> float:
        """Hold length in ms of chart time (0 for taps)."""
        return self.end_time - self.start_time


def processing_key(note: Note) -> tuple[float, float, int]:
    """Sort key of the canonical processing order."""
    return (note.start_time, -note.end_time, note.column)


def sequence_notes(notes: Iterable[Note]) -> list[Note]:
    """Return *notes* in canonical processing order.

    All three keys are applied so the result does not depend on the
    order the caller supplied. The input is never mutated.

    Args:
        notes: Notes in any order.

    Returns:
        A new sorted list.
    """
    return sorted(notes, key=processing_key)
