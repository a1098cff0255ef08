"""Strain State — per-note strain record and per-column bookkeeping.

Each processed note gets one :class:`StrainState`. A state owns its own
snapshot of the per-column tables (``held_until``, ``prior_notes``) and
of the pending hold tails, stored as tuples, so no two states ever share
a mutable container. Fields are filled in after construction at two
points only: :func:`register_state` sets ``prior_notes`` and
``pending_tails`` right after the state is built, and
:func:`reconcile_group` rewrites ``overall_strain`` and
``shared_max_overall_strain`` once the notes sharing a start time are
complete.

Per-column individual strain is only stored for a state's own column.
The strain of any other column at this point in time is read through the
``prior_notes`` back-references and decayed on demand
(:meth:`StrainState.column_strain`).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence

from .constants import StrainConstants
from .notes import Note


@dataclass(eq=False)
class StrainState:
    """Derived strain values for one note.

    Attributes:
        note: The note this state belongs to.
        individual_strain: Jack strain of the note's own column.
        overall_strain: Global density strain.
        shared_max_overall_strain: Maximum overall strain among the notes
            sharing this note's start time.
        held_until: Per column, the time through which a hold sounds.
        prior_notes: Per column, the latest state owning that column,
            this state included for its own column.
        pending_tails: Unresolved holds, ascending by end time.
        hold_factor: Press multiplier applied to this note.
        hold_addition: Awkward-release addition applied to this note.
    """

    note: Note
    individual_strain: float
    overall_strain: float
    shared_max_overall_strain: float = 0.0
    held_until: tuple[float, ...] = ()
    prior_notes: tuple[StrainState | None, ...] = field(default=(), repr=False)
    pending_tails: tuple[StrainState, ...] = field(default=(), repr=False)
    hold_factor: float = 1.0
    hold_addition: float = 0.0

    @property
    def column(self) -> int:
        return self.note.column

    @property
    def start_time(self) -> float:
        return self.note.start_time

    @property
    def end_time(self) -> float:
        return self.note.end_time

    @property
    def is_hold(self) -> bool:
        return self.note.is_hold

    @property
    def combined_strain(self) -> float:
        return self.individual_strain + self.overall_strain

    def residual_strain(
        self,
        time: float,
        column_count: int,
        time_rate: float,
        constants: StrainConstants,
    ) -> float:
        """Individual strain this note leaves in its column at *time*.

        A tap decays with the normal individual base from its start. A
        hold decays with the slower hold base over its own duration,
        gains the tail release bonus, then decays normally from its end.

        Args:
            time: Chart time (ms) to evaluate at, not before this note.
            column_count: Number of key columns.
            time_rate: Playback rate multiplier.
            constants: Calibration table.

        Returns:
            Non-negative residual strain.
        """
        if not self.is_hold:
            elapsed = (time - self.start_time) / time_rate
            return self.individual_strain * constants.individual_decay(elapsed)

        duration = self.note.duration / time_rate
        strain = self.individual_strain * constants.hold_decay(duration)
        strain += constants.individual_tail_bonus(duration, column_count)
        gap = max(time - self.end_time, 0.0) / time_rate
        return strain * constants.individual_decay(gap)

    def column_strain(
        self,
        column: int,
        column_count: int,
        time_rate: float,
        constants: StrainConstants,
    ) -> float:
        """Individual strain of any *column* at this state's start time.

        Diagnostic view of the conceptual per-column strain vector.
        """
        if column == self.column:
            return self.individual_strain
        occupant = self.prior_notes[column]
        if occupant is None:
            return 0.0
        return occupant.residual_strain(self.start_time, column_count, time_rate, constants)

    def decayed_combined_strain(
        self, time: float, time_rate: float, constants: StrainConstants
    ) -> float:
        """Combined strain carried from this note to a later *time*."""
        elapsed = (time - self.start_time) / time_rate
        return (
            self.individual_strain * constants.individual_decay(elapsed)
            + self.overall_strain * constants.overall_decay(elapsed)
        )


def seed_state(note: Note, column_count: int, constants: StrainConstants) -> StrainState:
    """Build the state of the first processed note.

    The first note is anchored at fixed seed strains rather than derived
    from a predecessor.

    Args:
        note: First note in processing order.
        column_count: Number of key columns.
        constants: Calibration table.

    Returns:
        The seeded :class:`StrainState`.
    """
    held_until = [0.0] * column_count
    held_until[note.column] = note.end_time

    state = StrainState(
        note=note,
        individual_strain=constants.first_note_individual_strain,
        overall_strain=constants.first_note_overall_strain,
        shared_max_overall_strain=constants.first_note_overall_strain,
        held_until=tuple(held_until),
    )
    register_state(state, [None] * column_count, [])
    return state


def register_state(
    state: StrainState,
    prior_notes: list[StrainState | None],
    pending_tails: list[StrainState],
) -> None:
    """Make *state* its column's occupant and queue it if it is a hold.

    *prior_notes* and *pending_tails* are the caller's working copies;
    they are frozen into tuples owned by *state*.
    """
    prior_notes[state.column] = state
    if state.is_hold:
        insert_tail(pending_tails, state)
    state.prior_notes = tuple(prior_notes)
    state.pending_tails = tuple(pending_tails)


def insert_tail(pending_tails: list[StrainState], state: StrainState) -> None:
    """Insert *state* keeping *pending_tails* ascending by end time.

    Tails with equal end times keep their insertion order.
    """
    index = len(pending_tails)
    while index > 0 and pending_tails[index - 1].end_time > state.end_time:
        index -= 1
    pending_tails.insert(index, state)


def reconcile_group(group: Sequence[StrainState]) -> float:
    """Give every state of a same-start group the group's maximum overall strain.

    Applied once all members of the group have been produced. Applying
    it again leaves the group unchanged.

    Args:
        group: States sharing one start time.

    Returns:
        The shared maximum (``0.0`` for an empty group).
    """
    if not group:
        return 0.0
    shared = max(state.overall_strain for state in group)
    for state in group:
        state.overall_strain = shared
        state.shared_max_overall_strain = shared
    return shared
