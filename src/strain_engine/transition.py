"""Strain Transition — the per-note strain recurrence and its left fold.

State:      :class:`StrainState` of the previous note in processing order.
Transition: :func:`compute_transition` derives the current note's state
            from its predecessor and the elapsed (rate-adjusted) time.
Output:     one state per note, in canonical order, with same-start
            groups reconciled to a shared overall strain.

Design choices:
    - Strictly sequential; no randomness.
    - Same-start reconciliation is a two-phase pass: the group is
      collected first and written once it is complete.
    - Every state owns tuple snapshots of the per-column tables.
"""

from __future__ import annotations

from typing import Iterable

from .constants import StrainConstants
from .notes import Note, sequence_notes
from .strain_state import StrainState, reconcile_group, register_state, seed_state


def compute_transition(
    previous: StrainState,
    note: Note,
    column_count: int,
    time_rate: float,
    constants: StrainConstants,
) -> StrainState:
    """Compute the strain state of *note* from its predecessor.

    Args:
        previous: State of the immediately preceding note.
        note: The note being processed.
        column_count: Number of key columns.
        time_rate: Playback rate multiplier (> 0).
        constants: Calibration table.

    Returns:
        The new, not yet reconciled, :class:`StrainState`.
    """
    held_until = list(previous.held_until)
    prior_notes = list(previous.prior_notes)

    # ── Holds sounding around this note ──────────────────────
    awkward_release = False
    shared_release = False
    held_columns = 0
    for held in held_until:
        # Another hold ends strictly inside this note's span ...
        if note.start_time < held < note.end_time:
            awkward_release = True
        # ... unless something is released together with it.
        if held == note.end_time:
            shared_release = True
        if held > note.end_time:
            held_columns += 1

    hold_addition = constants.hold_addition if awkward_release and not shared_release else 0.0
    hold_factor = constants.hold_factor(held_columns)

    # ── Individual strain (own column) ───────────────────────
    occupant = prior_notes[note.column]
    individual = 0.0
    if occupant is not None:
        individual = occupant.residual_strain(note.start_time, column_count, time_rate, constants)
    individual += constants.individual_press_strain * hold_factor

    held_until[note.column] = max(held_until[note.column], note.end_time)

    # ── Overall strain ───────────────────────────────────────
    overall = previous.overall_strain
    cursor = previous.start_time
    pending_tails: list[StrainState] = []
    for tail in previous.pending_tails:
        if tail.end_time > note.start_time:
            pending_tails.append(tail)
            continue
        # Resolved tail: decay up to its release, then add the release bonus.
        tail_end = max(tail.end_time, cursor)
        overall *= constants.overall_decay((tail_end - cursor) / time_rate)
        overall += constants.overall_tail_bonus(tail.note.duration / time_rate, column_count)
        cursor = tail_end
    overall *= constants.overall_decay((note.start_time - cursor) / time_rate)
    overall += (constants.overall_press_strain + hold_addition) * hold_factor

    state = StrainState(
        note=note,
        individual_strain=individual,
        overall_strain=overall,
        shared_max_overall_strain=overall,
        held_until=tuple(held_until),
        hold_factor=hold_factor,
        hold_addition=hold_addition,
    )
    register_state(state, prior_notes, pending_tails)
    return state


def calculate_strains(
    notes: Iterable[Note],
    column_count: int,
    time_rate: float,
    constants: StrainConstants,
) -> list[StrainState]:
    """Fold the strain recurrence over *notes* in canonical order.

    Args:
        notes: Notes in any order; sorted here.
        column_count: Number of key columns.
        time_rate: Playback rate multiplier (> 0).
        constants: Calibration table.

    Returns:
        One reconciled :class:`StrainState` per note, in processing order.
        Empty when *notes* is empty.
    """
    states: list[StrainState] = []
    group: list[StrainState] = []

    for note in sequence_notes(notes):
        if not states:
            current = seed_state(note, column_count, constants)
        else:
            previous = states[-1]
            if note.start_time != previous.start_time:
                reconcile_group(group)
                group = []
            current = compute_transition(previous, note, column_count, time_rate, constants)

        group.append(current)
        states.append(current)

    reconcile_group(group)
    return states
