"""Interval Binner — sample the strain fold into fixed time windows.

Windows are ``strain_step * time_rate`` ms of chart time wide and start at
time 0. For every window two statistics are kept:

    - ``highest_strains`` : peak combined strain (individual + overall)
    - ``summed_strains``  : sum of combined strains of notes starting in it

A window entered without a note of its own does not start from zero: the
peak carried into it is the last note's strain decayed up to the window
boundary.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence

from .constants import StrainConstants
from .strain_state import StrainState


@dataclass
class StrainIntervals:
    """Per-window statistics, one entry per window in time order."""

    highest_strains: list[float] = field(default_factory=list)
    summed_strains: list[float] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.highest_strains)


def bin_strains(
    states: Sequence[StrainState],
    time_rate: float,
    constants: StrainConstants,
) -> StrainIntervals:
    """Bin reconciled strain states into fixed windows.

    Args:
        states: Output of :func:`transition.calculate_strains`.
        time_rate: Playback rate multiplier (> 0).
        constants: Calibration table (``strain_step``).

    Returns:
        A :class:`StrainIntervals`; empty when *states* is empty. The
        window holding the last note is included.
    """
    if not states:
        return StrainIntervals()

    step = constants.strain_step * time_rate
    intervals = StrainIntervals(summed_strains=[0.0])
    interval_end = step
    maximum = 0.0
    previous: StrainState | None = None

    for state in states:
        # Close every window that ends before this note
        while state.start_time > interval_end:
            intervals.highest_strains.append(maximum)
            intervals.summed_strains.append(0.0)

            if previous is None:
                maximum = 0.0
            else:
                maximum = previous.decayed_combined_strain(interval_end, time_rate, constants)

            interval_end += step

        strain = state.combined_strain
        intervals.summed_strains[-1] += strain
        maximum = max(strain, maximum)
        previous = state

    intervals.highest_strains.append(maximum)
    return intervals
