"""Mods — difficulty-relevant modifiers and their effect on calculation input.

A mod never touches notes; it only changes the settings the calculator
runs with:

    DT / HT   – time rate × 1.5 / × 0.75
    EZ / HR   – overall difficulty × 0.5 / × 1.4 (capped at 10)
    1K … 9K   – column count (converted charts only)

Re-laying a chart out for a different column count is the converter's
job and happens outside this package.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Iterator, Sequence


class Mod(str, Enum):
    DOUBLE_TIME = "DT"
    HALF_TIME = "HT"
    EASY = "EZ"
    HARD_ROCK = "HR"
    KEY1 = "1K"
    KEY2 = "2K"
    KEY3 = "3K"
    KEY4 = "4K"
    KEY5 = "5K"
    KEY6 = "6K"
    KEY7 = "7K"
    KEY8 = "8K"
    KEY9 = "9K"

    @property
    def key_count(self) -> int | None:
        """Column count forced by a key mod, ``None`` for other mods."""
        if self.value.endswith("K"):
            return int(self.value[:-1])
        return None


KEY_MODS: list[Mod] = [mod for mod in Mod if mod.key_count is not None]

# Mods that change the rating of a chart in its own ruleset
DIFFICULTY_ADJUSTMENT_MODS: list[Mod] = [
    Mod.DOUBLE_TIME,
    Mod.HALF_TIME,
    Mod.EASY,
    Mod.HARD_ROCK,
]

_RATE_CHANGES: dict[Mod, float] = {
    Mod.DOUBLE_TIME: 1.5,
    Mod.HALF_TIME: 0.75,
}

_INCOMPATIBLE_GROUPS: list[set[Mod]] = [
    {Mod.DOUBLE_TIME, Mod.HALF_TIME},
    {Mod.EASY, Mod.HARD_ROCK},
    set(KEY_MODS),
]


@dataclass(frozen=True)
class ModdedSettings:
    """Calculator input after applying a set of mods."""

    column_count: int
    time_rate: float
    overall_difficulty: float


def parse_mods(text: str) -> tuple[Mod, ...]:
    """Parse a comma separated acronym list such as ``"DT,HR"``.

    Raises:
        ValueError: On an unknown acronym.
    """
    mods: list[Mod] = []
    for token in text.split(","):
        token = token.strip().upper()
        if not token:
            continue
        try:
            mods.append(Mod(token))
        except ValueError:
            raise ValueError(f"Unknown mod '{token}'") from None
    return tuple(mods)


def are_compatible(mods: Iterable[Mod]) -> bool:
    """Whether no two of *mods* belong to the same exclusive group."""
    mods = set(mods)
    return all(len(mods & group) <= 1 for group in _INCOMPATIBLE_GROUPS)


def apply_mods(
    mods: Iterable[Mod],
    column_count: int,
    time_rate: float = 1.0,
    overall_difficulty: float = 5.0,
) -> ModdedSettings:
    """Map a mod set onto ``(column_count, time_rate, overall_difficulty)``.

    Args:
        mods: Mods to apply.
        column_count: Chart column count before mods.
        time_rate: Base time rate.
        overall_difficulty: Chart overall difficulty before mods.

    Returns:
        The adjusted :class:`ModdedSettings`.

    Raises:
        ValueError: If *mods* contains incompatible mods.
    """
    mods = tuple(mods)
    if not are_compatible(mods):
        raise ValueError(f"Incompatible mods: {', '.join(m.value for m in mods)}")

    for mod in mods:
        if mod in _RATE_CHANGES:
            time_rate *= _RATE_CHANGES[mod]
        elif mod is Mod.EASY:
            overall_difficulty *= 0.5
        elif mod is Mod.HARD_ROCK:
            overall_difficulty = min(overall_difficulty * 1.4, 10.0)
        elif mod.key_count is not None:
            column_count = mod.key_count

    return ModdedSettings(column_count, time_rate, overall_difficulty)


def difficulty_adjustment_combinations(is_convert: bool = False) -> Iterator[tuple[Mod, ...]]:
    """Yield every compatible combination of difficulty-adjusting mods.

    The first combination is the empty one (no mods). Converted charts
    may additionally be played with any single key mod.

    Args:
        is_convert: Whether the chart was converted from another ruleset.
    """
    candidates = list(DIFFICULTY_ADJUSTMENT_MODS)
    if is_convert:
        candidates += KEY_MODS
    yield from _combinations((), candidates, 0)


def _combinations(
    current: tuple[Mod, ...], candidates: Sequence[Mod], start: int
) -> Iterator[tuple[Mod, ...]]:
    yield current
    for index in range(start, len(candidates)):
        extended = current + (candidates[index],)
        if not are_compatible(extended):
            continue
        yield from _combinations(extended, candidates, index + 1)
