"""Strain Constants — configurable calibration table for the strain model.

All constants are loaded from ``configs/strain_constants.yaml``.
No hardcoded constants: if a required key is missing from the YAML,
a ``ValueError`` is raised with a clear message. Tables built in memory
(calibration trials) go through :meth:`StrainConstants.from_table` and the
same validation.

Methods:
    individual_decay      – per-column (jack) strain decay over elapsed time
    overall_decay         – global density strain decay over elapsed time
    hold_decay            – slower per-column decay while a hold is sounding
    hold_factor           – press multiplier for simultaneously held columns
    tail_scale            – duration ramp × column-count scaling of tail bonuses
    individual_tail_bonus – own-column bonus for releasing a hold
    overall_tail_bonus    – overall bonus for releasing a hold
    great_hit_window      – great judgement window range over overall difficulty
"""

from __future__ import annotations

import copy
import functools
import logging
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH: Path = Path(__file__).resolve().parent / "configs" / "strain_constants.yaml"

# Scalar keys; every one of them is coerced to float on load.
_FLOAT_KEYS: list[str] = [
    "individual_decay_base",
    "overall_decay_base",
    "individual_decay_hold_base",
    "first_note_individual_strain",
    "first_note_overall_strain",
    "individual_press_strain",
    "overall_press_strain",
    "hold_addition",
    "hold_factor_first",
    "hold_factor_asymptote",
    "hold_factor_approach",
    "tail_individual_bonus",
    "tail_overall_bonus",
    "tail_duration_threshold",
    "tail_column_exponent",
    "strain_step",
    "decay_weight",
    "difficulty_multiplier",
    "star_scaling_factor",
    "error_exponent",
    "error_divisor",
    "rating_weight_divisor",
    "base_damping",
    "bonus_threshold",
    "bonus_exponent",
    "bonus_max",
    "penalty_range",
    "penalty_exponent",
    "penalty_max",
]

_HIT_WINDOW_KEYS: tuple[str, str, str] = ("od0", "od5", "od10")


class StrainConstants:
    """Calibration table for the strain recurrence and the aggregator.

    Args:
        config_path: Path to the YAML configuration file.
            Defaults to the table shipped with the package.
    """

    def __init__(self, config_path: str | Path | None = None) -> None:
        if config_path is None:
            config_path = DEFAULT_CONFIG_PATH
        else:
            config_path = Path(config_path)

        if not config_path.exists():
            raise FileNotFoundError(f"Strain config not found: {config_path}")

        with open(config_path, "r", encoding="utf-8") as fh:
            table = yaml.safe_load(fh) or {}

        self._load(table, str(config_path))
        self.config_path: Path | None = config_path
        logger.debug(f"Loaded strain constants from {config_path}")

    @classmethod
    def from_table(cls, table: dict[str, Any], source: str = "<table>") -> StrainConstants:
        """Build constants from an already parsed table (same validation as a file)."""
        constants = cls.__new__(cls)
        constants._load(copy.deepcopy(table), source)
        constants.config_path = None
        return constants

    def _load(self, table: dict[str, Any], source: str) -> None:
        self._cfg: dict[str, Any] = table

        # Validate required keys
        required_keys = _FLOAT_KEYS + ["tail_reference_columns", "great_hit_window"]
        for key in required_keys:
            if key not in self._cfg:
                raise ValueError(f"Missing required key '{key}' in strain config: {source}")

        for key in _FLOAT_KEYS:
            setattr(self, key, float(self._cfg[key]))
        self.tail_reference_columns: int = int(self._cfg["tail_reference_columns"])

        window_range: dict[str, Any] = self._cfg["great_hit_window"]
        for key in _HIT_WINDOW_KEYS:
            if key not in window_range:
                raise ValueError(
                    f"Missing great_hit_window entry '{key}' in strain config: {source}"
                )
        self.great_hit_window_range: tuple[float, float, float] = tuple(
            float(window_range[key]) for key in _HIT_WINDOW_KEYS
        )

        for key in ("individual_decay_base", "overall_decay_base", "individual_decay_hold_base"):
            base = getattr(self, key)
            if not 0.0 < base < 1.0:
                raise ValueError(f"'{key}' must lie in (0, 1), got {base}: {source}")

        # The hold factor must grow with every held column, towards the asymptote
        if not 1.0 <= self.hold_factor_first < self.hold_factor_asymptote:
            raise ValueError(
                "hold factors must satisfy 1 <= hold_factor_first < hold_factor_asymptote, "
                f"got {self.hold_factor_first} and {self.hold_factor_asymptote}: {source}"
            )
        if not 0.0 < self.hold_factor_approach < 1.0:
            raise ValueError(
                f"'hold_factor_approach' must lie in (0, 1), got "
                f"{self.hold_factor_approach}: {source}"
            )

    # ── Decay ─────────────────────────────────────────────────

    def individual_decay(self, elapsed: float) -> float:
        """Fraction of per-column strain left after *elapsed* ms."""
        return self.individual_decay_base ** (elapsed / 1000)

    def overall_decay(self, elapsed: float) -> float:
        """Fraction of overall strain left after *elapsed* ms."""
        return self.overall_decay_base ** (elapsed / 1000)

    def hold_decay(self, duration: float) -> float:
        """Fraction of per-column strain left after holding for *duration* ms."""
        return self.individual_decay_hold_base ** (duration / 1000)

    # ── Holds ─────────────────────────────────────────────────

    def hold_factor(self, held_columns: int) -> float:
        """Multiplier for press contributions while other columns are held.

        The first held column grants ``hold_factor_first``; each further one
        closes ``hold_factor_approach`` of the remaining distance to
        ``hold_factor_asymptote``.

        Args:
            held_columns: Number of columns held past the current note's end.

        Returns:
            ``1.0`` when nothing is held, otherwise a factor in
            ``[hold_factor_first, hold_factor_asymptote)``.
        """
        if held_columns <= 0:
            return 1.0
        factor = self.hold_factor_first
        for _ in range(held_columns - 1):
            factor += (self.hold_factor_asymptote - factor) * self.hold_factor_approach
        return factor

    def tail_scale(self, duration: float, column_count: int) -> float:
        """Scale applied to hold tail bonuses.

        Ramps linearly from 0 to 1 over ``tail_duration_threshold`` ms of
        hold duration, and shrinks for charts wider than
        ``tail_reference_columns``.

        Args:
            duration: Hold duration in ms of real time.
            column_count: Number of key columns.

        Returns:
            Scale in ``[0.0, 1.0]``.
        """
        ramp = min(max(duration, 0.0) / self.tail_duration_threshold, 1.0)
        key_scale = min(
            (self.tail_reference_columns / column_count) ** self.tail_column_exponent, 1.0
        )
        return ramp * key_scale

    def individual_tail_bonus(self, duration: float, column_count: int) -> float:
        return self.tail_individual_bonus * self.tail_scale(duration, column_count)

    def overall_tail_bonus(self, duration: float, column_count: int) -> float:
        return self.tail_overall_bonus * self.tail_scale(duration, column_count)

    # ── Hit windows ───────────────────────────────────────────

    def great_hit_window(self, overall_difficulty: float) -> float:
        """Full great judgement window (ms) for an overall difficulty.

        Interpolates linearly between the OD 0 / 5 / 10 anchors.
        """
        od0, od5, od10 = self.great_hit_window_range
        if overall_difficulty > 5:
            return od5 + (od10 - od5) * (overall_difficulty - 5) / 5
        if overall_difficulty < 5:
            return od5 - (od5 - od0) * (5 - overall_difficulty) / 5
        return od5

    def as_dict(self) -> dict[str, Any]:
        """Return a copy of the raw configuration table."""
        return copy.deepcopy(self._cfg)


@functools.lru_cache(maxsize=1)
def default_constants() -> StrainConstants:
    """Load (once) the constants table shipped with the package."""
    return StrainConstants()
