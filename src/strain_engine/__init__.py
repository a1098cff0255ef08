"""Strain Engine — strain-based difficulty rating for multi-column charts.

Sub-package containing:
    notes         – note records and canonical processing order
    constants     – YAML calibration table and decay/bonus formulas
    strain_state  – per-note strain record and per-column bookkeeping
    transition    – strain recurrence folded over the note sequence
    binning       – per-window strain peaks and sums
    aggregation   – weighted sum and consistency bonus/penalty
    mods          – difficulty-adjusting mods and their combinations
    calculator    – orchestrates the pipeline and packages results
    cli           – ``strain-rating`` command line
"""

from .calculator import (
    DifficultyAttributes,
    calculate,
    calculate_all,
    calculate_with_mods,
)
from .constants import StrainConstants
from .mods import Mod, apply_mods
from .notes import Note, sequence_notes

__version__ = "0.1.0"

__all__ = [
    "DifficultyAttributes",
    "Mod",
    "Note",
    "StrainConstants",
    "apply_mods",
    "calculate",
    "calculate_all",
    "calculate_with_mods",
    "sequence_notes",
]
