"""Shared fixtures for the strain rating tests."""

from pathlib import Path

import numpy as np
import pytest
import yaml

from strain_engine.constants import DEFAULT_CONFIG_PATH, StrainConstants
from strain_engine.notes import Note


def _random_chart(seed, column_count=4, note_count=80, hold_ratio=0.25):
    """Chart with integer-ms times, same-start chords and some holds."""
    rng = np.random.default_rng(seed)
    notes = []
    time = 0
    for _ in range(note_count):
        time += int(rng.integers(0, 180))
        column = int(rng.integers(0, column_count))
        end = time
        if rng.random() < hold_ratio:
            end = time + int(rng.integers(40, 600))
        notes.append(Note(column=column, start_time=float(time), end_time=float(end)))
    return notes


@pytest.fixture
def constants():
    return StrainConstants()


@pytest.fixture
def random_chart():
    return _random_chart


@pytest.fixture
def write_config(tmp_path):
    """Write a copy of the default table with overrides / removed keys."""

    def _write(overrides=None, remove=(), name="strain_constants.yaml") -> Path:
        with open(DEFAULT_CONFIG_PATH, "r", encoding="utf-8") as fh:
            cfg = yaml.safe_load(fh)
        cfg.update(overrides or {})
        for key in remove:
            cfg.pop(key, None)
        path = tmp_path / name
        with open(path, "w", encoding="utf-8") as fh:
            yaml.safe_dump(cfg, fh)
        return path

    return _write
