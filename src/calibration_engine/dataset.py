"""Dataset — load and validate chart files with reference ratings.

Chart files are JSON objects::

    {
      "column_count": 4,
      "overall_difficulty": 8.0,
      "is_convert": false,
      "reference_rating": 2.41,
      "notes": [
        {"column": 0, "start_time": 0.0},
        {"column": 2, "start_time": 250.0, "end_time": 750.0},
        ...
      ]
    }

``overall_difficulty``, ``is_convert``, ``reference_rating`` and a note's
``end_time`` are optional. Reference sets are directories of such files;
only charts carrying a ``reference_rating`` take part in calibration.
"""

from __future__ import annotations

import json
import math
from pathlib import Path
from typing import Any

from strain_engine.calculator import DEFAULT_OVERALL_DIFFICULTY
from strain_engine.notes import Note


def _parse_note(entry: Any, index: int, column_count: int, name: str) -> Note:
    if not isinstance(entry, dict):
        raise ValueError(f"Note {index} in '{name}' must be an object")

    for key in ("column", "start_time"):
        if key not in entry:
            raise ValueError(f"Note {index} in '{name}' is missing required key '{key}'")

    column = int(entry["column"])
    start_time = float(entry["start_time"])
    end_time = entry.get("end_time")
    end_time = start_time if end_time is None else float(end_time)

    if not 0 <= column < column_count:
        raise ValueError(
            f"Note {index} in '{name}': column must be in [0, {column_count}), got {column}"
        )
    if not (math.isfinite(start_time) and math.isfinite(end_time)) or start_time < 0:
        raise ValueError(
            f"Note {index} in '{name}': times must be finite and non-negative"
        )
    if end_time < start_time:
        raise ValueError(
            f"Note {index} in '{name}': end_time {end_time} precedes start_time {start_time}"
        )

    return Note(column=column, start_time=start_time, end_time=end_time)


def load_chart(json_path: str | Path) -> dict[str, Any]:
    """Load and validate a single chart file.

    Args:
        json_path: Path to a chart ``.json`` file.

    Returns:
        A dict containing:
            - ``stem``               (str):   base filename stem
            - ``notes``              (list):  validated :class:`Note` objects
            - ``column_count``       (int)
            - ``overall_difficulty`` (float)
            - ``is_convert``         (bool)
            - ``reference_rating``   (float | None)

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If the chart or any note fails validation.
    """
    path = Path(json_path)
    if not path.exists():
        raise FileNotFoundError(f"Chart file not found: {path}")

    with open(path, "r", encoding="utf-8") as fh:
        data = json.load(fh)

    if not isinstance(data, dict):
        raise ValueError(
            f"Chart file must contain a JSON object, got {type(data).__name__}: {path}"
        )

    for key in ("column_count", "notes"):
        if key not in data:
            raise ValueError(f"Chart '{path.name}' is missing required key '{key}'")

    column_count = int(data["column_count"])
    if column_count < 1:
        raise ValueError(f"Chart '{path.name}': column_count must be at least 1")
    if not isinstance(data["notes"], list):
        raise ValueError(f"Chart '{path.name}': notes must be a JSON array")

    notes = [
        _parse_note(entry, i, column_count, path.name)
        for i, entry in enumerate(data["notes"])
    ]

    reference = data.get("reference_rating")
    return {
        "stem": path.stem,
        "notes": notes,
        "column_count": column_count,
        "overall_difficulty": float(data.get("overall_difficulty", DEFAULT_OVERALL_DIFFICULTY)),
        "is_convert": bool(data.get("is_convert", False)),
        "reference_rating": None if reference is None else float(reference),
    }


def load_reference_set(charts_dir: str | Path) -> list[dict[str, Any]]:
    """Load every chart with a reference rating from *charts_dir*.

    Args:
        charts_dir: Directory of chart ``.json`` files.

    Returns:
        Charts (as returned by :func:`load_chart`), sorted by filename,
        that carry a ``reference_rating``.

    Raises:
        FileNotFoundError: If the directory does not exist or holds no
            chart with a reference rating.
    """
    charts_dir = Path(charts_dir)
    if not charts_dir.is_dir():
        raise FileNotFoundError(f"Charts directory not found: {charts_dir}")

    charts = [load_chart(path) for path in sorted(charts_dir.glob("*.json"))]
    charts = [chart for chart in charts if chart["reference_rating"] is not None]
    if not charts:
        raise FileNotFoundError(
            f"No chart with a reference_rating found in: {charts_dir}"
        )
    return charts
