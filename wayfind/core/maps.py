# wayfind/core/maps.py
#!/usr/bin/env python3
"""
JSON grid maps.

    {
      "name": "...",                         optional
      "width": 4, "height": 3,
      "start": [x, y], "goal": [x, y],
      "corners": "CUT",                      optional, default NONE
      "cells": [[1, 1, 0, 1], ...],          one list per row
      "weights": {"2": 5, "9": "BLOCK"}      optional legend, code -> cost
    }

Cell codes missing from the legend are their own cost; "BLOCK" means 0.
"""

import json
import logging
import math
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Union

from wayfind.core.square_grid import SquareGrid
from wayfind.core.types import (
    Corners,
    MapFormatError,
    OutOfBoundsError,
    Position,
    SizeMismatchError,
)

logger = logging.getLogger(__name__)

BLOCK = "BLOCK"

# sample maps ship inside the package (see package-data in pyproject.toml)
MAP_DIR = Path(__file__).resolve().parents[1] / "maps"


@dataclass
class GridMap:
    name: str
    grid: SquareGrid
    start: Position
    goal: Position
    corners: Corners = Corners.NONE

    def find(self) -> List[int]:
        return self.grid.find(self.start, self.goal, self.corners)


def _position(data: Dict[str, Any], key: str) -> Position:
    value = data.get(key)
    if not isinstance(value, (list, tuple)) or len(value) != 2:
        raise MapFormatError(f"{key!r} must be an [x, y] pair")
    try:
        x, y = value
        return int(x), int(y)
    except (TypeError, ValueError) as ex:
        raise MapFormatError(f"{key!r} must be an [x, y] pair") from ex


def _cost(code: Any, weights: Dict[str, Any]) -> float:
    w = weights.get(str(code), code)
    if w == BLOCK:
        return 0
    if isinstance(w, bool) or not isinstance(w, (int, float)) or not math.isfinite(w) or w < 0:
        raise MapFormatError(f"cell code {code!r} has invalid cost {w!r}")
    return w


def parse_map(data: Dict[str, Any], name: str = "custom") -> GridMap:
    try:
        width = int(data["width"])
        height = int(data["height"])
        rows = data["cells"]
    except (KeyError, TypeError, ValueError) as ex:
        raise MapFormatError(f"map needs integer width/height and cells: {ex}") from ex

    if not isinstance(rows, list) or not all(isinstance(r, list) for r in rows):
        raise MapFormatError("cells must be a list of rows")
    if len(rows) != height or any(len(r) != width for r in rows):
        raise SizeMismatchError(width, height, sum(len(r) for r in rows))

    weights = data.get("weights", {})
    if not isinstance(weights, dict):
        raise MapFormatError("weights must be an object mapping cell codes to costs")
    costs = [_cost(code, weights) for row in rows for code in row]
    grid = SquareGrid(width, height, costs)

    start = _position(data, "start")
    goal = _position(data, "goal")
    for label, p in (("start", start), ("goal", goal)):
        if not grid.in_bounds(p):
            raise OutOfBoundsError(f"{label} {p} out of bounds for {width}x{height} map")

    try:
        corners = Corners.parse(data.get("corners", Corners.NONE))
    except ValueError as ex:
        raise MapFormatError(str(ex)) from ex

    return GridMap(str(data.get("name", name)), grid, start, goal, corners)


def load_map(path: Union[str, Path]) -> GridMap:
    path = Path(path)
    with open(path, "r") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as ex:
            raise MapFormatError(f"{path.name}: {ex}") from ex
    if not isinstance(data, dict):
        raise MapFormatError(f"{path.name}: top level must be an object")
    m = parse_map(data, name=path.stem)
    logger.debug("loaded map %s (%dx%d, %s)", m.name, m.grid.width, m.grid.height, m.corners.name)
    return m


def list_maps(directory: Union[str, Path]) -> Dict[str, Path]:
    """Map files in `directory`, keyed by file stem, sorted."""
    return {p.stem: p for p in sorted(Path(directory).glob("*.json"))}
