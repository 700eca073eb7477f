import json
import math
from pathlib import Path

import pytest

from wayfind.core import maps as maps_module
from wayfind.core.maps import MAP_DIR, list_maps, load_map, parse_map
from wayfind.core.types import Corners, MapFormatError, OutOfBoundsError, SizeMismatchError


def _doc(**overrides):
    doc = {
        "width": 2,
        "height": 2,
        "start": [0, 0],
        "goal": [1, 1],
        "cells": [[1, 2], [9, 1]],
        "weights": {"2": 5, "9": "BLOCK"},
    }
    doc.update(overrides)
    return doc


def test_weights_legend_maps_codes_to_costs():
    m = parse_map(_doc())
    assert m.grid.costs == [1, 5, 0, 1]
    assert m.start == (0, 0) and m.goal == (1, 1)
    assert m.corners == Corners.NONE
    assert m.name == "custom"


def test_codes_without_legend_are_costs():
    m = parse_map(_doc(weights={}, corners="phase", name="plain"))
    assert m.grid.costs == [1, 2, 9, 1]
    assert m.corners == Corners.PHASE
    assert m.name == "plain"
    assert m.find() == [0, 3]


@pytest.mark.parametrize("overrides, error", [
    ({"cells": [[1, 1]]}, SizeMismatchError),
    ({"cells": [[1], [1]]}, SizeMismatchError),
    ({"goal": [2, 0]}, OutOfBoundsError),
    ({"start": "A1"}, MapFormatError),
    ({"corners": "DIAGONAL"}, MapFormatError),
    ({"weights": {"2": "mud"}}, MapFormatError),
    ({"weights": {"2": -1}}, MapFormatError),
    ({"cells": "1111"}, MapFormatError),
    ({"width": None}, MapFormatError),
    ({"weights": [1]}, MapFormatError),
    ({"start": "01"}, MapFormatError),
    ({"goal": [1, 1, 0]}, MapFormatError),
    ({"weights": {"2": math.nan}}, MapFormatError),
    ({"weights": {"2": math.inf}}, MapFormatError),
])
def test_bad_documents(overrides, error):
    with pytest.raises(error):
        parse_map(_doc(**overrides))


def test_load_map_from_file(tmp_path):
    path = tmp_path / "tiny.json"
    path.write_text(json.dumps(_doc(corners="CUT")))
    m = load_map(path)
    assert m.name == "tiny"
    assert m.corners == Corners.CUT


def test_load_map_rejects_invalid_json(tmp_path):
    path = tmp_path / "broken.json"
    path.write_text("{ not json")
    with pytest.raises(MapFormatError):
        load_map(path)

    path.write_text("[1, 2, 3]")
    with pytest.raises(MapFormatError):
        load_map(path)


def test_list_maps_is_sorted_by_stem(tmp_path):
    for name in ("b.json", "a.json", "notes.txt"):
        (tmp_path / name).write_text("{}")
    assert list(list_maps(tmp_path)) == ["a", "b"]


def test_bundled_maps_are_solvable():
    maps = list_maps(MAP_DIR)
    assert len(maps) >= 3
    for key, path in maps.items():
        m = load_map(path)
        path_cells = m.grid.path_to_positions(m.find())
        assert path_cells[0] == m.start, key
        assert path_cells[-1] == m.goal, key


def test_bundled_maps_live_inside_the_package():
    package_dir = Path(maps_module.__file__).resolve().parents[1]
    assert MAP_DIR == package_dir / "maps"
    assert sorted(p.name for p in MAP_DIR.glob("*.json")) == [
        "01_walls.json", "02_corners.json", "03_weighted_mud.json",
    ]
