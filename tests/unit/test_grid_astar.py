import pytest

from wayfind.core.grid_astar import GridAStarSearch
from wayfind.core.square_grid import SquareGrid
from wayfind.core.types import Corners


def test_first_step_opens_and_scores_neighbours():
    grid = SquareGrid(3, 3, [1] * 9)
    algo = GridAStarSearch()
    algo.init(grid, 0, 8, Corners.PHASE)

    res = algo.step()
    assert res.status == "running"
    assert res.closed == [0]
    assert set(res.opened) == {1, 3, 4}
    assert algo.h[4] == 2
    assert algo.g[4] == pytest.approx(1.4)
    assert algo.f[4] == pytest.approx(3.4)
    assert algo.h[1] == 3 and algo.f[1] == 4


def test_steps_reach_same_path_as_find():
    grid = SquareGrid(4, 4, [
        1, 1, 1, 1,
        1, 0, 0, 1,
        1, 1, 0, 1,
        1, 1, 1, 1,
    ])
    algo = GridAStarSearch()
    algo.init(grid, 0, 15, Corners.CUT)

    res = algo.step()
    while res.status == "running":
        res = algo.step()
    assert res.status == "done"
    assert res.path == grid.find((0, 0), (3, 3), Corners.CUT)
    assert res.metrics["path_len"] == len(res.path)
    assert res.metrics["total_cost"] == algo.g[15]


def test_reset_replays_the_search():
    grid = SquareGrid(3, 3, [1] * 9)
    algo = GridAStarSearch()
    algo.init(grid, 0, 8, Corners.NONE)
    first = algo.run()
    algo.reset()
    assert algo.popped_count == 0
    assert algo.run() == first


def test_exhausted_open_set_reports_no_path():
    grid = SquareGrid(3, 1, [1, 0, 1])
    algo = GridAStarSearch()
    algo.init(grid, 0, 2, Corners.PHASE)
    assert algo.run() == []
    res = algo.step()
    assert res.status == "no_path"
    assert res.metrics["closed_count"] == 1
