import pytest

from wayfind.core.square_grid import SquareGrid
from wayfind.core.types import Corners, OutOfBoundsError, SizeMismatchError


def _is_step(a, b, diagonal_ok):
    dx, dy = abs(a[0] - b[0]), abs(a[1] - b[1])
    if diagonal_ok:
        return max(dx, dy) == 1
    return dx + dy == 1


def test_size_mismatch():
    with pytest.raises(SizeMismatchError):
        SquareGrid(3, 3, [1] * 8)
    with pytest.raises(ValueError):
        SquareGrid(2, 1, [])


def test_costs_are_copied():
    costs = [1, 1, 1, 1]
    grid = SquareGrid(2, 2, costs)
    costs[3] = 0
    assert grid.find((0, 0), (1, 1)) != []


def test_index_conversions_are_row_major():
    grid = SquareGrid(3, 2, [1] * 6)
    assert grid.position_to_index(2, 1) == 5
    assert grid.index_to_position(5) == (2, 1)
    assert grid.index_to_position(3) == (0, 1)
    assert grid.in_bounds((2, 1)) and not grid.in_bounds((3, 0))
    assert not grid.is_block((0, 0)) and grid.cost_of((2, 1)) == 1


def test_phase_walks_the_diagonal():
    grid = SquareGrid(3, 3, [1] * 9)
    path = grid.find((0, 0), (2, 2), Corners.PHASE)
    assert path == [0, 4, 8]
    assert grid.path_to_positions(path) == [(0, 0), (1, 1), (2, 2)]
    assert grid.path_cost(path) == pytest.approx(2.8)


def test_none_walks_a_manhattan_route():
    grid = SquareGrid(3, 3, [1] * 9)
    cells = grid.path_to_positions(grid.find((0, 0), (2, 2), Corners.NONE))
    assert len(cells) == 5
    assert cells[0] == (0, 0) and cells[-1] == (2, 2)
    assert all(_is_step(a, b, diagonal_ok=False) for a, b in zip(cells, cells[1:]))


def test_default_policy_is_none():
    grid = SquareGrid(3, 3, [1] * 9)
    assert len(grid.find((0, 0), (2, 2))) == 5


def test_same_cell_and_unreachable():
    grid = SquareGrid(3, 3, [
        1, 0, 1,
        0, 0, 1,
        1, 1, 1,
    ])
    assert grid.find((2, 2), (2, 2)) == [8]
    assert grid.find((0, 0), (2, 2), Corners.WALK) == []
    # blocked target
    assert grid.find((2, 2), (1, 1), Corners.PHASE) == []


def test_blocked_origin_can_still_leave():
    grid = SquareGrid(2, 1, [0, 1])
    assert grid.find((0, 0), (1, 0)) == [0, 1]


def test_out_of_bounds_raises():
    grid = SquareGrid(2, 2, [1] * 4)
    with pytest.raises(OutOfBoundsError):
        grid.find((0, 0), (2, 0))
    with pytest.raises(OutOfBoundsError):
        grid.find((-1, 0), (1, 1))


def test_weighted_detour():
    grid = SquareGrid(3, 3, [
        1, 9, 1,
        1, 9, 1,
        1, 1, 1,
    ])
    path = grid.find((0, 0), (2, 0))
    assert grid.path_to_positions(path) == [
        (0, 0), (0, 1), (0, 2), (1, 2), (2, 2), (2, 1), (2, 0),
    ]
    assert grid.path_cost(path) == 6


# 3x3 with the centre at index 4
ONE_SIDE_BLOCKED = [
    1, 0, 1,
    1, 1, 1,
    1, 1, 1,
]
BOTH_SIDES_BLOCKED = [
    1, 0, 1,
    0, 1, 1,
    1, 1, 1,
]


@pytest.mark.parametrize("costs, corners, expected", [
    (ONE_SIDE_BLOCKED, Corners.NONE, {3, 5, 7}),
    (ONE_SIDE_BLOCKED, Corners.WALK, {3, 5, 6, 7, 8}),
    (ONE_SIDE_BLOCKED, Corners.CUT, {0, 2, 3, 5, 6, 7, 8}),
    (ONE_SIDE_BLOCKED, Corners.PHASE, {0, 2, 3, 5, 6, 7, 8}),
    (BOTH_SIDES_BLOCKED, Corners.NONE, {5, 7}),
    (BOTH_SIDES_BLOCKED, Corners.WALK, {5, 7, 8}),
    (BOTH_SIDES_BLOCKED, Corners.CUT, {2, 5, 6, 7, 8}),
    (BOTH_SIDES_BLOCKED, Corners.PHASE, {0, 2, 5, 6, 7, 8}),
])
def test_corner_policies_gate_diagonals(costs, corners, expected):
    grid = SquareGrid(3, 3, costs)
    assert {n for n, _ in grid.neighbors(4, corners)} == expected


def test_neighbor_step_factors():
    grid = SquareGrid(3, 3, [1] * 9)
    factors = dict(grid.neighbors(4, Corners.PHASE))
    assert factors[1] == 1 and factors[3] == 1
    assert factors[0] == 1.4 and factors[8] == 1.4


def test_squeezing_between_two_corners():
    grid = SquareGrid(2, 2, [
        1, 0,
        0, 1,
    ])
    assert grid.find((0, 0), (1, 1), Corners.WALK) == []
    assert grid.find((0, 0), (1, 1), Corners.CUT) == []
    assert grid.find((0, 0), (1, 1), Corners.PHASE) == [0, 3]


def test_grazing_one_corner():
    grid = SquareGrid(2, 2, [
        1, 0,
        1, 1,
    ])
    assert grid.find((0, 0), (1, 1), Corners.WALK) == [0, 2, 3]
    assert grid.find((0, 0), (1, 1), Corners.CUT) == [0, 3]


def test_policy_accepts_names():
    grid = SquareGrid(3, 3, [1] * 9)
    assert grid.find((0, 0), (2, 2), "phase") == [0, 4, 8]


def test_find_is_deterministic():
    grid = SquareGrid(5, 5, [1] * 25)
    first = grid.find((0, 0), (4, 3), Corners.CUT)
    assert grid.find((0, 0), (4, 3), Corners.CUT) == first


def test_to_graph_searches_the_same_topology():
    grid = SquareGrid(3, 3, [
        1, 9, 1,
        1, 9, 1,
        1, 1, 1,
    ])
    graph, nodes = grid.to_graph()
    assert len(nodes) == 9
    path = graph.find(nodes[0], nodes[2])
    assert [nodes.index(n) for n in path] == grid.find((0, 0), (2, 0))
    assert graph.path_cost(path) == 6
