# wayfind/core/square_grid.py
#!/usr/bin/env python3
"""
Dense 2D cost field. A cell's value is the cost of entering it; 0 blocks it.

Cells are addressed by flat row-major index (x + y * width) inside searches
and by (x, y) at the public edges.
"""

import logging
from typing import List, Sequence, Tuple

from wayfind.core.directed_graph import DirectedGraph
from wayfind.core.grid_astar import GridAStarSearch
from wayfind.core.types import Corners, OutOfBoundsError, Position, SizeMismatchError

logger = logging.getLogger(__name__)

DIAGONAL_FACTOR = 1.4


class SquareGrid:
    def __init__(self, width: int, height: int, costs: Sequence[float]):
        if len(costs) != width * height:
            raise SizeMismatchError(width, height, len(costs))

        self.width = width
        self.height = height
        self.costs: List[float] = list(costs)

    def __repr__(self) -> str:
        return f"SquareGrid({self.width}x{self.height})"

    # ---------- coordinates ----------

    def position_to_index(self, x: int, y: int) -> int:
        return x + y * self.width

    def index_to_position(self, i: int) -> Position:
        return i % self.width, i // self.width

    def in_bounds(self, p: Position) -> bool:
        x, y = p
        return 0 <= x < self.width and 0 <= y < self.height

    def is_block(self, p: Position) -> bool:
        return self.costs[self.position_to_index(*p)] == 0

    def cost_of(self, p: Position) -> float:
        return self.costs[self.position_to_index(*p)]

    # ---------- neighbourhood ----------

    def neighbors(self, index: int, corners: Corners = Corners.NONE) -> List[Tuple[int, float]]:
        """Enterable cells around `index` as (neighbor_index, step_factor)."""
        corners = Corners(corners)
        cx, cy = self.index_to_position(index)
        out: List[Tuple[int, float]] = []

        for x in range(cx - 1, cx + 2):
            if x < 0 or x >= self.width:
                continue
            for y in range(cy - 1, cy + 2):
                if y < 0 or y >= self.height:
                    continue
                if x == cx and y == cy:
                    continue

                diagonal = x != cx and y != cy
                if diagonal and corners == Corners.NONE:
                    continue

                neighbor = self.position_to_index(x, y)
                if self.costs[neighbor] == 0:
                    continue

                if diagonal and corners < Corners.PHASE:
                    # side cells share an edge with both the current and the target cell
                    block_x = self.costs[self.position_to_index(x, cy)] == 0
                    block_y = self.costs[self.position_to_index(cx, y)] == 0
                    if corners < Corners.CUT:
                        if block_x or block_y:
                            continue
                    elif block_x and block_y:
                        continue

                out.append((neighbor, DIAGONAL_FACTOR if diagonal else 1))
        return out

    # ---------- search ----------

    def _check_position(self, label: str, p: Position) -> int:
        if not self.in_bounds(p):
            raise OutOfBoundsError(f"{label} {tuple(p)} out of bounds for {self.width}x{self.height} grid")
        return self.position_to_index(*p)

    def find(self, origin: Position, target: Position, corners: Corners = Corners.NONE) -> List[int]:
        """A* from origin to target; returns flat cell indices, or [] if unreachable."""
        origin_index = self._check_position("origin", origin)
        target_index = self._check_position("target", target)

        search = GridAStarSearch()
        search.init(self, origin_index, target_index, Corners.parse(corners))
        return search.run()

    def path_to_positions(self, path: Sequence[int]) -> List[Position]:
        return [self.index_to_position(i) for i in path]

    def path_cost(self, path: Sequence[int]) -> float:
        """Cost of walking `path`, charging each entered cell (x1.4 on diagonals)."""
        total = 0
        for a, b in zip(path, path[1:]):
            ax, ay = self.index_to_position(a)
            bx, by = self.index_to_position(b)
            factor = DIAGONAL_FACTOR if ax != bx and ay != by else 1
            total += self.costs[b] * factor
        return total

    def to_graph(self) -> Tuple[DirectedGraph, List[int]]:
        """4-connected DirectedGraph copy of this grid plus its row-major node ids."""
        graph = DirectedGraph()
        nodes = graph.create_grid(self.width, self.height, self.costs)
        return graph, nodes
