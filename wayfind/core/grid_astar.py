# wayfind/core/grid_astar.py
#!/usr/bin/env python3
"""
A* over a SquareGrid's implicit 8-connectivity, one expansion per step().

Implements the same API as UniformCostSearch:
- init(grid, origin, target, corners) - reset() - step() -> StepResult - run()

Heuristic:
- Manhattan distance to the target, computed once when a cell is first seen.
- Not scaled by cell cost or the 1.4 diagonal factor, so it can overestimate
  on cheap cells or diagonal-heavy routes.

Tie-breaking in the PQ: (f, seq, cell), lower f first, then FIFO by seq.
"""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Dict, Tuple, List, Optional
import heapq
import logging
from math import inf

from wayfind.core.types import Corners, StepResult

if TYPE_CHECKING:
    from wayfind.core.square_grid import SquareGrid

logger = logging.getLogger(__name__)


@dataclass
class GridAStarSearch:
    name: str = "A*"

    # Internal state
    grid: Optional["SquareGrid"] = None
    origin: Optional[int] = None
    target: Optional[int] = None
    corners: Corners = Corners.NONE
    open_pq: List[Tuple[float, int, int]] = field(default_factory=list)  # (f, seq, cell)
    open_set: set = field(default_factory=set)
    closed_set: set = field(default_factory=set)
    g: Dict[int, float] = field(default_factory=dict)
    h: Dict[int, int] = field(default_factory=dict)
    f: Dict[int, float] = field(default_factory=dict)
    parent: Dict[int, int] = field(default_factory=dict)
    popped_count: int = 0
    done: bool = False
    no_path: bool = False
    seq: int = 0  # monotonic counter for PQ stability

    # -------------------- lifecycle --------------------

    def init(self, grid: "SquareGrid", origin: int, target: int,
             corners: Corners = Corners.NONE) -> None:
        """Bind to a grid and a pair of flat cell indices."""
        self.grid = grid
        self.origin = origin
        self.target = target
        self.corners = Corners(corners)
        self.reset()

    def reset(self) -> None:
        """Clear all state and seed with the origin."""
        if self.grid is None:
            return
        self.open_pq.clear()
        self.open_set.clear()
        self.closed_set.clear()
        self.g.clear()
        self.h.clear()
        self.f.clear()
        self.parent.clear()
        self.popped_count = 0
        self.done = False
        self.no_path = False
        self.seq = 0

        s = self.origin
        self.g[s] = 0
        self.f[s] = 0
        heapq.heappush(self.open_pq, (0, self._bump(), s))
        self.open_set.add(s)

    # -------------------- helpers --------------------

    def _bump(self) -> int:
        self.seq += 1
        return self.seq

    def _h(self, c: int) -> int:
        x, y = self.grid.index_to_position(c)
        gx, gy = self.grid.index_to_position(self.target)
        return abs(gx - x) + abs(gy - y)

    def _reconstruct_path(self, end: int) -> List[int]:
        path: List[int] = [end]
        cur = end
        while cur in self.parent:
            cur = self.parent[cur]
            path.append(cur)
        path.reverse()
        return path

    # -------------------- main stepping logic --------------------

    def step(self) -> StepResult:
        """
        Run ONE A* expansion step:
          - Pop the lowest-f cell.
          - If target, reconstruct and finish.
          - Else relax neighbours with cost = cost(dest) * (1.4 if diagonal else 1).
        """
        if self.grid is None:
            return StepResult(status="idle", metrics={"algo": self.name})

        if self.done:
            path = self._reconstruct_path(self.target)
            return StepResult(status="done", path=path,
                              metrics=self._metrics(path_len=len(path)))

        if self.no_path or not self.open_pq:
            self.no_path = True
            return StepResult(status="no_path", path=[], metrics=self._metrics())

        f_u, _, u = heapq.heappop(self.open_pq)

        # Ignore stale pops
        if u in self.closed_set or f_u != self.f.get(u, inf):
            return StepResult(status="running", current=u, metrics=self._metrics())

        self.popped_count += 1
        self.open_set.discard(u)

        if u == self.target:
            self.done = True
            path = self._reconstruct_path(u)
            return StepResult(status="done", current=u, path=path,
                              metrics=self._metrics(path_len=len(path)))

        self.closed_set.add(u)

        opened_now: List[int] = []
        g_u = self.g[u]
        for v, factor in self.grid.neighbors(u, self.corners):
            if v in self.closed_set:
                continue

            alt = self.grid.costs[v] * factor + g_u
            if v not in self.open_set:
                self.open_set.add(v)
                opened_now.append(v)
                self.h[v] = self._h(v)
            elif alt >= self.g[v]:
                continue
            self.g[v] = alt
            self.parent[v] = u
            self.f[v] = self.h[v] + alt
            heapq.heappush(self.open_pq, (self.f[v], self._bump(), v))

        return StepResult(status="running", opened=opened_now, closed=[u], current=u,
                          metrics=self._metrics())

    def run(self) -> List[int]:
        while True:
            res = self.step()
            if res.status == "done":
                logger.debug("%s[%s]: %s -> %s found in %d pops, cost %s", self.name,
                             self.corners.name, self.origin, self.target,
                             self.popped_count, self.g[self.target])
                return res.path
            if res.status in ("no_path", "idle"):
                logger.debug("%s[%s]: %s -> %s unreachable after %d pops", self.name,
                             self.corners.name, self.origin, self.target, self.popped_count)
                return []

    # -------------------- metrics --------------------

    def _metrics(self, path_len: int = 0) -> dict:
        return {
            "algo": self.name,
            "popped": self.popped_count,
            "open_size": len(self.open_set),
            "closed_count": len(self.closed_set),
            "path_len": path_len,
            "total_cost": self.g.get(self.target) if self.done else None,
        }
