# wayfind/core/uniform_cost.py
#!/usr/bin/env python3
"""
Uniform-cost search over a DirectedGraph, one expansion per step().

API shared with GridAStarSearch:
- init(graph, origin, target) - reset() - step() -> StepResult - run() -> path

Open set is a binary heap of (g, seq, node). `seq` grows monotonically, so
entries with equal cost pop in insertion order. Improved entries are pushed
again and the outdated ones are dropped when popped.
"""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Dict, Tuple, List, Optional
import heapq
import logging
from math import inf

from wayfind.core.types import StepResult

if TYPE_CHECKING:
    from wayfind.core.directed_graph import DirectedGraph

logger = logging.getLogger(__name__)


@dataclass
class UniformCostSearch:
    name: str = "Uniform cost"

    graph: Optional["DirectedGraph"] = None
    origin: Optional[int] = None
    target: Optional[int] = None
    open_pq: List[Tuple[float, int, int]] = field(default_factory=list)   # (g, seq, node)
    open_set: set = field(default_factory=set)
    closed_set: set = field(default_factory=set)
    g: Dict[int, float] = field(default_factory=dict)
    parent: Dict[int, int] = field(default_factory=dict)
    popped_count: int = 0
    done: bool = False
    no_path: bool = False
    seq: int = 0

    def init(self, graph: "DirectedGraph", origin: int, target: int) -> None:
        self.graph = graph
        self.origin = origin
        self.target = target
        self.reset()

    def reset(self) -> None:
        if self.graph is None:
            return
        self.open_pq.clear()
        self.open_set.clear()
        self.closed_set.clear()
        self.g.clear()
        self.parent.clear()
        self.popped_count = 0
        self.done = False
        self.no_path = False
        self.seq = 0

        s = self.origin
        # the target only has to be reachable; an edge may point at an id with no node
        if s not in self.graph:
            self.no_path = True
            return
        self.g[s] = 0
        heapq.heappush(self.open_pq, (0, self._bump(), s))
        self.open_set.add(s)

    def _bump(self) -> int:
        self.seq += 1
        return self.seq

    def _reconstruct_path(self, end: int) -> List[int]:
        path: List[int] = [end]
        cur = end
        while cur in self.parent:
            cur = self.parent[cur]
            path.append(cur)
        path.reverse()
        return path

    def step(self) -> StepResult:
        if self.graph is None:
            return StepResult(status="idle", metrics={"algo": self.name})

        if self.done:
            path = self._reconstruct_path(self.target)
            return StepResult(status="done", path=path,
                              metrics=self._metrics(path_len=len(path)))

        if self.no_path or not self.open_pq:
            self.no_path = True
            return StepResult(status="no_path", path=[], metrics=self._metrics())

        g_u, _, u = heapq.heappop(self.open_pq)
        if u in self.closed_set or g_u != self.g.get(u, inf):
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
        for v, weight in self.graph.connections.get(u, {}).items():
            if v in self.closed_set or self.graph.is_disabled(v):
                continue

            alt = g_u + weight
            if v not in self.open_set:
                self.open_set.add(v)
                opened_now.append(v)
            elif alt >= self.g[v]:
                continue
            self.g[v] = alt
            self.parent[v] = u
            heapq.heappush(self.open_pq, (alt, self._bump(), v))

        return StepResult(status="running", opened=opened_now, closed=[u], current=u,
                          metrics=self._metrics())

    def run(self) -> List[int]:
        """Step until the search settles; returns the path or []."""
        while True:
            res = self.step()
            if res.status == "done":
                logger.debug("%s: %s -> %s found in %d pops, cost %s", self.name,
                             self.origin, self.target, self.popped_count, self.g[self.target])
                return res.path
            if res.status in ("no_path", "idle"):
                logger.debug("%s: %s -> %s unreachable after %d pops", self.name,
                             self.origin, self.target, self.popped_count)
                return []

    def _metrics(self, path_len: int = 0) -> dict:
        return {
            "algo": self.name,
            "popped": self.popped_count,
            "open_size": len(self.open_set),
            "closed_count": len(self.closed_set),
            "path_len": path_len,
            "total_cost": self.g.get(self.target) if self.done else None,
        }
