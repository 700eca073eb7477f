# wayfind/core/directed_graph.py
#!/usr/bin/env python3
"""
Weighted directed graph with soft-disable and edge splitting.

Node ids come from a counter starting at 1 and are never handed out twice,
even after `remove`. Weights are expected to be non-negative; nothing checks.
"""

import logging
from typing import Dict, List, Optional, Sequence

from wayfind.core.types import NotConnectedError, SizeMismatchError
from wayfind.core.uniform_cost import UniformCostSearch

logger = logging.getLogger(__name__)


class DirectedGraph:
    def __init__(self) -> None:
        self.nodes_created = 0
        self.connections: Dict[int, Dict[int, float]] = {}
        self.disabled: Dict[int, bool] = {}

    def __contains__(self, node: object) -> bool:
        return node in self.connections

    def __len__(self) -> int:
        return len(self.connections)

    def nodes(self) -> List[int]:
        return list(self.connections)

    # ---------- lifecycle ----------

    def add(self) -> int:
        self.nodes_created += 1
        node = self.nodes_created
        self.connections[node] = {}
        return node

    def remove(self, node: int) -> None:
        self.connections.pop(node, None)
        self.disabled.pop(node, None)
        for edges in self.connections.values():
            edges.pop(node, None)

    def connect(self, a: int, b: int, weight: float) -> None:
        edges = self.connections.get(a)
        if edges is not None:
            edges[b] = weight

    def disconnect(self, a: int, b: int) -> None:
        edges = self.connections.get(a)
        if edges is not None:
            edges.pop(b, None)

    def split(self, a: int, b: int) -> int:
        """Insert a node halfway along a->b and return it."""
        cost = self.weight(a, b)
        if cost is None:
            raise NotConnectedError(a, b)

        node = self.add()
        self.disconnect(a, b)
        self.connect(a, node, cost / 2)
        self.connect(node, b, cost / 2)
        return node

    def enable(self, node: int) -> None:
        self.disabled[node] = False

    def disable(self, node: int) -> None:
        self.disabled[node] = True

    # ---------- queries ----------

    def is_disabled(self, node: int) -> bool:
        return self.disabled.get(node, False)

    def neighbors(self, node: int) -> Dict[int, float]:
        return dict(self.connections.get(node, {}))

    def weight(self, a: int, b: int) -> Optional[float]:
        return self.connections.get(a, {}).get(b)

    def path_cost(self, path: Sequence[int]) -> float:
        total = 0
        for a, b in zip(path, path[1:]):
            w = self.weight(a, b)
            if w is None:
                raise NotConnectedError(a, b)
            total += w
        return total

    def find(self, origin: int, target: int) -> List[int]:
        """Cheapest path origin -> target (both inclusive), or [] if unreachable."""
        search = UniformCostSearch()
        search.init(self, origin, target)
        return search.run()

    # ---------- grid bridge ----------

    def create_grid(self, width: int, height: int, costs: Sequence[float]) -> List[int]:
        """
        Lower a row-major cost field into 4-connected nodes.

        Each cell is linked to its left and upper neighbour in both directions;
        the edge u->v weighs costs[v] (the cost of entering v). Returns the new
        node ids in row-major order.
        """
        if len(costs) != width * height:
            raise SizeMismatchError(width, height, len(costs))

        nodes: List[int] = []
        for y in range(height):
            for x in range(width):
                index = x + y * width
                node = self.add()
                nodes.append(node)

                if x - 1 >= 0:
                    neighbor = (x - 1) + y * width
                    self.connect(node, nodes[neighbor], costs[neighbor])
                    self.connect(nodes[neighbor], node, costs[index])

                if y - 1 >= 0:
                    neighbor = x + (y - 1) * width
                    self.connect(node, nodes[neighbor], costs[neighbor])
                    self.connect(nodes[neighbor], node, costs[index])

        logger.debug("create_grid: %dx%d -> nodes %s..%s", width, height,
                     nodes[0] if nodes else None, nodes[-1] if nodes else None)
        return nodes
