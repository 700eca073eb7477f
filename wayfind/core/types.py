# wayfind/core/types.py
#!/usr/bin/env python3
from dataclasses import dataclass, field
from enum import IntEnum
from typing import List, Tuple, Optional, Dict, Any

Position = Tuple[int, int]  # (x, y)


class Corners(IntEnum):
    """Diagonal movement policy for grid search. Order matters."""
    NONE = 0   # no diagonals
    WALK = 1   # diagonal only if both side cells are open
    CUT = 2    # diagonal unless both side cells are blocked
    PHASE = 3  # diagonal whenever the target cell is open

    @classmethod
    def parse(cls, value: Any) -> "Corners":
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls[value.strip().upper()]
            except KeyError:
                raise ValueError(f"Unknown corner policy: {value!r}") from None
        return cls(value)


@dataclass
class StepResult:
    status: str                   # "idle" | "running" | "done" | "no_path"
    opened: List[int] = field(default_factory=list)
    closed: List[int] = field(default_factory=list)
    current: Optional[int] = None
    path: Optional[List[int]] = None
    metrics: Dict[str, Any] = field(default_factory=dict)


# ---------- errors ----------

class PathfindingError(Exception):
    pass


class SizeMismatchError(PathfindingError, ValueError):
    def __init__(self, width: int, height: int, size: int):
        super().__init__(
            f"Size of costs ({size}) doesn't match width and height ({width}x{height})."
        )
        self.width = width
        self.height = height
        self.size = size


class NotConnectedError(PathfindingError, LookupError):
    def __init__(self, a: int, b: int):
        super().__init__(f"Nodes {a!r} and {b!r} aren't connected")
        self.a = a
        self.b = b


class OutOfBoundsError(PathfindingError, ValueError):
    pass


class MapFormatError(PathfindingError, ValueError):
    pass
