"""Grid - bounds and distance primitives."""
from __future__ import annotations

import math
from typing import Iterable, TypeVar

from tick_society.types import Position

T = TypeVar("T")

_NEIGHBOR_OFFSETS = (
    (-1, -1), (0, -1), (1, -1),
    (-1, 0),           (1, 0),
    (-1, 1),  (0, 1),  (1, 1),
)


class Grid:
    """Immutable width/height pair. Owns no entities.

    Nearest-entity queries scan candidate lists linearly; populations stay
    small enough (100 citizens, a few hundred resources and landmarks)
    that no spatial index is kept.
    """

    __slots__ = ("_width", "_height")

    def __init__(self, width: int, height: int) -> None:
        if width <= 0 or height <= 0:
            raise ValueError(f"grid dimensions must be positive, got {width}x{height}")
        self._width = width
        self._height = height

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    def is_valid_position(self, pos: Position) -> bool:
        return 0 <= pos.x < self._width and 0 <= pos.y < self._height

    def is_interior(self, pos: Position) -> bool:
        """True for cells inside the one-cell boundary ring."""
        return 0 < pos.x < self._width - 1 and 0 < pos.y < self._height - 1

    def clamp_interior(self, pos: Position) -> Position:
        x = min(max(pos.x, 1), max(1, self._width - 2))
        y = min(max(pos.y, 1), max(1, self._height - 2))
        return Position(x, y)

    @staticmethod
    def distance(p1: Position, p2: Position) -> float:
        return math.hypot(p1.x - p2.x, p1.y - p2.y)

    def neighbors(self, pos: Position) -> list[Position]:
        """In-bounds 8-neighbors, row by row from the top-left."""
        result: list[Position] = []
        for dx, dy in _NEIGHBOR_OFFSETS:
            candidate = pos.offset(dx, dy)
            if self.is_valid_position(candidate):
                result.append(candidate)
        return result

    @staticmethod
    def nearest(origin: Position, candidates: Iterable[T], key) -> T | None:
        """Return the candidate whose ``key(candidate)`` position is closest.

        Ties keep the first candidate encountered.
        """
        best: T | None = None
        best_dist = math.inf
        for candidate in candidates:
            dist = Grid.distance(origin, key(candidate))
            if dist < best_dist:
                best = candidate
                best_dist = dist
        return best

    def __repr__(self) -> str:
        return f"Grid({self._width}x{self._height})"
