"""Shared types and errors for the society engine."""

from __future__ import annotations

import random as _random
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Position:
    x: int
    y: int

    def offset(self, dx: int, dy: int) -> Position:
        return Position(self.x + dx, self.y + dy)

    def as_tuple(self) -> tuple[int, int]:
        return (self.x, self.y)


@dataclass(frozen=True, slots=True)
class TickContext:
    tick_number: int
    random: _random.Random


class SocietyError(Exception):
    """Base class for engine errors."""


class WorldStateError(SocietyError):
    """Raised when core world collections are missing or corrupted."""


class NotInitializedError(SocietyError):
    """Raised when ticking a world that was never initialized."""


class AlreadyInitializedError(SocietyError):
    """Raised when initialize() runs a second time on the same world."""
