"""Collectable letter resources."""
from __future__ import annotations

from dataclasses import dataclass

from tick_society.types import Position


@dataclass
class Resource:
    position: Position
    type: str
    collected: bool = False

    def __post_init__(self) -> None:
        if len(self.type) != 1 or not self.type.isalpha():
            raise ValueError(f"resource type must be a single letter, got {self.type!r}")

    def collect(self) -> None:
        self.collected = True

    def respawn(self, position: Position) -> None:
        self.position = position
        self.collected = False
