"""Clock and TickContext for the society engine."""

import random

from tick_society.types import TickContext


class Clock:
    def __init__(self, tick_rate: int = 200) -> None:
        if tick_rate <= 0:
            raise ValueError("tick_rate must be positive")
        self._tick_rate = tick_rate
        self._tick_number = 0

    @property
    def tick_rate(self) -> int:
        """Wall-clock milliseconds between ticks, advisory for the caller."""
        return self._tick_rate

    @property
    def tick_number(self) -> int:
        return self._tick_number

    def advance(self) -> int:
        self._tick_number += 1
        return self._tick_number

    def context(self, rng: random.Random) -> TickContext:
        return TickContext(tick_number=self._tick_number, random=rng)

    def reset(self, tick_number: int = 0) -> None:
        self._tick_number = tick_number
