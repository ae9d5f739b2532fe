"""Bounded needs and the per-tick decay applied to them."""
from __future__ import annotations

from dataclasses import dataclass

NEED_MIN = 0.0
NEED_MAX = 100.0

# Relative to the hunger decay rate (0.1 by default).
ENERGY_DECAY_RATIO = 0.5
SOCIAL_DECAY_RATIO = 0.8
STAMINA_DECAY_RATIO = 0.3


def clamp(value: float, low: float = NEED_MIN, high: float = NEED_MAX) -> float:
    return max(low, min(high, value))


@dataclass
class Needs:
    hunger: float = 50.0
    energy: float = 80.0
    social: float = 50.0

    def adjust(self, name: str, delta: float) -> float:
        """Add *delta* to a need, clamped to [0, 100]. Returns the new value."""
        if name not in ("hunger", "energy", "social"):
            raise ValueError(f"Unknown need {name!r}")
        value = clamp(getattr(self, name) + delta)
        setattr(self, name, value)
        return value

    def decay(self, hunger_rate: float) -> None:
        self.hunger = clamp(self.hunger - hunger_rate)
        self.energy = clamp(self.energy - hunger_rate * ENERGY_DECAY_RATIO)
        self.social = clamp(self.social - hunger_rate * SOCIAL_DECAY_RATIO)

    def is_emergency(self, threshold: float = 20.0) -> bool:
        return self.hunger < threshold or self.energy < threshold
