"""Outward event queue drained by the caller once per tick."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any

BUILDING = "building"
BIRTH = "birth"
GOVERNMENT = "government"
TAX = "tax"
REBELLION = "rebellion"
CRIME = "crime"
ARREST = "arrest"
JOB_ASSIGNED = "job_assigned"

EVENT_TYPES = frozenset({
    BUILDING, BIRTH, GOVERNMENT, TAX, REBELLION, CRIME, ARREST, JOB_ASSIGNED,
})


@dataclass
class WorldEvent:
    tick: int
    type: str
    data: dict[str, Any]


class EventQueue:
    def __init__(self) -> None:
        self._events: list[WorldEvent] = []

    def emit(self, tick: int, type: str, **data: Any) -> None:
        if type not in EVENT_TYPES:
            raise ValueError(f"Unknown event type {type!r}")
        self._events.append(WorldEvent(tick=tick, type=type, data=data))

    def query(self, type: str | None = None, after: int | None = None) -> list[WorldEvent]:
        result = list(self._events)
        if type is not None:
            result = [e for e in result if e.type == type]
        if after is not None:
            result = [e for e in result if e.tick > after]
        return result

    def last(self, type: str) -> WorldEvent | None:
        for e in reversed(self._events):
            if e.type == type:
                return e
        return None

    def clear(self) -> None:
        self._events.clear()

    def drain(self) -> list[WorldEvent]:
        drained = self._events
        self._events = []
        return drained

    def __len__(self) -> int:
        return len(self._events)
