"""Tests for tick_society.events - the outward event queue."""

import pytest
from tick_society import EventQueue
from tick_society import events


def test_emit_and_query():
    queue = EventQueue()
    queue.emit(1, events.BIRTH, child_id="citizen-3")
    queue.emit(2, events.CRIME, crime_id="crime-0")
    assert len(queue) == 2
    births = queue.query(events.BIRTH)
    assert len(births) == 1
    assert births[0].tick == 1
    assert births[0].data == {"child_id": "citizen-3"}


def test_query_after_tick():
    queue = EventQueue()
    for tick in range(5):
        queue.emit(tick, events.TAX, collected=tick)
    assert [e.tick for e in queue.query(after=2)] == [3, 4]


def test_unknown_type_raises():
    queue = EventQueue()
    with pytest.raises(ValueError):
        queue.emit(1, "earthquake")


def test_last():
    queue = EventQueue()
    queue.emit(1, events.ARREST, criminal_id="a")
    queue.emit(3, events.ARREST, criminal_id="b")
    assert queue.last(events.ARREST).data["criminal_id"] == "b"
    assert queue.last(events.BUILDING) is None


def test_drain_returns_and_clears():
    queue = EventQueue()
    queue.emit(1, events.BUILDING, landmark_id=4)
    drained = queue.drain()
    assert len(drained) == 1
    assert len(queue) == 0
    assert queue.drain() == []


def test_clear():
    queue = EventQueue()
    queue.emit(1, events.REBELLION, citizen_id="x")
    queue.clear()
    assert queue.query() == []
