"""Tests for the polled notification feed."""

from backend.notifications import NotificationFeed
from cellmaster.events import EventBus, LevelUpEvent


def test_feed_numbers_events():
    bus = EventBus()
    feed = NotificationFeed()
    feed.attach(bus)

    bus.emit(LevelUpEvent(1, 2, 10.0))
    bus.emit(LevelUpEvent(2, 3, 20.0))

    entries = feed.since(0)
    assert [e["seq"] for e in entries] == [1, 2]
    assert entries[0]["type"] == "LevelUpEvent"
    assert entries[1]["new_level"] == 3
    assert feed.since(1) == entries[1:]
    assert feed.last_seq == 2


def test_feed_is_bounded():
    bus = EventBus()
    feed = NotificationFeed(maxlen=3)
    feed.attach(bus)

    for level in range(1, 6):
        bus.emit(LevelUpEvent(level, level + 1, 0.0))

    assert [e["seq"] for e in feed.since(0)] == [3, 4, 5]


def test_reattach_follows_new_bus_only():
    old_bus, new_bus = EventBus(), EventBus()
    feed = NotificationFeed()
    feed.attach(old_bus)
    feed.attach(new_bus)

    old_bus.emit(LevelUpEvent(1, 2, 0.0))
    new_bus.emit(LevelUpEvent(2, 3, 0.0))

    assert [e["old_level"] for e in feed.since(0)] == [2]


def test_clear_keeps_sequence():
    bus = EventBus()
    feed = NotificationFeed()
    feed.attach(bus)
    bus.emit(LevelUpEvent(1, 2, 0.0))

    feed.clear()
    bus.emit(LevelUpEvent(2, 3, 0.0))

    assert [e["seq"] for e in feed.since(0)] == [2]


def test_detach():
    bus = EventBus()
    feed = NotificationFeed()
    feed.attach(bus)
    feed.detach()

    bus.emit(LevelUpEvent(1, 2, 0.0))

    assert feed.since(0) == []
