"""Tests for the EventBus domain event dispatch system."""

from cellmaster.events import EventBus, event_to_dict
from cellmaster.events.domain_events import (
    BankruptcyEvent,
    CellHarvestedEvent,
    LevelUpEvent,
)


def harvested(cell_id: str = "cell_1") -> CellHarvestedEvent:
    return CellHarvestedEvent(
        cell_id=cell_id,
        cell_type="hek293t",
        value=76,
        exp=7,
        quality=65.0,
        golden_pearl=False,
        game_minutes=12.0,
    )


class TestEventBus:
    """Test suite for EventBus functionality."""

    def test_emit_reaches_subscriber(self) -> None:
        """Verify events are delivered to subscribed handlers."""
        bus = EventBus()
        received_events: list = []
        bus.subscribe(CellHarvestedEvent, received_events.append)

        event = harvested()
        bus.emit(event)

        assert received_events == [event]
        assert received_events[0] is event

    def test_no_subscribers_no_crash(self) -> None:
        """Verify emitting with no subscribers is a no-op."""
        bus = EventBus()
        bus.emit(harvested())
        assert not bus.has_subscribers(CellHarvestedEvent)

    def test_handlers_only_see_their_type(self) -> None:
        bus = EventBus()
        levels: list = []
        bus.subscribe(LevelUpEvent, levels.append)

        bus.emit(harvested())
        bus.emit(LevelUpEvent(1, 2, 0.0))

        assert levels == [LevelUpEvent(1, 2, 0.0)]

    def test_catch_all_runs_after_typed_handlers(self) -> None:
        """Verify subscribe_all handlers receive every event, after typed ones."""
        bus = EventBus()
        order: list = []
        bus.subscribe(LevelUpEvent, lambda e: order.append("typed"))
        bus.subscribe_all(lambda e: order.append("all"))

        bus.emit(LevelUpEvent(1, 2, 0.0))
        bus.emit(harvested())

        assert order == ["typed", "all", "all"]

    def test_unsubscribe(self) -> None:
        bus = EventBus()
        seen: list = []
        bus.subscribe(LevelUpEvent, seen.append)
        bus.subscribe_all(seen.append)

        assert bus.unsubscribe(LevelUpEvent, seen.append)
        assert bus.unsubscribe_all(seen.append)
        assert not bus.unsubscribe(LevelUpEvent, seen.append)

        bus.emit(LevelUpEvent(1, 2, 0.0))
        assert seen == []


class TestQueuedDispatch:
    """Events enqueued during a tick go out together at flush."""

    def test_enqueue_holds_until_flush(self) -> None:
        bus = EventBus()
        seen: list = []
        bus.subscribe_all(seen.append)

        bus.enqueue(harvested("cell_1"))
        bus.enqueue(harvested("cell_2"))
        assert seen == []
        assert bus.pending_count == 2

        dispatched = bus.flush()

        assert [e.cell_id for e in seen] == ["cell_1", "cell_2"]
        assert dispatched == seen
        assert bus.pending_count == 0

    def test_events_enqueued_by_handlers_go_out_in_same_flush(self) -> None:
        """Verify a handler that enqueues a follow-up sees it dispatched."""
        bus = EventBus()
        seen: list = []

        def on_level(event: LevelUpEvent) -> None:
            bus.enqueue(BankruptcyEvent(gold=0, golden_pearls=0, game_minutes=event.game_minutes))

        bus.subscribe(LevelUpEvent, on_level)
        bus.subscribe_all(seen.append)
        bus.enqueue(LevelUpEvent(1, 2, 5.0))

        dispatched = bus.flush()

        assert [type(e).__name__ for e in dispatched] == ["LevelUpEvent", "BankruptcyEvent"]
        assert seen == dispatched

    def test_discard_pending(self) -> None:
        bus = EventBus()
        seen: list = []
        bus.subscribe_all(seen.append)
        bus.enqueue(harvested())

        assert bus.discard_pending() == 1
        assert bus.flush() == []
        assert seen == []


def test_event_to_dict() -> None:
    data = event_to_dict(LevelUpEvent(2, 3, 90.0), {"seq": 4})
    assert data == {
        "type": "LevelUpEvent",
        "old_level": 2,
        "new_level": 3,
        "game_minutes": 90.0,
        "seq": 4,
    }
