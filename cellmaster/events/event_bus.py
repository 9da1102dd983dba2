"""Synchronous event bus for lab notifications.

Two ways to publish:

- ``emit`` dispatches immediately. Used by player actions, which run
  outside the tick.
- ``enqueue`` holds the event until ``flush``. The engine enqueues during
  a tick and flushes at the notification phase, so a handler that calls
  back into the lab never observes a half-applied tick.

Handlers registered with ``subscribe_all`` receive every event type.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Callable
from typing import TypeVar

T = TypeVar("T")


class EventBus:
    """Synchronous pub/sub keyed by event class.

    Example:
        bus = EventBus()
        bus.subscribe(CellStatusChangedEvent, on_status)
        bus.emit(CellStatusChangedEvent(cell_id="cell_1", ...))
    """

    def __init__(self) -> None:
        self._handlers: dict[type, list[Callable]] = defaultdict(list)
        self._catch_all: list[Callable[[object], None]] = []
        self._pending: list[object] = []
        self._flushing = False

    def emit(self, event: object) -> None:
        """Dispatch an event to its handlers, then to catch-all handlers."""
        handlers = self._handlers.get(type(event))
        if handlers:
            for handler in list(handlers):
                handler(event)
        for handler in list(self._catch_all):
            handler(event)

    def enqueue(self, event: object) -> None:
        """Hold an event until the next :meth:`flush`."""
        self._pending.append(event)

    def flush(self) -> list[object]:
        """Dispatch every queued event in order and return them.

        Events enqueued by handlers during the flush go out in the same flush.
        """
        if self._flushing:
            return []
        dispatched: list[object] = []
        self._flushing = True
        try:
            while self._pending:
                event = self._pending.pop(0)
                self.emit(event)
                dispatched.append(event)
        finally:
            self._flushing = False
        return dispatched

    def discard_pending(self) -> int:
        """Drop queued events without dispatching them."""
        count = len(self._pending)
        self._pending.clear()
        return count

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    def subscribe(self, event_type: type[T], handler: Callable[[T], None]) -> None:
        self._handlers[event_type].append(handler)

    def subscribe_all(self, handler: Callable[[object], None]) -> None:
        self._catch_all.append(handler)

    def unsubscribe(self, event_type: type[T], handler: Callable[[T], None]) -> bool:
        """Remove a handler for a specific event type.

        Returns:
            True if handler was found and removed, False otherwise
        """
        handlers = self._handlers.get(event_type)
        if handlers and handler in handlers:
            handlers.remove(handler)
            return True
        return False

    def unsubscribe_all(self, handler: Callable[[object], None]) -> bool:
        if handler in self._catch_all:
            self._catch_all.remove(handler)
            return True
        return False

    def has_subscribers(self, event_type: type) -> bool:
        return bool(self._handlers.get(event_type)) or bool(self._catch_all)
