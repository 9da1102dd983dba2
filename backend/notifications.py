"""Bounded feed of domain events for clients that poll the lab."""

import logging
from collections import deque
from typing import Any, Deque, Dict, List, Optional

from cellmaster.config.server import NOTIFICATION_LIMIT
from cellmaster.events import EventBus, event_to_dict

logger = logging.getLogger(__name__)


class NotificationFeed:
    """Keeps the most recent domain events as plain dicts.

    Each entry gets a monotonically increasing ``seq`` so a client can ask
    only for what it has not seen yet.
    """

    def __init__(self, maxlen: int = NOTIFICATION_LIMIT):
        self._entries: Deque[Dict[str, Any]] = deque(maxlen=maxlen)
        self._seq = 0
        self._bus: Optional[EventBus] = None

    def attach(self, bus: EventBus) -> None:
        """Follow a session's bus, leaving the previous one."""
        self.detach()
        bus.subscribe_all(self._on_event)
        self._bus = bus
        logger.debug("Notification feed attached to session bus")

    def detach(self) -> None:
        if self._bus is not None:
            self._bus.unsubscribe_all(self._on_event)
            self._bus = None

    def _on_event(self, event: object) -> None:
        self._seq += 1
        self._entries.append(event_to_dict(event, {"seq": self._seq}))

    def since(self, seq: int = 0) -> List[Dict[str, Any]]:
        return [entry for entry in self._entries if entry["seq"] > seq]

    @property
    def last_seq(self) -> int:
        return self._seq

    def clear(self) -> None:
        self._entries.clear()
