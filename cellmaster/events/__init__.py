"""Domain events and the synchronous bus that carries them."""

from cellmaster.events.domain_events import (
    BankruptcyEvent,
    CellHarvestedEvent,
    CellStatusChangedEvent,
    LevelUpEvent,
    RandomEventExpiredEvent,
    RandomEventTriggeredEvent,
    TaskCompletedEvent,
    TaskExpiredEvent,
    event_to_dict,
)
from cellmaster.events.event_bus import EventBus

__all__ = [
    "BankruptcyEvent",
    "CellHarvestedEvent",
    "CellStatusChangedEvent",
    "EventBus",
    "LevelUpEvent",
    "RandomEventExpiredEvent",
    "RandomEventTriggeredEvent",
    "TaskCompletedEvent",
    "TaskExpiredEvent",
    "event_to_dict",
]
