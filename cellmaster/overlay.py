"""Random events layered over the lab as a global effect overlay.

Every check interval (real seconds, independent of game speed) the
manager walks the event pool in catalog order and rolls each definition's
chance scaled by the mode's event frequency. The first hit that is not
already active triggers, and at most one event triggers per check.

A triggered event becomes an :class:`ActiveEvent` record that lives for
its duration:

- duration-bound effects fold multiplicatively into the
  :class:`OverlaySnapshot` every time it is computed;
- one-shot effects are handed out once by :meth:`take_one_shots` and
  marked applied, while the record stays around for display until it
  expires.

Expired records are swept at the start of each update and reported.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import Any, Optional

from cellmaster.catalog.models import RandomEventDefinition
from cellmaster.catalog.registry import Catalog
from cellmaster.config.events import (
    DEFAULT_EVENT_DURATION,
    EVENT_CHECK_INTERVAL,
    EVENT_HISTORY_LIMIT,
)
from cellmaster.contracts.version import EVENTS_SCHEMA_VERSION, check_entity_version
from cellmaster.effects import (
    ContaminationShift,
    DeadlineShift,
    EfficiencyBoost,
    GoldBonus,
    GoldenBoost,
    LoseItems,
    Mutation,
    OverlayEffect,
    PauseGrowth,
    QualityDrop,
    RareItem,
    effect_from_dict,
    effect_to_dict,
    is_one_shot,
)
from cellmaster.entity_ids import new_id

logger = logging.getLogger(__name__)


@dataclass
class ActiveEvent:
    """A triggered random event that has not expired yet."""

    record_id: str
    event_id: str
    name: str
    kind: str
    effect: OverlayEffect
    remaining: float
    duration: float
    triggered_at: float
    applied: bool = False

    @property
    def is_one_shot(self) -> bool:
        return is_one_shot(self.effect)

    def to_dict(self) -> dict[str, Any]:
        return {
            "record_id": self.record_id,
            "event_id": self.event_id,
            "name": self.name,
            "kind": self.kind,
            "effect": effect_to_dict(self.effect),
            "remaining": self.remaining,
            "duration": self.duration,
            "triggered_at": self.triggered_at,
            "applied": self.applied,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ActiveEvent:
        duration = float(data.get("duration", DEFAULT_EVENT_DURATION))
        return cls(
            record_id=data["record_id"],
            event_id=data["event_id"],
            name=data.get("name", data["event_id"]),
            kind=data.get("kind", "special"),
            effect=effect_from_dict(data["effect"]),
            remaining=float(data.get("remaining", duration)),
            duration=duration,
            triggered_at=float(data.get("triggered_at", 0.0)),
            applied=bool(data.get("applied", False)),
        )


@dataclass(frozen=True)
class OverlaySnapshot:
    """Combined multipliers of every active duration-bound event."""

    golden_multiplier: float = 1.0
    contamination_multiplier: float = 1.0
    efficiency_multiplier: float = 1.0
    deadline_multiplier: float = 1.0
    growth_paused: bool = False


@dataclass(frozen=True)
class OverlayTransition:
    """An event was triggered or expired during an update."""

    kind: str  # "triggered" | "expired"
    event: ActiveEvent


class RandomEventManager:
    """Rolls, tracks and expires random events."""

    def __init__(
        self,
        catalog: Catalog,
        rng: Optional[random.Random] = None,
        check_interval: float = EVENT_CHECK_INTERVAL,
    ) -> None:
        self._catalog = catalog
        self._rng = rng or random.Random()
        self.check_interval = check_interval
        self.check_cooldown = check_interval
        self.clock = 0.0
        self.active: list[ActiveEvent] = []
        self.history: list[dict[str, Any]] = []

    def update(self, delta_time: float, frequency: float = 1.0) -> list[OverlayTransition]:
        """Sweep expired records, then maybe trigger a new event.

        Args:
            delta_time: Real seconds since the last update
            frequency: Mode multiplier on every event's chance
        """
        transitions: list[OverlayTransition] = []
        self.clock += delta_time

        still_active: list[ActiveEvent] = []
        for record in self.active:
            record.remaining -= delta_time
            if record.remaining <= 0:
                transitions.append(OverlayTransition("expired", record))
                logger.info("Random event expired: %s", record.event_id)
            else:
                still_active.append(record)
        self.active = still_active

        self.check_cooldown -= delta_time
        if self.check_cooldown <= 0:
            self.check_cooldown = self.check_interval
            triggered = self.try_trigger(frequency)
            if triggered is not None:
                transitions.append(OverlayTransition("triggered", triggered))

        return transitions

    def try_trigger(self, frequency: float = 1.0) -> Optional[ActiveEvent]:
        """Roll the pool in order; trigger the first hit that is not active."""
        for definition in self._catalog.random_events():
            if self._rng.random() < definition.chance * frequency:
                if self.has_active(definition.id):
                    continue
                return self.trigger(definition)
        return None

    def trigger(self, definition: RandomEventDefinition) -> ActiveEvent:
        duration = definition.duration if definition.duration is not None else DEFAULT_EVENT_DURATION
        record = ActiveEvent(
            record_id=new_id(self._rng, "event"),
            event_id=definition.id,
            name=definition.name,
            kind=definition.kind,
            effect=definition.effect,
            remaining=duration,
            duration=duration,
            triggered_at=self.clock,
        )
        self.active.append(record)
        self.history.append({"event_id": definition.id, "name": definition.name, "triggered_at": self.clock})
        if len(self.history) > EVENT_HISTORY_LIMIT:
            self.history = self.history[-EVENT_HISTORY_LIMIT:]
        logger.info("Random event triggered: %s (%s, %.0fs)", definition.id, definition.kind, duration)
        return record

    def has_active(self, event_id: str) -> bool:
        return any(r.event_id == event_id for r in self.active)

    def snapshot(self) -> OverlaySnapshot:
        """Fold every active duration-bound effect into one snapshot."""
        golden = contamination = efficiency = deadline = 1.0
        paused = False
        for record in self.active:
            match record.effect:
                case GoldenBoost(value=value):
                    golden *= value
                case ContaminationShift(value=value):
                    contamination *= value
                case EfficiencyBoost(value=value):
                    efficiency *= value
                case DeadlineShift(value=value):
                    deadline *= value
                case PauseGrowth():
                    paused = True
                case GoldBonus() | QualityDrop() | LoseItems() | RareItem() | Mutation():
                    pass
                case _:
                    raise TypeError(f"Unsupported overlay effect: {record.effect!r}")
        return OverlaySnapshot(golden, contamination, efficiency, deadline, paused)

    def take_one_shots(self) -> list[ActiveEvent]:
        """Return one-shot records not yet applied, marking them applied."""
        pending = [r for r in self.active if r.is_one_shot and not r.applied]
        for record in pending:
            record.applied = True
        return pending

    def clear(self) -> None:
        self.active.clear()
        self.check_cooldown = self.check_interval

    def to_dict(self) -> dict[str, Any]:
        return {
            "schema_version": EVENTS_SCHEMA_VERSION,
            "check_interval": self.check_interval,
            "check_cooldown": self.check_cooldown,
            "clock": self.clock,
            "active": [r.to_dict() for r in self.active],
            "history": list(self.history),
        }

    @classmethod
    def from_dict(
        cls, data: dict[str, Any], catalog: Catalog, rng: Optional[random.Random] = None
    ) -> RandomEventManager:
        check_entity_version(data, EVENTS_SCHEMA_VERSION, "random events")
        manager = cls(catalog, rng, check_interval=float(data.get("check_interval", EVENT_CHECK_INTERVAL)))
        manager.check_cooldown = float(data.get("check_cooldown", manager.check_interval))
        manager.clock = float(data.get("clock", 0.0))
        manager.active = [ActiveEvent.from_dict(r) for r in data.get("active", [])]
        manager.history = list(data.get("history", []))[-EVENT_HISTORY_LIMIT:]
        return manager
