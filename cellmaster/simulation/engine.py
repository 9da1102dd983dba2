"""Lab engine: advances a session by one tick.

The engine owns no game state of its own beyond bookkeeping; everything it
touches lives on the :class:`~cellmaster.simulation.session.LabSession`.
Each tick runs the :class:`~cellmaster.simulation.phases.TickPhase` members
in order and returns a :class:`TickReport` describing what happened.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Optional

from cellmaster.effects import GoldBonus, LoseItems, Mutation, QualityDrop, RareItem
from cellmaster.entities.cell import Cell, CellStatus
from cellmaster.events.domain_events import (
    BankruptcyEvent,
    CellStatusChangedEvent,
    RandomEventExpiredEvent,
    RandomEventTriggeredEvent,
    TaskExpiredEvent,
)
from cellmaster.incubator import StatusChange
from cellmaster.overlay import ActiveEvent, OverlaySnapshot
from cellmaster.simulation.phases import TickPhase
from cellmaster.simulation.session import LabSession

logger = logging.getLogger(__name__)


@dataclass
class TickReport:
    """Summary of a single tick."""

    real_delta: float
    game_minutes: float = 0.0
    snapshot: OverlaySnapshot = field(default_factory=OverlaySnapshot)
    status_changes: list[StatusChange] = field(default_factory=list)
    expired_tasks: list[str] = field(default_factory=list)
    penalties_charged: int = 0
    triggered_events: list[str] = field(default_factory=list)
    expired_events: list[str] = field(default_factory=list)
    one_shots: list[dict[str, Any]] = field(default_factory=list)
    bankrupt: bool = False
    events: list[object] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "real_delta": self.real_delta,
            "game_minutes": self.game_minutes,
            "status_changes": [
                {"slot_index": c.slot_index, "cell_id": c.cell.id, "status": c.status.value}
                for c in self.status_changes
            ],
            "expired_tasks": list(self.expired_tasks),
            "penalties_charged": self.penalties_charged,
            "triggered_events": list(self.triggered_events),
            "expired_events": list(self.expired_events),
            "one_shots": list(self.one_shots),
            "bankrupt": self.bankrupt,
        }


class LabEngine:
    """Runs ticks against a session.

    Example:
        session = LabSession.new("medium", seed=42)
        engine = LabEngine(session)
        report = engine.tick(1.0)
    """

    def __init__(self, session: LabSession) -> None:
        self.session = session
        self.tick_count = 0
        self.stopped = False
        self._current_phase: Optional[TickPhase] = None
        # A lab restored while already bankrupt was reported before it was saved
        self._bankruptcy_reported = session.player.is_bankrupt()

    @property
    def current_phase(self) -> Optional[TickPhase]:
        return self._current_phase

    def stop(self) -> None:
        """Stop ticking and cancel pending wall-clock overrides."""
        if self.stopped:
            return
        self.stopped = True
        self.session.incubator.cancel_timers()
        self.session.bus.discard_pending()
        logger.info("Lab engine stopped after %d ticks", self.tick_count)

    # =========================================================================
    # Tick
    # =========================================================================

    def tick(self, real_delta: float) -> TickReport:
        """Advance the lab by ``real_delta`` real seconds.

        A stopped engine returns an empty report and changes nothing.
        """
        report = TickReport(real_delta=real_delta)
        if self.stopped or real_delta <= 0:
            return report

        self.tick_count += 1
        self._phase_clock(report)
        snapshot = self._phase_overlay(report)
        self._phase_incubator(report, snapshot)
        self._phase_tasks(report, snapshot)
        self._phase_events(report)
        self._phase_effects(report)
        self._phase_bankruptcy(report)
        self._phase_notify(report)
        self._current_phase = None
        return report

    # -------------------------------------------------------------------------
    # Phase Implementations
    # -------------------------------------------------------------------------

    def _phase_clock(self, report: TickReport) -> None:
        """CLOCK: Advance the game clock and the incubator wall clock."""
        self._current_phase = TickPhase.CLOCK
        self.session.player.clock.advance_time(report.real_delta)
        self.session.incubator.advance_clock(report.real_delta)
        report.game_minutes = self.session.game_minutes

    def _phase_overlay(self, report: TickReport) -> OverlaySnapshot:
        """OVERLAY: Snapshot the active random events."""
        self._current_phase = TickPhase.OVERLAY
        report.snapshot = self.session.events.snapshot()
        return report.snapshot

    def _phase_incubator(self, report: TickReport, snapshot: OverlaySnapshot) -> None:
        """INCUBATOR: Grow cultures under the overlay."""
        self._current_phase = TickPhase.INCUBATOR
        if snapshot.growth_paused:
            return

        session = self.session
        incubator = session.incubator
        if snapshot.contamination_multiplier * incubator.contamination_multiplier > 1.0:
            for cell in incubator.cells():
                if cell.is_growing:
                    cell.had_contamination_risk = True

        speed = session.player.clock.speed
        delta = report.real_delta * speed * snapshot.efficiency_multiplier
        changes = incubator.update(delta, snapshot.contamination_multiplier)
        report.status_changes.extend(changes)

        for change in changes:
            if change.status is CellStatus.READY and snapshot.golden_multiplier > 1.0:
                change.cell.golden_chance *= snapshot.golden_multiplier
            if change.status is CellStatus.CONTAMINATED:
                session.player.stats["cells_contaminated"] += 1
            session.bus.enqueue(
                CellStatusChangedEvent(
                    cell_id=change.cell.id,
                    cell_type=change.cell.type_id,
                    slot_index=change.slot_index,
                    previous=change.previous.value,
                    status=change.status.value,
                    game_minutes=report.game_minutes,
                )
            )

    def _phase_tasks(self, report: TickReport, snapshot: OverlaySnapshot) -> None:
        """TASKS: Count deadlines down and charge expiry penalties."""
        self._current_phase = TickPhase.TASKS
        session = self.session
        player = session.player
        outcome = session.tasks.update(
            report.real_delta,
            player.level,
            speed=player.clock.speed,
            deadline_multiplier=snapshot.deadline_multiplier,
        )
        for task, penalty in outcome.expired:
            charged = player.charge_penalty(penalty.gold)
            player.stats["reputation"] -= penalty.reputation
            player.stats["tasks_failed"] += 1
            report.expired_tasks.append(task.id)
            report.penalties_charged += charged
            session.bus.enqueue(
                TaskExpiredEvent(
                    task_id=task.id,
                    template_id=task.template_id,
                    penalty=charged,
                    reputation=penalty.reputation,
                    game_minutes=report.game_minutes,
                )
            )

    def _phase_events(self, report: TickReport) -> None:
        """EVENTS: Sweep expired random events, then roll for a new one."""
        self._current_phase = TickPhase.EVENTS
        session = self.session
        for transition in session.events.update(report.real_delta, session.mode.event_frequency):
            record = transition.event
            if transition.kind == "triggered":
                report.triggered_events.append(record.event_id)
                session.bus.enqueue(
                    RandomEventTriggeredEvent(
                        event_id=record.event_id,
                        name=record.name,
                        kind=record.kind,
                        duration=record.duration,
                        game_minutes=report.game_minutes,
                    )
                )
            else:
                report.expired_events.append(record.event_id)
                session.bus.enqueue(
                    RandomEventExpiredEvent(
                        event_id=record.event_id, name=record.name, game_minutes=report.game_minutes
                    )
                )

    def _phase_effects(self, report: TickReport) -> None:
        """EFFECTS: Apply each one-shot event effect exactly once."""
        self._current_phase = TickPhase.EFFECTS
        for record in self.session.events.take_one_shots():
            report.one_shots.append(self.apply_one_shot(record))

    def _phase_bankruptcy(self, report: TickReport) -> None:
        """BANKRUPTCY: Report the transition into bankruptcy once."""
        self._current_phase = TickPhase.BANKRUPTCY
        player = self.session.player
        report.bankrupt = player.is_bankrupt()
        if report.bankrupt and not self._bankruptcy_reported:
            logger.info("Lab is bankrupt (gold=%d, pearls=%d)", player.gold, player.golden_pearls)
            self.session.bus.enqueue(
                BankruptcyEvent(
                    gold=player.gold,
                    golden_pearls=player.golden_pearls,
                    game_minutes=report.game_minutes,
                )
            )
        self._bankruptcy_reported = report.bankrupt

    def _phase_notify(self, report: TickReport) -> None:
        """NOTIFY: Dispatch everything queued during the tick."""
        self._current_phase = TickPhase.NOTIFY
        report.events = self.session.bus.flush()

    # -------------------------------------------------------------------------
    # One-shot effects
    # -------------------------------------------------------------------------

    def _random_live_cell(self) -> Optional[Cell]:
        live = [c for c in self.session.incubator.cells() if not c.is_contaminated]
        if not live:
            return None
        return self.session.rng.choice(live)

    def apply_one_shot(self, record: ActiveEvent) -> dict[str, Any]:
        """Apply a one-shot overlay effect and describe what it did."""
        session = self.session
        player = session.player
        applied: dict[str, Any] = {"event_id": record.event_id}

        match record.effect:
            case GoldBonus(amount=amount):
                player.add_gold(amount)
                applied["gold"] = amount
            case QualityDrop(value=value):
                cell = self._random_live_cell()
                if cell is not None:
                    cell.apply_quality_bonus(value)
                    applied.update(cell_id=cell.id, quality_delta=value)
            case LoseItems(item_ids=item_ids):
                lost = [item_id for item_id in item_ids if player.remove_item(item_id)]
                applied["lost_items"] = lost
            case RareItem(pool=pool):
                item_id = session.rng.choice(pool)
                player.add_item(item_id)
                applied["item"] = item_id
            case Mutation(low=low, high=high):
                cell = self._random_live_cell()
                if cell is not None:
                    delta = session.rng.randint(low, high)
                    cell.apply_quality_bonus(delta)
                    applied.update(cell_id=cell.id, quality_delta=delta)
            case _:
                raise TypeError(f"Not a one-shot effect: {record.effect!r}")

        logger.debug("Applied one-shot effect %s: %s", record.event_id, applied)
        return applied
