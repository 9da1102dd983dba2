"""Incubator: fixed-capacity slot container that advances its cultures.

Slots are unlocked contiguously from index 0 by spending gold. Each
unlocked slot holds at most one cell, and a locked slot never holds one.

Temporary overrides (a full growth pause, a contamination multiplier) are
stored as expiry timestamps on the incubator's own wall clock. The clock
only moves through :meth:`Incubator.advance_clock`, which the engine feeds
with real elapsed seconds; game speed never shortens an override.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import Any, Optional, Protocol

from cellmaster.catalog.registry import Catalog
from cellmaster.config.incubator import MAX_SLOTS, SLOT_UNLOCK_COSTS
from cellmaster.contracts.version import INCUBATOR_SCHEMA_VERSION, check_entity_version
from cellmaster.entities.cell import Cell, CellStatus
from cellmaster.result import ActionResult

logger = logging.getLogger(__name__)


class Wallet(Protocol):
    gold: int

    def spend_gold(self, amount: int) -> bool: ...


@dataclass
class Slot:
    index: int
    cell: Optional[Cell] = None
    locked: bool = True

    @property
    def is_empty(self) -> bool:
        return not self.locked and self.cell is None


@dataclass(frozen=True)
class StatusChange:
    """A cell changed status during an incubator update."""

    slot_index: int
    cell: Cell
    previous: CellStatus
    status: CellStatus


class Incubator:
    """Slot container for live cultures."""

    def __init__(
        self,
        unlocked_slots: int = 5,
        mode_contamination_rate: float = 1.0,
        max_slots: int = MAX_SLOTS,
    ) -> None:
        self.max_slots = max_slots
        self.unlocked_slots = max(0, min(unlocked_slots, max_slots))
        self.mode_contamination_rate = mode_contamination_rate
        self.slots = [Slot(i, locked=i >= self.unlocked_slots) for i in range(max_slots)]

        # Wall-clock overrides
        self._clock = 0.0
        self._paused_until: Optional[float] = None
        self._multiplier_value = 1.0
        self._multiplier_until: Optional[float] = None

    # ------------------------------------------------------------------
    # Slot access
    # ------------------------------------------------------------------

    def get_slot(self, slot_index: int) -> Optional[Slot]:
        if 0 <= slot_index < len(self.slots):
            return self.slots[slot_index]
        return None

    def get_cell(self, slot_index: int) -> Optional[Cell]:
        slot = self.get_slot(slot_index)
        return slot.cell if slot else None

    def empty_slots(self) -> list[Slot]:
        return [s for s in self.slots if s.is_empty]

    def occupied_slots(self) -> list[Slot]:
        return [s for s in self.slots if s.cell is not None]

    def cells(self) -> list[Cell]:
        return [s.cell for s in self.slots if s.cell is not None]

    def find_cell(self, cell_id: str) -> Optional[Slot]:
        return next((s for s in self.slots if s.cell is not None and s.cell.id == cell_id), None)

    def check_placement(self, slot_index: Optional[int] = None) -> ActionResult:
        """Resolve the slot a new cell would go to, without placing anything."""
        if slot_index is None:
            empty = self.empty_slots()
            if not empty:
                return ActionResult.fail("No empty slot")
            return ActionResult.ok(f"Slot {empty[0].index} is free", slot_index=empty[0].index)

        slot = self.get_slot(slot_index)
        if slot is None:
            return ActionResult.fail(f"Slot {slot_index} does not exist")
        if slot.locked:
            return ActionResult.fail(f"Slot {slot_index} is locked")
        if slot.cell is not None:
            return ActionResult.fail(f"Slot {slot_index} is occupied")
        return ActionResult.ok(f"Slot {slot_index} is free", slot_index=slot_index)

    def place_cell(self, cell: Cell, slot_index: Optional[int] = None) -> ActionResult:
        """Put a cell into a slot, or into the first empty slot if none is given.

        Never displaces an existing cell.
        """
        check = self.check_placement(slot_index)
        if not check.success:
            return check

        slot = self.slots[check.get("slot_index")]
        slot.cell = cell
        cell.slot_index = slot.index
        return ActionResult.ok(f"{cell.name} placed in slot {slot.index}", slot_index=slot.index)

    def remove_cell(self, slot_index: int) -> Optional[Cell]:
        """Detach and return the cell in a slot; None if the slot is empty."""
        slot = self.get_slot(slot_index)
        if slot is None or slot.cell is None:
            return None
        cell = slot.cell
        slot.cell = None
        cell.slot_index = None
        return cell

    # ------------------------------------------------------------------
    # Unlocking
    # ------------------------------------------------------------------

    def next_unlock_cost(self) -> Optional[int]:
        if self.unlocked_slots >= self.max_slots:
            return None
        if self.unlocked_slots < len(SLOT_UNLOCK_COSTS):
            return SLOT_UNLOCK_COSTS[self.unlocked_slots]
        return SLOT_UNLOCK_COSTS[-1]

    def unlock_slot(self, wallet: Wallet) -> ActionResult:
        """Unlock the next slot in index order, paying from ``wallet``."""
        cost = self.next_unlock_cost()
        if cost is None:
            return ActionResult.fail("All slots are already unlocked")
        if wallet.gold < cost or not wallet.spend_gold(cost):
            return ActionResult.fail(f"Not enough gold (need {cost})", cost=cost)

        slot = self.slots[self.unlocked_slots]
        slot.locked = False
        self.unlocked_slots += 1
        logger.info("Unlocked incubator slot %d for %d gold", slot.index, cost)
        return ActionResult.ok(f"Slot {slot.index} unlocked", slot_index=slot.index, cost=cost)

    # ------------------------------------------------------------------
    # Wall-clock overrides
    # ------------------------------------------------------------------

    @property
    def is_paused(self) -> bool:
        return self._paused_until is not None and self._clock < self._paused_until

    @property
    def contamination_multiplier(self) -> float:
        if self._multiplier_until is not None and self._clock < self._multiplier_until:
            return self._multiplier_value
        return 1.0

    def pause(self, duration: float) -> None:
        """Freeze all growth for ``duration`` real seconds."""
        until = self._clock + duration
        self._paused_until = max(until, self._paused_until or until)

    def set_contamination_multiplier(self, value: float, duration: float) -> None:
        """Scale lab-wide contamination risk for ``duration`` real seconds."""
        self._multiplier_value = value
        self._multiplier_until = self._clock + duration

    def advance_clock(self, real_delta: float) -> None:
        """Advance the wall clock and drop overrides that have expired."""
        self._clock += max(0.0, real_delta)
        if self._paused_until is not None and self._clock >= self._paused_until:
            self._paused_until = None
            logger.debug("Incubator pause expired")
        if self._multiplier_until is not None and self._clock >= self._multiplier_until:
            self._multiplier_until = None
            self._multiplier_value = 1.0
            logger.debug("Incubator contamination override expired")

    def cancel_timers(self) -> None:
        """Drop every pending override immediately."""
        self._paused_until = None
        self._multiplier_until = None
        self._multiplier_value = 1.0

    # ------------------------------------------------------------------
    # Tick
    # ------------------------------------------------------------------

    def update(self, delta_time: float, rate_multiplier: float = 1.0) -> list[StatusChange]:
        """Advance every live culture.

        Args:
            delta_time: Seconds to advance (speed and efficiency applied)
            rate_multiplier: Extra one-tick contamination multiplier

        Returns:
            One StatusChange per cell whose status changed this tick
        """
        if self.is_paused:
            return []

        total_multiplier = self.mode_contamination_rate * self.contamination_multiplier * rate_multiplier
        changes: list[StatusChange] = []
        for slot in self.slots:
            cell = slot.cell
            # Ready cells keep ticking so overgrowth can set in
            if cell is None or cell.is_contaminated:
                continue
            previous = cell.status
            cell.update(delta_time, total_multiplier)
            if cell.status is not previous:
                changes.append(StatusChange(slot.index, cell, previous, cell.status))
        return changes

    def stats(self) -> dict[str, int]:
        occupied = self.occupied_slots()
        return {
            "total": self.max_slots,
            "unlocked": self.unlocked_slots,
            "occupied": len(occupied),
            "empty": len(self.empty_slots()),
            "growing": sum(1 for s in occupied if s.cell.is_growing),
            "ready": sum(1 for s in occupied if s.cell.is_ready),
            "contaminated": sum(1 for s in occupied if s.cell.is_contaminated),
        }

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def to_dict(self) -> dict[str, Any]:
        return {
            "schema_version": INCUBATOR_SCHEMA_VERSION,
            "max_slots": self.max_slots,
            "unlocked_slots": self.unlocked_slots,
            "mode_contamination_rate": self.mode_contamination_rate,
            "clock": self._clock,
            "paused_until": self._paused_until,
            "multiplier_value": self._multiplier_value,
            "multiplier_until": self._multiplier_until,
            "slots": [
                {"index": s.index, "locked": s.locked, "cell": s.cell.to_dict() if s.cell else None}
                for s in self.slots
            ],
        }

    @classmethod
    def from_dict(
        cls, data: dict[str, Any], catalog: Catalog, rng: Optional[random.Random] = None
    ) -> Incubator:
        check_entity_version(data, INCUBATOR_SCHEMA_VERSION, "incubator")
        incubator = cls(
            unlocked_slots=int(data.get("unlocked_slots", 5)),
            mode_contamination_rate=data.get("mode_contamination_rate", 1.0),
            max_slots=int(data.get("max_slots", MAX_SLOTS)),
        )
        incubator._clock = float(data.get("clock", 0.0))
        incubator._paused_until = data.get("paused_until")
        incubator._multiplier_value = data.get("multiplier_value", 1.0)
        incubator._multiplier_until = data.get("multiplier_until")

        for slot_data in data.get("slots", []):
            slot = incubator.get_slot(int(slot_data["index"]))
            if slot is None:
                continue
            slot.locked = slot.index >= incubator.unlocked_slots
            cell_data = slot_data.get("cell")
            if cell_data and not slot.locked:
                cell = Cell.from_dict(cell_data, catalog.cell_type(cell_data["type_id"]), rng)
                cell.slot_index = slot.index
                slot.cell = cell
        return incubator
