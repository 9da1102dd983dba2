"""Player actions on a lab session.

Every action is synchronous and applied immediately, outside the tick.
Each returns an :class:`~cellmaster.result.ActionResult`:

- ``success=False`` when a precondition does not hold (not enough gold,
  wrong cell status, empty slot...). Nothing is changed in that case.
- ``success=True`` when the action was applied. Unlucky biological
  outcomes (a failed passage, a failed QC) are still applied actions; the
  payload's ``outcome`` tells them apart.

Only unknown catalog ids raise (:class:`~cellmaster.exceptions.UnknownCatalogIdError`).
"""

from __future__ import annotations

import logging
from collections import Counter
from typing import Iterable, Optional

from cellmaster.catalog.cell_types import WILDCARD_CELL_TYPE
from cellmaster.config.lab import (
    ADVANCED_PASSAGE_REAGENT,
    EMERGENCY_SAVE_ITEM,
    FREEZE_REAGENT,
    PASSAGE_CONTAMINATION_RISK,
    PASSAGE_MAX_RATIO_BY_LEVEL,
    PASSAGE_REAGENTS,
    PASSAGE_SUCCESS_RATES,
    QC_REAGENT,
    THAW_QUALITY_FLOOR,
    THAW_QUALITY_LOSS_MAX,
    THAW_QUALITY_LOSS_MIN,
    THAW_START_PROGRESS,
)
from cellmaster.config.tasks import FORCED_REFRESH_COST
from cellmaster.entities.cell import Cell, CellStatus
from cellmaster.entities.storage import FrozenCell, HarvestedCell
from cellmaster.entity_ids import new_id
from cellmaster.events.domain_events import (
    CellHarvestedEvent,
    CellStatusChangedEvent,
    LevelUpEvent,
    TaskCompletedEvent,
)
from cellmaster.player import Player
from cellmaster.result import ActionResult
from cellmaster.simulation.session import LabSession

logger = logging.getLogger(__name__)


def max_passage_ratio(level: int) -> int:
    """Highest split ratio unlocked at ``level``."""
    return max(ratio for min_level, ratio in PASSAGE_MAX_RATIO_BY_LEVEL.items() if min_level <= level)


class LabActions:
    """The player's action surface over one session."""

    def __init__(self, session: LabSession) -> None:
        self.session = session

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @property
    def _player(self) -> Player:
        return self.session.player

    def _now(self) -> float:
        return self.session.game_minutes

    def _grant_exp(self, amount: int) -> Optional[int]:
        level_up = self._player.add_exp(amount)
        if level_up is None:
            return None
        self.session.bus.emit(LevelUpEvent(level_up.old_level, level_up.new_level, self._now()))
        return level_up.new_level

    def _missing_items(self, item_ids: Iterable[str]) -> list[str]:
        needed = Counter(item_ids)
        return [item_id for item_id, count in needed.items() if not self._player.has_item(item_id, count)]

    def _cell_at(self, slot_index: int) -> Optional[Cell]:
        return self.session.incubator.get_cell(slot_index)

    def _emit_contaminated(self, cell: Cell, previous: CellStatus) -> None:
        self._player.stats["cells_contaminated"] += 1
        self.session.bus.emit(
            CellStatusChangedEvent(
                cell_id=cell.id,
                cell_type=cell.type_id,
                slot_index=cell.slot_index if cell.slot_index is not None else -1,
                previous=previous.value,
                status=CellStatus.CONTAMINATED.value,
                game_minutes=self._now(),
            )
        )

    # ------------------------------------------------------------------
    # Cultivation
    # ------------------------------------------------------------------

    def start_cultivation(
        self,
        cell_type_id: str,
        slot_index: Optional[int] = None,
        items_to_apply: Iterable[str] = (),
    ) -> ActionResult:
        """Start a new culture.

        Consumes the type's medium, serum and required add-ons plus one of
        each extra item, all-or-nothing. Every consumed item with a cell
        effect is applied to the new culture and remembered as a treatment.

        Raises:
            UnknownCatalogIdError: If the cell type or an extra item is unknown
        """
        catalog = self.session.catalog
        cell_type = catalog.cell_type(cell_type_id)
        extras = list(items_to_apply)
        for item_id in extras:
            catalog.item(item_id)

        if not cell_type.cultivable:
            return ActionResult.fail(f"{cell_type.name} cannot be cultivated")
        if self._player.level < cell_type.unlock_level:
            return ActionResult.fail(f"{cell_type.name} unlocks at level {cell_type.unlock_level}")

        placement = self.session.incubator.check_placement(slot_index)
        if not placement.success:
            return placement

        consumed = list(cell_type.cultivation_items) + extras
        missing = self._missing_items(consumed)
        if missing:
            return ActionResult.fail(f"Missing items: {', '.join(missing)}", missing=missing)
        for item_id in consumed:
            self._player.remove_item(item_id)

        cell = Cell.create(cell_type, self.session.rng, golden_boost=self.session.mode.golden_boost)
        for item_id in consumed:
            cell.apply_item(item_id, catalog.item(item_id).effects)

        self.session.incubator.place_cell(cell, placement.get("slot_index"))
        self._player.stats["cells_grown"] += 1
        logger.debug("Started %s in slot %d", cell.type_id, cell.slot_index)
        return ActionResult.ok(
            f"Started {cell_type.name} in slot {cell.slot_index}",
            cell_id=cell.id,
            slot_index=cell.slot_index,
            consumed=consumed,
            quality=cell.quality,
        )

    def apply_item(self, slot_index: int, item_id: str) -> ActionResult:
        """Use an item with a cell effect on a live culture.

        Raises:
            UnknownCatalogIdError: If the item is unknown
        """
        item = self.session.catalog.item(item_id)
        cell = self._cell_at(slot_index)
        if cell is None:
            return ActionResult.fail("Slot is empty")
        if cell.is_contaminated:
            return ActionResult.fail("Cell is contaminated")
        if not item.effects:
            return ActionResult.fail(f"{item.name} cannot be applied to a culture")
        if not self._player.remove_item(item_id):
            return ActionResult.fail(f"No {item.name} in inventory")

        cell.apply_item(item_id, item.effects)
        return ActionResult.ok(
            f"Applied {item.name} to {cell.name}", cell_id=cell.id, item_id=item_id, quality=cell.quality
        )

    def harvest(self, slot_index: int) -> ActionResult:
        """Harvest a ready culture into storage.

        Grants the harvest experience; the cells themselves are worth
        gold once delivered or sold. A golden drop adds a golden pearl and
        a wildcard stock to storage.
        """
        cell = self._cell_at(slot_index)
        if cell is None:
            return ActionResult.fail("Slot is empty")
        outcome = cell.harvest()
        if not outcome.success:
            return ActionResult.fail("Cell is not ready for harvest")

        session = self.session
        cell_type = session.catalog.cell_type(cell.type_id)
        session.incubator.remove_cell(slot_index)

        records = [HarvestedCell.from_cell(cell, session.rng) for _ in range(cell_type.harvest_yield)]
        for record in records:
            session.storage.add_harvested(record)

        golden_id = None
        if outcome.golden_pearl:
            self._player.add_golden_pearl()
            wildcard = session.catalog.cell_type(WILDCARD_CELL_TYPE)
            golden = HarvestedCell(
                id=new_id(session.rng, "harvest"),
                type_id=wildcard.id,
                quality=float(wildcard.implied_quality or 100),
            )
            session.storage.add_harvested(golden)
            golden_id = golden.id
            logger.info("Golden pearl found harvesting %s", cell.id)

        self._player.stats["cells_harvested"] += 1
        new_level = self._grant_exp(outcome.exp)
        session.bus.emit(
            CellHarvestedEvent(
                cell_id=cell.id,
                cell_type=cell.type_id,
                value=outcome.value,
                exp=outcome.exp,
                quality=outcome.quality,
                golden_pearl=outcome.golden_pearl,
                game_minutes=self._now(),
            )
        )
        return ActionResult.ok(
            f"Harvested {cell.name}",
            value=outcome.value,
            exp=outcome.exp,
            quality=outcome.quality,
            golden_pearl=outcome.golden_pearl,
            golden_value=outcome.golden_value,
            harvested_ids=[r.id for r in records],
            golden_stock_id=golden_id,
            level_up=new_level,
        )

    def discard(self, slot_index: int) -> ActionResult:
        cell = self.session.incubator.remove_cell(slot_index)
        if cell is None:
            return ActionResult.fail("Slot is empty")
        return ActionResult.ok(f"Discarded {cell.name}", cell_id=cell.id)

    def emergency_rescue(self, slot_index: int) -> ActionResult:
        """Salvage a contaminated culture with an emergency kit."""
        cell = self._cell_at(slot_index)
        if cell is None:
            return ActionResult.fail("Slot is empty")
        if not cell.is_contaminated:
            return ActionResult.fail("Only contaminated cells can be rescued")
        if not self._player.has_item(EMERGENCY_SAVE_ITEM):
            return ActionResult.fail("No emergency kit in inventory")

        outcome = cell.emergency_save()
        self._player.remove_item(EMERGENCY_SAVE_ITEM)
        self.session.incubator.remove_cell(slot_index)
        self._player.add_gold(outcome.value)
        new_level = self._grant_exp(outcome.exp)
        return ActionResult.ok(
            f"Rescued {cell.name}", value=outcome.value, exp=outcome.exp, level_up=new_level
        )

    # ------------------------------------------------------------------
    # Bench operations
    # ------------------------------------------------------------------

    def passage(self, slot_index: int, ratio: int = 2, use_reagent: bool = False) -> ActionResult:
        """Split a ready culture into new slots.

        Reagents are spent as soon as the split is attempted. A failed
        split leaves the parent as it was; a successful one places the
        children and resets the parent to a fresh growing culture, and a
        contamination roll may then spoil the whole lineage.
        """
        session = self.session
        cell = self._cell_at(slot_index)
        if cell is None:
            return ActionResult.fail("Slot is empty")
        if not cell.is_ready:
            return ActionResult.fail("Only ready cells can be passaged")

        max_ratio = max_passage_ratio(self._player.level)
        if ratio < 2 or ratio > max_ratio or ratio not in PASSAGE_SUCCESS_RATES:
            return ActionResult.fail(f"Split ratio must be between 2 and {max_ratio}")

        reagents = list(PASSAGE_REAGENTS)
        if use_reagent:
            reagents.append(ADVANCED_PASSAGE_REAGENT)
        missing = self._missing_items(reagents)
        if missing:
            return ActionResult.fail(f"Missing reagents: {', '.join(missing)}", missing=missing)

        free_slots = session.incubator.empty_slots()[: ratio - 1]
        if not free_slots:
            return ActionResult.fail("No empty slot for the split")

        for item_id in reagents:
            self._player.remove_item(item_id)

        if session.rng.random() >= PASSAGE_SUCCESS_RATES[ratio]:
            return ActionResult.ok("Passage failed, the cells did not survive the split", outcome="failed")

        cell_type = session.catalog.cell_type(cell.type_id)
        children = []
        for slot in free_slots:
            child = cell.passage(cell_type, slot.index, use_advanced_reagent=use_reagent)
            session.incubator.place_cell(child, slot.index)
            children.append(child)
        cell.reset_after_passage()
        self._player.stats["cells_grown"] += len(children)

        outcome = "success"
        if session.rng.random() < PASSAGE_CONTAMINATION_RISK[ratio]:
            outcome = "contaminated"
            for lineage_cell in (cell, *children):
                previous = lineage_cell.status
                lineage_cell.contaminate()
                self._emit_contaminated(lineage_cell, previous)

        return ActionResult.ok(
            f"Passaged {cell.name} into {len(children)} new culture(s)",
            outcome=outcome,
            child_ids=[c.id for c in children],
            child_slots=[c.slot_index for c in children],
            child_qualities=[c.quality for c in children],
            parent_quality=cell.quality,
        )

    def run_qc(self, slot_index: int) -> ActionResult:
        """Mycoplasma-test a culture, spending one test kit."""
        cell = self._cell_at(slot_index)
        if cell is None:
            return ActionResult.fail("Slot is empty")
        if cell.is_contaminated:
            return ActionResult.fail("Cell is contaminated")
        if not self._player.remove_item(QC_REAGENT):
            return ActionResult.fail("No mycoplasma test in inventory")

        previous = cell.status
        if cell.perform_qc():
            return ActionResult.ok(f"{cell.name} passed QC", outcome="passed", quality=cell.quality)
        self._emit_contaminated(cell, previous)
        return ActionResult.ok(f"{cell.name} failed QC: hidden contamination found", outcome="failed")

    def freeze(self, slot_index: int) -> ActionResult:
        """Cryopreserve a ready culture."""
        session = self.session
        cell = self._cell_at(slot_index)
        if cell is None:
            return ActionResult.fail("Slot is empty")
        if not cell.is_ready:
            return ActionResult.fail("Only ready cells can be frozen")
        if not self._player.remove_item(FREEZE_REAGENT):
            return ActionResult.fail(f"Freezing needs one {FREEZE_REAGENT}")

        session.incubator.remove_cell(slot_index)
        record = FrozenCell(
            id=new_id(session.rng, "frozen"),
            type_id=cell.type_id,
            quality=cell.quality,
            generation=cell.generation,
            has_antibiotics=cell.has_antibiotics,
            qc_passed=cell.qc_passed,
            frozen_at=self._now(),
        )
        session.storage.add_frozen(record)
        return ActionResult.ok(f"Froze {cell.name}", frozen_id=record.id)

    def thaw(self, frozen_id: str, slot_index: Optional[int] = None) -> ActionResult:
        """Bring a frozen culture back as a growing one, losing some quality."""
        session = self.session
        record = session.storage.get_frozen(frozen_id)
        if record is None:
            return ActionResult.fail("Frozen stock not found")
        placement = session.incubator.check_placement(slot_index)
        if not placement.success:
            return placement

        cell_type = session.catalog.cell_type(record.type_id)
        cell = Cell.create(cell_type, session.rng, golden_boost=session.mode.golden_boost)
        loss = session.rng.randint(THAW_QUALITY_LOSS_MIN, THAW_QUALITY_LOSS_MAX)
        cell.base_quality = max(THAW_QUALITY_FLOOR, record.quality - loss)
        cell.quality = cell.base_quality
        cell.growth_progress = THAW_START_PROGRESS
        cell.generation = record.generation
        cell.has_antibiotics = record.has_antibiotics
        cell.qc_passed = record.qc_passed

        session.storage.remove_frozen(frozen_id)
        session.incubator.place_cell(cell, placement.get("slot_index"))
        return ActionResult.ok(
            f"Thawed {cell.name} into slot {cell.slot_index}",
            cell_id=cell.id,
            slot_index=cell.slot_index,
            quality=cell.quality,
        )

    # ------------------------------------------------------------------
    # Contracts
    # ------------------------------------------------------------------

    def accept_contract(self, task_id: str) -> ActionResult:
        return self.session.tasks.accept(task_id)

    def deliver_cell(self, task_id: str, harvested_id: str) -> ActionResult:
        """Deliver one stored cell to an active contract, paying out on completion."""
        session = self.session
        record = session.storage.get_harvested(harvested_id)
        if record is None:
            return ActionResult.fail("Harvested cell not found")

        task = session.tasks.get_active(task_id)
        result = session.tasks.try_deliver(task_id, record)
        if not result.success:
            return result
        session.storage.remove_harvested(harvested_id)
        if not result.get("completed"):
            return result

        reward = task.final_reward()
        player = self._player
        player.add_gold(reward.gold)
        for item_id, count in reward.items.items():
            player.add_item(item_id, count)
        golden = reward.golden_chance > 0 and session.rng.random() < reward.golden_chance
        if golden:
            player.add_golden_pearl()
        player.stats["tasks_completed"] += 1
        new_level = self._grant_exp(reward.exp)

        session.bus.emit(
            TaskCompletedEvent(
                task_id=task.id,
                template_id=task.template_id,
                gold=reward.gold,
                exp=reward.exp,
                items=dict(reward.items),
                golden_pearl=golden,
                game_minutes=self._now(),
            )
        )
        return ActionResult.ok(
            f"Contract completed: {task.name}",
            **{**result.payload, "golden_pearl": golden, "level_up": new_level},
        )

    def abandon_contract(self, task_id: str) -> ActionResult:
        return self.session.tasks.abandon(task_id)

    def refresh_contracts(self, pay_currency: bool = True) -> ActionResult:
        """Rebuild the offer pool now; charges the refresh fee unless told not to."""
        cost = FORCED_REFRESH_COST if pay_currency else 0
        if cost and not self._player.spend_gold(cost):
            return ActionResult.fail(f"Not enough gold (need {cost})", cost=cost)
        added = self.session.tasks.force_refresh(self._player.level)
        return ActionResult.ok("Contract pool refreshed", cost=cost, added=added)

    # ------------------------------------------------------------------
    # Economy
    # ------------------------------------------------------------------

    def purchase(self, item_id: str, quantity: int = 1) -> ActionResult:
        """Buy items from the shop.

        Raises:
            UnknownCatalogIdError: If the item is unknown
        """
        item = self.session.catalog.item(item_id)
        if quantity < 1:
            return ActionResult.fail("Quantity must be at least 1")
        if self._player.level < item.unlock_level:
            return ActionResult.fail(f"{item.name} unlocks at level {item.unlock_level}")
        cost = item.price * quantity
        if not self._player.spend_gold(cost):
            return ActionResult.fail(f"Not enough gold (need {cost})", cost=cost)
        self._player.add_item(item_id, quantity)
        return ActionResult.ok(f"Bought {quantity}x {item.name}", item_id=item_id, quantity=quantity, cost=cost)

    def unlock_slot(self) -> ActionResult:
        return self.session.incubator.unlock_slot(self._player)

    def sell_harvested(self, harvested_id: str) -> ActionResult:
        """Sell a stored cell for its line's base value."""
        session = self.session
        record = session.storage.get_harvested(harvested_id)
        if record is None:
            return ActionResult.fail("Harvested cell not found")
        value = session.catalog.cell_type(record.type_id).base_value
        session.storage.remove_harvested(harvested_id)
        self._player.add_gold(value)
        return ActionResult.ok(f"Sold {record.type_id} for {value} gold", value=value)

    def sell_pearls(self, count: Optional[int] = None) -> ActionResult:
        return self._player.sell_golden_pearls(count)

    def set_speed(self, speed: int) -> ActionResult:
        return self._player.clock.set_speed(speed)
