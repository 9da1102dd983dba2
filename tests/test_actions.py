"""Tests for player actions on a lab session."""

import pytest

from cellmaster.entities.cell import Cell, CellStatus
from cellmaster.entities.storage import HarvestedCell
from cellmaster.events.domain_events import CellHarvestedEvent, LevelUpEvent, TaskCompletedEvent
from cellmaster.exceptions import UnknownCatalogIdError
from cellmaster.simulation import LabActions
from cellmaster.simulation.actions import max_passage_ratio


@pytest.fixture
def lab(scripted_session):
    return LabActions(scripted_session)


@pytest.fixture
def rng(scripted_session):
    return scripted_session.rng


def place(session, slot_index=0, type_id="hek293t", quality=65, status=CellStatus.READY):
    cell = Cell(
        session.catalog.cell_type(type_id),
        cell_id=f"cell_{slot_index}",
        base_quality=quality,
        growth_rate=1.0,
        rng=session.rng,
    )
    cell.status = status
    if status is CellStatus.READY:
        cell.growth_progress = 100.0
    session.incubator.place_cell(cell, slot_index)
    return cell


def fill_slots(session, *skip):
    for slot in session.incubator.empty_slots():
        if slot.index not in skip:
            place(session, slot.index, status=CellStatus.GROWING)


def recorder(bus, event_type):
    seen = []
    bus.subscribe(event_type, seen.append)
    return seen


class TestCultivation:
    def test_consumes_medium_and_serum(self, lab, rng, scripted_session):
        rng.push_ints(15)
        rng.push(0.5)

        result = lab.start_cultivation("hek293t")

        assert result.success
        assert result.get("slot_index") == 0
        assert result.get("consumed") == ["media_dmem", "fbs"]
        # FBS adds one point on top of the rolled 65
        assert result.get("quality") == 66
        player = scripted_session.player
        assert player.item_count("media_dmem") == 2
        assert player.item_count("fbs") == 2
        assert player.stats["cells_grown"] == 1
        cell = scripted_session.incubator.get_cell(0)
        assert cell.treatments == ["media_dmem", "fbs"]

    def test_extra_items_are_applied(self, lab, rng, scripted_session):
        scripted_session.player.add_item("ps")
        rng.push_ints(15)
        rng.push(0.5)

        result = lab.start_cultivation("hek293t", slot_index=2, items_to_apply=["ps"])

        assert result.get("slot_index") == 2
        cell = scripted_session.incubator.get_cell(2)
        assert cell.has_antibiotics
        assert cell.quality == 63
        assert not scripted_session.player.has_item("ps")

    def test_missing_items_change_nothing(self, lab, scripted_session):
        player = scripted_session.player
        player.remove_item("fbs", 3)

        result = lab.start_cultivation("hek293t")

        assert not result.success
        assert result.get("missing") == ["fbs"]
        assert player.item_count("media_dmem") == 3
        assert scripted_session.incubator.cells() == []

    def test_locked_cell_line(self, lab):
        result = lab.start_cultivation("a549")
        assert result.message == "A549 unlocks at level 2"

    def test_reward_only_line(self, lab):
        assert not lab.start_cultivation("golden_stock").success

    def test_unknown_ids_raise(self, lab):
        with pytest.raises(UnknownCatalogIdError) as exc:
            lab.start_cultivation("unicorn_cells")
        assert exc.value.kind == "cell type"

        with pytest.raises(UnknownCatalogIdError):
            lab.start_cultivation("hek293t", items_to_apply=["pixie_dust"])

    def test_no_empty_slot(self, lab, scripted_session):
        fill_slots(scripted_session)
        result = lab.start_cultivation("hek293t")
        assert result.message == "No empty slot"
        assert scripted_session.player.item_count("media_dmem") == 3

    def test_occupied_slot(self, lab, scripted_session):
        place(scripted_session, 1)
        result = lab.start_cultivation("hek293t", slot_index=1)
        assert result.message == "Slot 1 is occupied"


class TestApplyItem:
    def test_applies_cell_effect(self, lab, scripted_session):
        cell = place(scripted_session, status=CellStatus.GROWING)
        result = lab.apply_item(0, "fbs")
        assert result.success
        assert cell.quality == 66
        assert scripted_session.player.item_count("fbs") == 2

    def test_rejects_items_without_effects(self, lab, scripted_session):
        place(scripted_session, status=CellStatus.GROWING)
        assert not lab.apply_item(0, "pbs").success
        assert scripted_session.player.item_count("pbs") == 5

    def test_empty_slot(self, lab):
        assert lab.apply_item(0, "fbs").message == "Slot is empty"


class TestHarvest:
    def test_harvest_stores_cells_and_grants_exp(self, lab, rng, scripted_session):
        place(scripted_session)
        harvested = recorder(scripted_session.bus, CellHarvestedEvent)
        rng.push(0.99)

        result = lab.harvest(0)

        assert result.success
        assert result.get("value") == 76
        assert result.get("exp") == 7
        assert result.get("golden_pearl") is False
        player = scripted_session.player
        assert player.gold == 2000
        assert player.total_exp == 7
        assert player.stats["cells_harvested"] == 1
        assert [r.id for r in scripted_session.storage.harvested] == result.get("harvested_ids")
        assert scripted_session.storage.harvested[0].quality == 65
        assert scripted_session.incubator.get_cell(0) is None
        assert len(harvested) == 1

    def test_golden_drop(self, lab, rng, scripted_session):
        place(scripted_session)
        rng.push(0.0)

        result = lab.harvest(0)

        assert result.get("golden_pearl") is True
        assert result.get("golden_value") == 1000
        assert scripted_session.player.golden_pearls == 1
        golden = scripted_session.storage.get_harvested(result.get("golden_stock_id"))
        assert golden.type_id == "golden_stock"
        assert golden.quality == 100

    def test_level_up_is_reported(self, lab, rng, scripted_session):
        scripted_session.player.add_exp(95)
        levels = recorder(scripted_session.bus, LevelUpEvent)
        place(scripted_session)
        rng.push(0.99)

        result = lab.harvest(0)

        assert result.get("level_up") == 2
        assert levels == [LevelUpEvent(1, 2, scripted_session.game_minutes)]

    def test_growing_cell_cannot_be_harvested(self, lab, scripted_session):
        place(scripted_session, status=CellStatus.GROWING)
        assert lab.harvest(0).message == "Cell is not ready for harvest"
        assert scripted_session.incubator.get_cell(0) is not None


class TestRescueAndDiscard:
    def test_rescue_contaminated_cell(self, lab, scripted_session):
        cell = place(scripted_session, status=CellStatus.GROWING)
        cell.contaminate()
        player = scripted_session.player
        assert lab.emergency_rescue(0).message == "No emergency kit in inventory"

        player.add_item("emergency_save")
        result = lab.emergency_rescue(0)

        assert result.get("value") == 40
        assert result.get("exp") == 2
        assert player.gold == 2040
        assert not player.has_item("emergency_save")
        assert scripted_session.incubator.get_cell(0) is None

    def test_rescue_healthy_cell_is_refused(self, lab, scripted_session):
        place(scripted_session)
        scripted_session.player.add_item("emergency_save")

        result = lab.emergency_rescue(0)

        assert result.message == "Only contaminated cells can be rescued"
        assert scripted_session.player.has_item("emergency_save")
        assert scripted_session.incubator.get_cell(0).is_ready

    def test_discard(self, lab, scripted_session):
        place(scripted_session)
        assert lab.discard(0).success
        assert not lab.discard(0).success


class TestPassage:
    def test_max_ratio_by_level(self):
        assert max_passage_ratio(1) == 2
        assert max_passage_ratio(4) == 3
        assert max_passage_ratio(20) == 4

    def test_successful_split(self, lab, rng, scripted_session):
        parent = place(scripted_session)
        # success roll, child growth rate, contamination roll
        rng.push(0.5, 0.5, 0.5)
        # child loss, child base roll, parent loss
        rng.push_ints(7, 10, 6)

        result = lab.passage(0, ratio=2)

        assert result.get("outcome") == "success"
        assert result.get("child_slots") == [1]
        child = scripted_session.incubator.get_cell(1)
        assert child.quality == 58
        assert child.generation == 2
        assert child.parent_id == parent.id
        assert parent.is_growing
        assert parent.quality == 59
        player = scripted_session.player
        assert player.item_count("pbs") == 4
        assert player.item_count("trypsin") == 2

    def test_advanced_reagent(self, lab, rng, scripted_session):
        place(scripted_session)
        scripted_session.player.add_item("accutase")
        rng.push(0.5, 0.5, 0.5)
        rng.push_ints(7, 10, 6)

        result = lab.passage(0, ratio=2, use_reagent=True)

        assert result.get("child_qualities") == [64]
        assert not scripted_session.player.has_item("accutase")

    def test_failed_split_spends_reagents(self, lab, rng, scripted_session):
        parent = place(scripted_session)
        rng.push(0.99)

        result = lab.passage(0)

        assert result.success
        assert result.get("outcome") == "failed"
        assert parent.is_ready
        assert scripted_session.incubator.get_cell(1) is None
        assert scripted_session.player.item_count("trypsin") == 2

    def test_contaminated_lineage(self, lab, rng, scripted_session):
        parent = place(scripted_session)
        rng.push(0.0, 0.5, 0.0)
        rng.push_ints(7, 10, 6)

        result = lab.passage(0)

        assert result.get("outcome") == "contaminated"
        assert parent.is_contaminated
        assert scripted_session.incubator.get_cell(1).is_contaminated
        assert scripted_session.player.stats["cells_contaminated"] == 2

    def test_ratio_above_level_limit(self, lab, scripted_session):
        place(scripted_session)
        result = lab.passage(0, ratio=3)
        assert result.message == "Split ratio must be between 2 and 2"

    def test_needs_a_free_slot(self, lab, scripted_session):
        place(scripted_session)
        fill_slots(scripted_session)
        result = lab.passage(0)
        assert result.message == "No empty slot for the split"
        assert scripted_session.player.item_count("pbs") == 5

    def test_only_ready_cells(self, lab, scripted_session):
        place(scripted_session, status=CellStatus.GROWING)
        assert lab.passage(0).message == "Only ready cells can be passaged"


class TestQualityControl:
    def test_pass(self, lab, rng, scripted_session):
        cell = place(scripted_session)
        scripted_session.player.add_item("myco_test")
        rng.push(0.5)

        result = lab.run_qc(0)

        assert result.get("outcome") == "passed"
        assert cell.qc_passed
        assert cell.quality == 71

    def test_fail_contaminates(self, lab, rng, scripted_session):
        cell = place(scripted_session)
        scripted_session.player.add_item("myco_test")
        rng.push(0.95)

        result = lab.run_qc(0)

        assert result.success
        assert result.get("outcome") == "failed"
        assert cell.is_contaminated
        assert scripted_session.player.stats["cells_contaminated"] == 1

    def test_needs_test_kit(self, lab, scripted_session):
        place(scripted_session)
        assert lab.run_qc(0).message == "No mycoplasma test in inventory"


class TestFreezeThaw:
    def test_freeze_then_thaw(self, lab, rng, scripted_session):
        cell = place(scripted_session, quality=65)
        cell.generation = 3

        frozen = lab.freeze(0)

        assert frozen.success
        assert scripted_session.incubator.get_cell(0) is None
        assert scripted_session.player.item_count("fbs") == 2

        rng.push(0.5)
        rng.push_ints(10, 2)
        thawed = lab.thaw(frozen.get("frozen_id"), slot_index=3)

        assert thawed.get("slot_index") == 3
        assert thawed.get("quality") == 63
        revived = scripted_session.incubator.get_cell(3)
        assert revived.is_growing
        assert revived.growth_progress == 30.0
        assert revived.generation == 3
        assert scripted_session.storage.frozen == []

    def test_thaw_quality_floor(self, lab, rng, scripted_session):
        place(scripted_session, quality=31)
        frozen_id = lab.freeze(0).get("frozen_id")
        rng.push(0.5)
        rng.push_ints(10, 3)

        assert lab.thaw(frozen_id).get("quality") == 30

    def test_freeze_needs_ready_cell(self, lab, scripted_session):
        place(scripted_session, status=CellStatus.GROWING)
        assert lab.freeze(0).message == "Only ready cells can be frozen"

    def test_thaw_unknown_stock(self, lab):
        assert lab.thaw("frozen_missing").message == "Frozen stock not found"


class TestContracts:
    @pytest.fixture
    def contract(self, lab, scripted_session):
        task = next(t for t in scripted_session.tasks.available if t.template_id == "hek293t_standard")
        task.requirements[0].units_required = 2
        task.requirements[0].quality_required = 55
        assert lab.accept_contract(task.id).success
        return task

    def stock(self, session, record_id, type_id="hek293t", quality=70.0):
        session.storage.add_harvested(HarvestedCell(record_id, type_id, quality))
        return record_id

    def test_two_unit_contract(self, lab, contract, scripted_session):
        completed = recorder(scripted_session.bus, TaskCompletedEvent)
        player = scripted_session.player

        first = lab.deliver_cell(contract.id, self.stock(scripted_session, "harvest_a"))
        assert first.get("completed") is False
        assert scripted_session.storage.harvested == []

        second = lab.deliver_cell(contract.id, self.stock(scripted_session, "harvest_b"))
        assert second.get("completed") is True
        assert second.get("golden_pearl") is False
        assert player.gold == 2000 + contract.reward_gold
        assert player.total_exp == contract.reward_exp
        assert player.stats["tasks_completed"] == 1
        assert scripted_session.tasks.active == []
        assert [e.task_id for e in completed] == [contract.id]

    def test_rejected_delivery_keeps_record(self, lab, contract, scripted_session):
        record_id = self.stock(scripted_session, "harvest_low", quality=40.0)
        result = lab.deliver_cell(contract.id, record_id)
        assert not result.success
        assert scripted_session.storage.get_harvested(record_id) is not None

    def test_unknown_record(self, lab, contract):
        assert lab.deliver_cell(contract.id, "harvest_missing").message == "Harvested cell not found"

    def test_abandon(self, lab, contract, scripted_session):
        assert lab.abandon_contract(contract.id).success
        assert scripted_session.tasks.active == []

    def test_refresh_costs_gold(self, lab, scripted_session):
        result = lab.refresh_contracts()
        assert result.get("cost") == 100
        assert scripted_session.player.gold == 1900

    def test_free_refresh(self, lab, scripted_session):
        assert lab.refresh_contracts(pay_currency=False).get("cost") == 0
        assert scripted_session.player.gold == 2000

    def test_refresh_refused_when_short(self, lab, scripted_session):
        scripted_session.player.gold = 99
        pool = list(scripted_session.tasks.available)
        assert not lab.refresh_contracts().success
        assert scripted_session.tasks.available == pool


class TestEconomy:
    def test_purchase(self, lab, scripted_session):
        result = lab.purchase("pbs", 3)
        assert result.get("cost") == 30
        assert scripted_session.player.gold == 1970
        assert scripted_session.player.item_count("pbs") == 8

    @pytest.mark.parametrize(
        "item_id, quantity, message",
        [
            ("pbs", 0, "Quantity must be at least 1"),
            ("myco_test", 1, "Mycoplasma test unlocks at level 3"),
            ("emergency_save", 9, "Not enough gold (need 2250)"),
        ],
    )
    def test_purchase_refused(self, lab, scripted_session, item_id, quantity, message):
        assert lab.purchase(item_id, quantity).message == message
        assert scripted_session.player.gold == 2000

    def test_purchase_unknown_item(self, lab):
        with pytest.raises(UnknownCatalogIdError):
            lab.purchase("pixie_dust")

    def test_unlock_slot(self, lab, scripted_session):
        result = lab.unlock_slot()
        assert result.get("slot_index") == 5
        assert scripted_session.incubator.unlocked_slots == 6

    def test_sell_harvested(self, lab, scripted_session):
        scripted_session.storage.add_harvested(HarvestedCell("harvest_g", "golden_stock", 100.0))
        assert lab.sell_harvested("harvest_g").get("value") == 500
        assert scripted_session.player.gold == 2500
        assert not lab.sell_harvested("harvest_g").success

    def test_sell_pearls(self, lab, scripted_session):
        scripted_session.player.add_golden_pearl(3)
        assert lab.sell_pearls(2).get("value") == 2000
        assert scripted_session.player.golden_pearls == 1

    def test_set_speed(self, lab, scripted_session):
        assert lab.set_speed(5).success
        assert scripted_session.player.clock.speed == 5
        assert not lab.set_speed(4).success
