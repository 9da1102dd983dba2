"""Tests for the incubator slot container."""

import pytest

from cellmaster.entities.cell import Cell, CellStatus
from cellmaster.incubator import Incubator
from cellmaster.player import Player
from cellmaster.config.modes import get_mode
from tests.fakes.scripted_rng import ScriptedRandom


def new_cell(catalog, rng, cell_id="cell_a", type_id="hek293t"):
    return Cell(catalog.cell_type(type_id), cell_id=cell_id, base_quality=60, growth_rate=1.0, rng=rng)


class TestSlots:
    def test_initial_unlocked_prefix(self):
        incubator = Incubator(unlocked_slots=5)
        assert len(incubator.slots) == 20
        assert [s.locked for s in incubator.slots[:6]] == [False] * 5 + [True]
        assert len(incubator.empty_slots()) == 5

    def test_place_in_first_empty_slot(self, catalog, scripted_rng):
        incubator = Incubator(unlocked_slots=3)
        first = incubator.place_cell(new_cell(catalog, scripted_rng, "cell_a"))
        second = incubator.place_cell(new_cell(catalog, scripted_rng, "cell_b"))
        assert first.get("slot_index") == 0
        assert second.get("slot_index") == 1
        assert incubator.get_cell(1).id == "cell_b"
        assert incubator.get_cell(1).slot_index == 1

    def test_no_empty_slot(self, catalog, scripted_rng):
        incubator = Incubator(unlocked_slots=1)
        incubator.place_cell(new_cell(catalog, scripted_rng, "cell_a"))
        result = incubator.place_cell(new_cell(catalog, scripted_rng, "cell_b"))
        assert not result.success
        assert result.message == "No empty slot"
        assert incubator.get_cell(0).id == "cell_a"

    @pytest.mark.parametrize(
        "slot_index, message",
        [(0, "occupied"), (4, "locked"), (25, "does not exist")],
    )
    def test_explicit_slot_rejections(self, catalog, scripted_rng, slot_index, message):
        incubator = Incubator(unlocked_slots=2)
        incubator.place_cell(new_cell(catalog, scripted_rng, "cell_a"), 0)
        result = incubator.place_cell(new_cell(catalog, scripted_rng, "cell_b"), slot_index)
        assert not result.success
        assert message in result.message

    def test_remove_cell(self, catalog, scripted_rng):
        incubator = Incubator(unlocked_slots=2)
        incubator.place_cell(new_cell(catalog, scripted_rng), 1)
        cell = incubator.remove_cell(1)
        assert cell.id == "cell_a"
        assert cell.slot_index is None
        assert incubator.remove_cell(1) is None
        assert incubator.find_cell("cell_a") is None


class TestUnlock:
    def test_first_seven_slots_are_free(self):
        incubator = Incubator(unlocked_slots=5)
        wallet = Player(get_mode("medium"))
        result = incubator.unlock_slot(wallet)
        assert result.success
        assert result.get("cost") == 0
        assert incubator.unlocked_slots == 6
        assert not incubator.slots[5].locked
        assert wallet.gold == 2000

    def test_unlock_charges_cost_by_unlocked_count(self):
        incubator = Incubator(unlocked_slots=7)
        wallet = Player(get_mode("medium"))
        result = incubator.unlock_slot(wallet)
        assert result.success
        assert result.get("cost") == 1000
        assert wallet.gold == 1000
        assert incubator.next_unlock_cost() == 1500

    def test_unlock_refused_when_short(self):
        incubator = Incubator(unlocked_slots=8)
        wallet = Player(get_mode("poor"))
        result = incubator.unlock_slot(wallet)
        assert not result.success
        assert incubator.unlocked_slots == 8
        assert wallet.gold == 300

    def test_all_unlocked(self):
        incubator = Incubator(unlocked_slots=20)
        assert incubator.next_unlock_cost() is None
        assert not incubator.unlock_slot(Player(get_mode("rich"))).success


class TestUpdate:
    def test_reports_status_changes(self, catalog):
        rng = ScriptedRandom(randoms=[0.99] * 10)
        incubator = Incubator(unlocked_slots=2)
        incubator.place_cell(new_cell(catalog, rng, "cell_a"), 0)

        changes = incubator.update(30.0)
        assert len(changes) == 1
        change = changes[0]
        assert change.slot_index == 0
        assert change.previous is CellStatus.GROWING
        assert change.status is CellStatus.READY

    def test_ready_cells_keep_overgrowing(self, catalog, scripted_rng):
        incubator = Incubator(unlocked_slots=1)
        cell = new_cell(catalog, scripted_rng)
        cell.status = CellStatus.READY
        cell.immune = True
        incubator.place_cell(cell)
        incubator.update(70.0)
        assert cell.overgrown

    def test_pause_blocks_updates_until_wall_clock_expiry(self, catalog):
        rng = ScriptedRandom(randoms=[0.99] * 10)
        incubator = Incubator(unlocked_slots=1)
        cell = new_cell(catalog, rng)
        incubator.place_cell(cell)

        incubator.pause(10.0)
        assert incubator.update(5.0) == []
        assert cell.growth_progress == 0.0

        incubator.advance_clock(10.0)
        assert not incubator.is_paused
        incubator.update(3.0)
        assert cell.growth_progress == pytest.approx(10.0)

    def test_contamination_multiplier_expires(self):
        incubator = Incubator()
        incubator.set_contamination_multiplier(2.0, 30.0)
        assert incubator.contamination_multiplier == 2.0
        incubator.advance_clock(29.0)
        assert incubator.contamination_multiplier == 2.0
        incubator.advance_clock(1.0)
        assert incubator.contamination_multiplier == 1.0

    def test_cancel_timers(self):
        incubator = Incubator()
        incubator.pause(100.0)
        incubator.set_contamination_multiplier(3.0, 100.0)
        incubator.cancel_timers()
        assert not incubator.is_paused
        assert incubator.contamination_multiplier == 1.0

    def test_mode_rate_scales_contamination(self, catalog):
        # 0.012 * 1.2 = 0.0144 per second: a 0.013 draw only hits in the small lab
        medium = Incubator(unlocked_slots=1, mode_contamination_rate=1.0)
        small = Incubator(unlocked_slots=1, mode_contamination_rate=1.2)
        medium.place_cell(new_cell(catalog, ScriptedRandom(randoms=[0.013])))
        small.place_cell(new_cell(catalog, ScriptedRandom(randoms=[0.013])))

        medium.update(1.0)
        small.update(1.0)
        assert medium.get_cell(0).is_growing
        assert small.get_cell(0).is_contaminated


def test_stats_and_round_trip(catalog, seeded_rng):
    incubator = Incubator(unlocked_slots=3, mode_contamination_rate=1.2)
    incubator.place_cell(Cell.create(catalog.cell_type("hela"), seeded_rng), 2)
    incubator.pause(15.0)

    stats = incubator.stats()
    assert stats == {
        "total": 20,
        "unlocked": 3,
        "occupied": 1,
        "empty": 2,
        "growing": 1,
        "ready": 0,
        "contaminated": 0,
    }

    restored = Incubator.from_dict(incubator.to_dict(), catalog, seeded_rng)
    assert restored.to_dict() == incubator.to_dict()
    assert restored.is_paused
    assert restored.get_cell(2).slot_index == 2
