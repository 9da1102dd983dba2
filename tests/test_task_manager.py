"""Tests for the contract pool manager."""

import random

import pytest

from cellmaster.catalog.cell_types import CELL_TYPES
from cellmaster.catalog.items import SHOP_ITEMS
from cellmaster.catalog.random_events import RANDOM_EVENTS
from cellmaster.catalog.registry import Catalog
from cellmaster.catalog.tasks import TASK_MODIFIERS, TASK_TEMPLATES
from cellmaster.config.tasks import COMPLETED_HISTORY_LIMIT
from cellmaster.entities.storage import HarvestedCell
from cellmaster.tasks.task import TaskStatus
from cellmaster.tasks.task_manager import TaskManager
from tests.fakes.scripted_rng import ScriptedRandom

LEVEL_ONE_TEMPLATES = {"hek293t_standard", "hela_fast"}


@pytest.fixture
def manager(catalog):
    return TaskManager(catalog, random.Random(3))


def accept_all(manager, count):
    for task in list(manager.available)[:count]:
        assert manager.accept(task.id).success


class TestGenerate:
    def test_only_unlocked_templates(self, manager):
        added = manager.generate(player_level=1)
        assert added == 2
        assert {t.template_id for t in manager.available} == LEVEL_ONE_TEMPLATES

    def test_pool_is_bounded_and_distinct(self, manager):
        manager.generate(player_level=25)
        template_ids = [t.template_id for t in manager.available]
        assert len(template_ids) == manager.max_available
        assert len(set(template_ids)) == len(template_ids)

    def test_regenerate_keeps_prefix(self, manager):
        manager.generate(player_level=25)
        kept = [t.id for t in manager.available[:2]]
        manager.available = manager.available[:4]

        manager.generate(player_level=25)

        assert [t.id for t in manager.available[:2]] == kept
        assert len(manager.available) == manager.max_available

    def test_active_templates_are_not_offered(self, manager):
        manager.generate(player_level=1)
        accepted = manager.available[0]
        manager.accept(accepted.id)

        manager.force_refresh(player_level=1)

        assert [t.template_id for t in manager.available] == sorted(LEVEL_ONE_TEMPLATES - {accepted.template_id})

    def test_force_refresh_replaces_pool(self, manager):
        manager.generate(player_level=25)
        old_ids = {t.id for t in manager.available}
        manager.force_refresh(player_level=25)
        assert old_ids.isdisjoint(t.id for t in manager.available)


def ordered_manager(monkeypatch, template_ids, randoms):
    """A manager offering only ``template_ids``, drawn in that order."""
    by_id = {t.id: t for t in TASK_TEMPLATES}
    catalog = Catalog(
        CELL_TYPES,
        SHOP_ITEMS,
        TASK_MODIFIERS,
        [by_id[template_id] for template_id in template_ids],
        RANDOM_EVENTS,
    )
    rng = ScriptedRandom(randoms=randoms)
    monkeypatch.setattr(rng, "shuffle", lambda seq: None)
    return TaskManager(catalog, rng, max_available=8), rng


class TestDiversity:
    def test_repeated_line_skipped_on_low_roll(self, monkeypatch):
        manager, rng = ordered_manager(monkeypatch, ["hek293t_standard", "hek293t_chain"], [0.2])

        assert manager.generate(player_level=25) == 1
        assert [t.template_id for t in manager.available] == ["hek293t_standard"]
        assert not rng.randoms

    def test_repeated_line_kept_on_high_roll(self, monkeypatch):
        manager, rng = ordered_manager(monkeypatch, ["hek293t_standard", "hek293t_chain"], [0.7])

        assert manager.generate(player_level=25) == 2
        assert [t.template_id for t in manager.available] == ["hek293t_standard", "hek293t_chain"]
        assert not rng.randoms

    def test_combos_never_roll(self, monkeypatch):
        manager, rng = ordered_manager(
            monkeypatch, ["hek293t_standard", "combo_beginner", "combo_trio"], [0.0]
        )

        assert manager.generate(player_level=25) == 3
        assert list(rng.randoms) == [0.0]

    def test_no_roll_once_enough_lines_offered(self, monkeypatch):
        manager, rng = ordered_manager(
            monkeypatch,
            ["hek293t_standard", "hela_fast", "a549_stable", "mcf7_hormone", "hek293t_chain"],
            [0.0],
        )

        assert manager.generate(player_level=25) == 5
        assert manager.available[-1].template_id == "hek293t_chain"
        assert list(rng.randoms) == [0.0]


class TestAccept:
    def test_moves_contract_to_active(self, manager):
        manager.generate(player_level=1)
        task = manager.available[0]

        result = manager.accept(task.id)

        assert result.success
        assert task.status is TaskStatus.ACTIVE
        assert manager.active == [task]
        assert task not in manager.available

    def test_active_limit(self, manager):
        manager.generate(player_level=25)
        accept_all(manager, 3)
        result = manager.accept(manager.available[0].id)
        assert not result.success
        assert result.message == "At most 3 contracts can be active"

    def test_unknown_contract(self, manager):
        assert manager.accept("task_missing").message == "Contract not found"

    def test_matching_tasks(self, manager):
        manager.generate(player_level=1)
        accept_all(manager, 2)
        assert [t.template_id for t in manager.matching_tasks("hela")] == ["hela_fast"]
        assert manager.matching_tasks("a549") == []


class TestUpdate:
    def test_speed_and_deadline_pressure_accelerate_countdown(self, manager):
        manager.generate(player_level=1)
        task = manager.available[0]
        manager.accept(task.id)
        task.remaining_time = 25.0

        outcome = manager.update(4.0, player_level=1, speed=2, deadline_multiplier=0.8)

        assert outcome.expired == []
        assert task.remaining_time == pytest.approx(15.0)

    def test_expired_contracts_leave_with_penalty(self, manager):
        manager.generate(player_level=1)
        task = manager.available[0]
        manager.accept(task.id)
        task.remaining_time = 1.0

        outcome = manager.update(1.0, player_level=1)

        assert [(t.id, p) for t, p in outcome.expired] == [(task.id, task.penalty())]
        assert manager.active == []
        assert task.status is TaskStatus.EXPIRED
        assert manager.update(1.0, player_level=1).expired == []

    def test_periodic_top_up(self, manager):
        manager.refresh_cooldown = 5.0

        assert manager.update(4.0, player_level=1).refreshed is False
        outcome = manager.update(1.0, player_level=1)

        assert outcome.refreshed is True
        assert manager.refresh_cooldown == manager.refresh_interval
        assert len(manager.available) == 2


class TestDeliverAndAbandon:
    def test_completed_contract_moves_to_history(self, manager, catalog):
        manager.generate(player_level=1)
        task = next(t for t in manager.available if t.template_id == "hek293t_standard")
        manager.accept(task.id)

        result = None
        for n in range(task.units_required):
            result = manager.try_deliver(task.id, HarvestedCell(f"harvest_{n}", "hek293t", 100.0))

        assert result.get("completed") is True
        assert manager.completed == [task]
        assert manager.active == []

    def test_history_is_capped(self, manager):
        manager.generate(player_level=1)
        task = manager.available[0]
        manager.completed = [task] * (COMPLETED_HISTORY_LIMIT + 3)
        manager.accept(task.id)
        task.requirements[0].units_delivered = task.units_required - 1

        manager.try_deliver(task.id, HarvestedCell("harvest_last", "golden_stock", 0.0))

        assert len(manager.completed) == COMPLETED_HISTORY_LIMIT

    def test_deliver_unknown_contract(self, manager):
        result = manager.try_deliver("task_missing", HarvestedCell("h", "hela", 90.0))
        assert result.message == "Contract not found"

    def test_abandon(self, manager):
        manager.generate(player_level=1)
        task = manager.available[0]
        manager.accept(task.id)

        assert manager.abandon(task.id).success
        assert task.status is TaskStatus.ABANDONED
        assert manager.active == []
        assert not manager.abandon(task.id).success


class TestPersistence:
    def test_round_trip(self, manager, catalog):
        manager.generate(player_level=25)
        accept_all(manager, 2)
        manager.refresh_cooldown = 42.0

        restored = TaskManager.from_dict(manager.to_dict(), catalog)

        assert [t.id for t in restored.available] == [t.id for t in manager.available]
        assert [t.id for t in restored.active] == [t.id for t in manager.active]
        assert restored.refresh_cooldown == 42.0
        assert restored.stats() == manager.stats()

    def test_non_active_records_dropped_from_active(self, manager, catalog):
        manager.generate(player_level=1)
        accept_all(manager, 1)
        data = manager.to_dict()
        data["active"][0]["status"] = "expired"

        restored = TaskManager.from_dict(data, catalog)

        assert restored.active == []
