"""Tests for session capture and restore."""

import json

import pytest

from cellmaster.contracts.version import VersionMismatchError
from cellmaster.exceptions import ConfigurationError, PersistenceError, UnknownCatalogIdError
from cellmaster.simulation import LabActions, LabEngine, LabSession
from cellmaster.simulation.snapshot import capture_session, restore_session


def played_session():
    session = LabSession.new("medium", seed=42)
    engine = LabEngine(session)
    actions = LabActions(session)
    actions.start_cultivation("hek293t")
    actions.start_cultivation("hela", slot_index=3)
    actions.accept_contract(session.tasks.available[0].id)
    for _ in range(12):
        engine.tick(1.0)
    return session


def through_json(data):
    return json.loads(json.dumps(data))


class TestCapture:
    def test_snapshot_is_json_compatible(self):
        snapshot = capture_session(played_session())
        assert through_json(snapshot) == snapshot
        assert snapshot["schema_version"] == "1.0"
        assert snapshot["mode"] == "medium"

    def test_restore_round_trip(self):
        snapshot = through_json(capture_session(played_session()))
        restored = restore_session(snapshot)
        assert through_json(capture_session(restored)) == snapshot

    def test_restored_session_continues_identically(self):
        original = played_session()
        restored = restore_session(through_json(capture_session(original)))

        for session in (original, restored):
            engine = LabEngine(session)
            actions = LabActions(session)
            for _ in range(40):
                engine.tick(1.0)
            actions.refresh_contracts(pay_currency=False)
            actions.start_cultivation("hek293t")

        assert through_json(capture_session(restored)) == through_json(capture_session(original))

    def test_fresh_session_starts_with_contracts(self):
        session = LabSession.new("poor", seed=1)
        assert session.incubator.unlocked_slots == 2
        assert session.player.gold == 300
        assert len(session.tasks.available) == 2


class TestRestoreErrors:
    @pytest.fixture
    def snapshot(self):
        return through_json(capture_session(LabSession.new("medium", seed=3)))

    @pytest.mark.parametrize("version", [None, "2.0", "0.9"])
    def test_incompatible_version(self, snapshot, version):
        snapshot["schema_version"] = version
        with pytest.raises(VersionMismatchError):
            restore_session(snapshot)

    def test_minor_version_accepted(self, snapshot):
        snapshot["schema_version"] = "1.3"
        assert restore_session(snapshot).mode.id == "medium"

    def test_missing_section(self, snapshot):
        del snapshot["player"]
        with pytest.raises(PersistenceError):
            restore_session(snapshot)

    def test_bad_rng_state(self, snapshot):
        snapshot["rng_state"] = [3, [1, 2], None]
        with pytest.raises(PersistenceError):
            restore_session(snapshot)

    def test_unknown_mode(self, snapshot):
        snapshot["mode"] = "insane"
        with pytest.raises(ConfigurationError):
            restore_session(snapshot)

    def test_unknown_cell_type(self):
        session = played_session()
        data = through_json(capture_session(session))
        occupied = next(s for s in data["incubator"]["slots"] if s["cell"])
        occupied["cell"]["type_id"] = "unicorn"
        with pytest.raises(UnknownCatalogIdError):
            restore_session(data)

    def test_newer_entity_rejected(self, snapshot):
        snapshot["incubator"]["schema_version"] = 9
        with pytest.raises(VersionMismatchError):
            restore_session(snapshot)
