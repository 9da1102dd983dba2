"""Tests for saving and loading the lab to disk."""

import json

from backend.lab_persistence import (
    load_session,
    load_snapshot,
    save_path,
    save_session,
    save_snapshot_data,
)
from cellmaster.simulation import LabActions, LabSession
from cellmaster.simulation.snapshot import capture_session


def test_persistence_round_trip(tmp_path):
    """Test that saving and loading a lab preserves its state."""
    session = LabSession.new("small", seed=11)
    actions = LabActions(session)
    actions.start_cultivation("hek293t")
    actions.purchase("pbs", 2)

    filepath = save_session(session, tmp_path)

    assert filepath == str(save_path(tmp_path))
    assert not (tmp_path / "save.json.tmp").exists()

    restored = load_session(tmp_path)
    assert restored is not None
    assert restored.mode.id == "small"
    assert restored.player.gold == session.player.gold
    assert restored.incubator.get_cell(0).id == session.incubator.get_cell(0).id
    assert capture_session(restored) == capture_session(session)


def test_saved_file_is_stamped(tmp_path):
    save_session(LabSession.new(seed=1), tmp_path)

    data = load_snapshot(tmp_path)

    assert data["schema_version"] == "1.0"
    assert "saved_at" in data


def test_save_overwrites_previous(tmp_path):
    first = LabSession.new("rich", seed=1)
    second = LabSession.new("poor", seed=2)

    save_session(first, tmp_path)
    save_session(second, tmp_path)

    assert load_session(tmp_path).mode.id == "poor"


def test_missing_save_loads_nothing(tmp_path):
    assert load_snapshot(tmp_path) is None
    assert load_session(tmp_path) is None


def test_corrupt_save_loads_nothing(tmp_path):
    save_path(tmp_path).write_text("{not json")
    assert load_session(tmp_path) is None


def test_incompatible_save_loads_nothing(tmp_path):
    snapshot = capture_session(LabSession.new(seed=5))
    snapshot["schema_version"] = "7.0"
    save_path(tmp_path).write_text(json.dumps(snapshot))

    assert load_snapshot(tmp_path) is not None
    assert load_session(tmp_path) is None


def test_unknown_catalog_id_loads_nothing(tmp_path):
    session = LabSession.new(seed=5)
    LabActions(session).start_cultivation("hela")
    snapshot = capture_session(session)
    snapshot["incubator"]["slots"][0]["cell"]["type_id"] = "retired_line"
    save_path(tmp_path).write_text(json.dumps(snapshot))

    assert load_session(tmp_path) is None


def test_failed_save_returns_none(tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("")

    assert save_snapshot_data({"player": {}}, blocker / "saves") is None
