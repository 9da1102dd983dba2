"""Tests for the background tick and autosave loops."""

import asyncio
import logging

import pytest

from backend.lab_persistence import load_snapshot
from backend.lab_runner import LabRunner
from cellmaster.simulation import LabEngine, LabSession


class FlakyEngine:
    """Engine stand-in whose first tick raises."""

    def __init__(self, session):
        self.session = session
        self.stopped = False
        self.deltas = []

    def tick(self, real_delta):
        self.deltas.append(real_delta)
        if len(self.deltas) == 1:
            raise RuntimeError("boom")


@pytest.fixture
def lab_engine():
    return LabEngine(LabSession.new("medium", seed=42))


@pytest.mark.asyncio
async def test_runner_ticks_until_stopped(lab_engine, tmp_path):
    runner = LabRunner(lab_engine, tmp_path, tick_interval=0.01, save_interval=60)

    await runner.start()
    assert runner.running
    await asyncio.sleep(0.1)
    await runner.stop()

    ticks = lab_engine.tick_count
    assert ticks > 0
    assert not runner.running
    assert lab_engine.session.game_minutes > 0

    await asyncio.sleep(0.05)
    assert lab_engine.tick_count == ticks


@pytest.mark.asyncio
async def test_tick_errors_do_not_stop_the_loop(tmp_path, caplog):
    engine = FlakyEngine(LabSession.new(seed=1))
    runner = LabRunner(engine, tmp_path, tick_interval=0.01, save_interval=60)

    with caplog.at_level(logging.ERROR, logger="backend.lab_runner"):
        await runner.start()
        await asyncio.sleep(0.1)
        await runner.stop()

    assert len(engine.deltas) > 1
    assert all(delta > 0 for delta in engine.deltas)
    assert "Lab tick failed" in caplog.text


@pytest.mark.asyncio
async def test_autosave_writes_snapshot(lab_engine, tmp_path):
    runner = LabRunner(lab_engine, tmp_path, tick_interval=60, save_interval=0.02)

    await runner.start()
    await asyncio.sleep(0.15)
    await runner.stop()

    snapshot = load_snapshot(tmp_path)
    assert snapshot is not None
    assert snapshot["mode"] == "medium"


@pytest.mark.asyncio
async def test_autosave_skips_stopped_engine(lab_engine, tmp_path):
    lab_engine.stop()
    runner = LabRunner(lab_engine, tmp_path, tick_interval=60, save_interval=0.02)

    await runner.start()
    await asyncio.sleep(0.1)
    await runner.stop()

    assert load_snapshot(tmp_path) is None


@pytest.mark.asyncio
async def test_save_now(lab_engine, tmp_path):
    runner = LabRunner(lab_engine, tmp_path)
    filepath = await runner.save_now()
    assert filepath is not None
    assert load_snapshot(tmp_path)["player"]["gold"] == 2000


@pytest.mark.asyncio
async def test_attach_switches_engine(lab_engine, tmp_path):
    runner = LabRunner(lab_engine, tmp_path, tick_interval=0.01, save_interval=60)
    replacement = LabEngine(LabSession.new("rich", seed=2))

    runner.attach(replacement)
    await runner.start()
    await asyncio.sleep(0.08)
    await runner.stop()

    assert lab_engine.tick_count == 0
    assert replacement.tick_count > 0


@pytest.mark.asyncio
async def test_start_and_stop_are_idempotent(lab_engine, tmp_path):
    runner = LabRunner(lab_engine, tmp_path, tick_interval=0.01, save_interval=60)
    await runner.stop()
    await runner.start()
    await runner.start()
    await runner.stop()
    await runner.stop()
    assert not runner.running
