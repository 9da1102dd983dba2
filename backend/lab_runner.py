"""Background driver for the lab session.

The runner owns two asyncio tasks:

- a tick loop that advances the engine by the real time elapsed since the
  previous tick, once per tick interval
- an autosave loop that writes the session to disk once per save interval

Both run on the event loop thread, the same thread that serves HTTP
actions, so ticks and actions never interleave. Only the file write of an
autosave is pushed to the default executor; the snapshot itself is captured
on the loop.
"""

import asyncio
import logging
from pathlib import Path
from typing import Dict, Optional, Union

from backend.lab_persistence import save_snapshot_data
from cellmaster.config.game import SAVE_INTERVAL, TICK_INTERVAL
from cellmaster.simulation.engine import LabEngine
from cellmaster.simulation.snapshot import capture_session

logger = logging.getLogger(__name__)


class LabRunner:
    """Ticks and autosaves one lab engine."""

    def __init__(
        self,
        engine: LabEngine,
        data_dir: Union[str, Path],
        tick_interval: float = TICK_INTERVAL,
        save_interval: float = SAVE_INTERVAL,
    ):
        """Initialize the runner.

        Args:
            engine: The engine to drive
            data_dir: Directory the autosave writes to
            tick_interval: Seconds between ticks
            save_interval: Seconds between autosaves
        """
        self.engine = engine
        self.data_dir = data_dir
        self.tick_interval = tick_interval
        self.save_interval = save_interval
        self._tasks: Dict[str, asyncio.Task] = {}
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    def attach(self, engine: LabEngine) -> None:
        """Drive a different engine from the next tick on."""
        self.engine = engine

    async def start(self) -> None:
        if self._running:
            logger.warning("Lab runner already running")
            return

        self._running = True
        self._tasks["tick"] = asyncio.create_task(self._tick_loop(), name="lab_tick")
        self._tasks["autosave"] = asyncio.create_task(self._autosave_loop(), name="lab_autosave")
        logger.info(
            f"Lab runner started (tick: {self.tick_interval}s, autosave: {self.save_interval}s)"
        )

    async def stop(self) -> None:
        """Stop both loops and wait for them to finish."""
        if not self._running:
            return

        self._running = False
        logger.info("Stopping lab runner...")
        for name, task in list(self._tasks.items()):
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
            logger.debug(f"Lab runner task {name} cancelled")
        self._tasks.clear()
        logger.info("Lab runner stopped")

    async def _tick_loop(self) -> None:
        loop = asyncio.get_running_loop()
        last = loop.time()
        try:
            while self._running:
                await asyncio.sleep(self.tick_interval)
                now = loop.time()
                delta, last = now - last, now
                try:
                    self.engine.tick(delta)
                except Exception as e:
                    logger.error(f"Lab tick failed: {e}", exc_info=True)
        except asyncio.CancelledError:
            logger.debug("Tick loop cancelled")
            raise

    async def save_now(self) -> Optional[str]:
        """Capture the session on the loop and write it in the executor."""
        snapshot = capture_session(self.engine.session)
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, save_snapshot_data, snapshot, self.data_dir)

    async def _autosave_loop(self) -> None:
        try:
            while self._running:
                await asyncio.sleep(self.save_interval)
                if self.engine.stopped:
                    continue
                filepath = await self.save_now()
                if filepath:
                    logger.debug(f"Autosaved lab to {filepath}")
                else:
                    logger.warning("Autosave failed")
        except asyncio.CancelledError:
            logger.debug("Autosave loop cancelled")
            raise
