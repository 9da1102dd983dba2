"""Lab session: the single owner of all mutable game state.

Nothing in the core is a process-wide singleton. Engine, actions,
persistence and the HTTP layer all receive the session they operate on.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from typing import Optional

from cellmaster.catalog.registry import Catalog, default_catalog
from cellmaster.config.modes import DEFAULT_MODE, GameMode, get_mode
from cellmaster.entities.storage import CellStorage
from cellmaster.events.event_bus import EventBus
from cellmaster.incubator import Incubator
from cellmaster.overlay import RandomEventManager
from cellmaster.player import Player
from cellmaster.tasks.task_manager import TaskManager

logger = logging.getLogger(__name__)


@dataclass
class LabSession:
    """Everything one game consists of.

    Attributes:
        mode: Difficulty preset chosen at creation
        catalog: Immutable reference data
        rng: Single random source shared by every subsystem
        player: Economy, inventory, clock and statistics
        incubator: Slots and live cultures
        tasks: Contract pool and active contracts
        events: Random event overlay
        storage: Harvested and frozen cells
        bus: Domain event bus
    """

    mode: GameMode
    catalog: Catalog
    rng: random.Random
    player: Player
    incubator: Incubator
    tasks: TaskManager
    events: RandomEventManager
    storage: CellStorage = field(default_factory=CellStorage)
    bus: EventBus = field(default_factory=EventBus)

    @classmethod
    def new(
        cls,
        mode_id: str = DEFAULT_MODE,
        seed: Optional[int] = None,
        catalog: Optional[Catalog] = None,
        rng: Optional[random.Random] = None,
    ) -> LabSession:
        """Start a fresh lab in the given mode.

        ``rng`` overrides the generator seeded from ``seed``.

        Raises:
            ConfigurationError: If ``mode_id`` is unknown
        """
        mode = get_mode(mode_id)
        catalog = catalog or default_catalog()
        rng = rng or random.Random(seed)

        session = cls(
            mode=mode,
            catalog=catalog,
            rng=rng,
            player=Player(mode),
            incubator=Incubator(mode.unlocked_slots, mode.contamination_rate),
            tasks=TaskManager(catalog, rng),
            events=RandomEventManager(catalog, rng),
        )
        session.tasks.generate(session.player.level)
        logger.info("New lab started (mode=%s, seed=%s)", mode.id, seed)
        return session

    @property
    def game_minutes(self) -> float:
        return self.player.clock.elapsed_minutes
