"""Contract pool manager.

Keeps a bounded offer pool and a bounded set of accepted contracts. The
pool is topped up on a fixed real-time interval, or wiped and rebuilt when
the player pays for a forced refresh.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from typing import Any, Optional

from cellmaster.catalog.registry import Catalog
from cellmaster.config.tasks import (
    COMPLETED_HISTORY_LIMIT,
    DIVERSITY_SKIP_CHANCE,
    DIVERSITY_TARGET_TYPES,
    MAX_ACTIVE_TASKS,
    MAX_AVAILABLE_TASKS,
    TASK_REFRESH_INTERVAL,
    TASKS_KEPT_ON_REGENERATE,
)
from cellmaster.entities.storage import HarvestedCell
from cellmaster.result import ActionResult
from cellmaster.tasks.task import Task, TaskPenalty, TaskStatus

logger = logging.getLogger(__name__)


@dataclass
class TaskUpdate:
    """What happened to the contracts during one update."""

    expired: list[tuple[Task, TaskPenalty]] = field(default_factory=list)
    refreshed: bool = False


class TaskManager:
    """Offer pool, active contracts and completion history."""

    def __init__(
        self,
        catalog: Catalog,
        rng: Optional[random.Random] = None,
        max_active: int = MAX_ACTIVE_TASKS,
        max_available: int = MAX_AVAILABLE_TASKS,
        refresh_interval: float = TASK_REFRESH_INTERVAL,
    ) -> None:
        self._catalog = catalog
        self._rng = rng or random.Random()
        self.max_active = max_active
        self.max_available = max_available
        self.refresh_interval = refresh_interval
        self.refresh_cooldown = 0.0

        self.available: list[Task] = []
        self.active: list[Task] = []
        self.completed: list[Task] = []

    def generate(self, player_level: int) -> int:
        """Regenerate the offer pool.

        Keeps a short prefix of the current pool, then draws shuffled
        templates unlocked at ``player_level``. Templates already offered
        or active are skipped, and while fewer than four cell lines are on
        offer a template for an already-represented line is skipped half
        the time.

        Returns:
            Number of contracts added
        """
        self.available = self.available[:TASKS_KEPT_ON_REGENERATE]
        templates = [t for t in self._catalog.templates() if t.unlock_level <= player_level]
        if not templates or len(self.available) >= self.max_available:
            return 0

        used_types = {t.cell_type for t in self.available if t.cell_type is not None}
        taken = {t.template_id for t in self.available} | {t.template_id for t in self.active}
        self._rng.shuffle(templates)

        added = 0
        for template in templates:
            if len(self.available) >= self.max_available:
                break
            if template.id in taken:
                continue
            if (
                template.cell_type is not None
                and len(used_types) < DIVERSITY_TARGET_TYPES
                and template.cell_type in used_types
                and self._rng.random() < DIVERSITY_SKIP_CHANCE
            ):
                continue

            self.available.append(Task.from_template(template, self._catalog, self._rng))
            taken.add(template.id)
            if template.cell_type is not None:
                used_types.add(template.cell_type)
            added += 1

        logger.debug("Generated %d contracts (pool %d)", added, len(self.available))
        return added

    def get_available(self, task_id: str) -> Optional[Task]:
        return next((t for t in self.available if t.id == task_id), None)

    def get_active(self, task_id: str) -> Optional[Task]:
        return next((t for t in self.active if t.id == task_id), None)

    def matching_tasks(self, cell_type: str) -> list[Task]:
        return [
            t for t in self.active
            if t.is_active and any(r.cell_type == cell_type for r in t.requirements)
        ]

    def accept(self, task_id: str) -> ActionResult:
        if len(self.active) >= self.max_active:
            return ActionResult.fail(f"At most {self.max_active} contracts can be active")
        task = self.get_available(task_id)
        if task is None:
            return ActionResult.fail("Contract not found")

        result = task.accept()
        if result.success:
            self.available.remove(task)
            self.active.append(task)
        return result

    def update(
        self,
        delta_time: float,
        player_level: int,
        speed: float = 1.0,
        deadline_multiplier: float = 1.0,
    ) -> TaskUpdate:
        """Count deadlines down and run the periodic pool top-up.

        Args:
            delta_time: Real seconds since the last update
            player_level: Level used to filter templates on refresh
            speed: Game speed; deadlines run faster at higher speeds
            deadline_multiplier: Overlay pressure; below 1 deadlines run faster
        """
        outcome = TaskUpdate()
        countdown = delta_time * speed / deadline_multiplier if deadline_multiplier > 0 else delta_time * speed

        for task in list(self.active):
            if task.update(countdown):
                self.active.remove(task)
                penalty = task.penalty()
                outcome.expired.append((task, penalty))
                logger.info("Contract expired: %s (penalty %d)", task.id, penalty.gold)

        self.refresh_cooldown -= delta_time
        if self.refresh_cooldown <= 0:
            self.refresh_cooldown = self.refresh_interval
            if len(self.available) < self.max_available:
                self.generate(player_level)
                outcome.refreshed = True
        return outcome

    def try_deliver(self, task_id: str, record: HarvestedCell) -> ActionResult:
        task = self.get_active(task_id)
        if task is None:
            return ActionResult.fail("Contract not found")

        result = task.try_deliver(record, self._catalog)
        if result.get("completed"):
            self.active.remove(task)
            self.completed.append(task)
            self.completed = self.completed[-COMPLETED_HISTORY_LIMIT:]
        return result

    def abandon(self, task_id: str) -> ActionResult:
        task = self.get_active(task_id)
        if task is None:
            return ActionResult.fail("Contract not found")
        task.abandon()
        self.active.remove(task)
        logger.info("Contract abandoned: %s", task.id)
        return ActionResult.ok(f"Abandoned contract: {task.name}", task_id=task.id)

    def force_refresh(self, player_level: int) -> int:
        """Clear the offer pool and rebuild it immediately."""
        self.available = []
        return self.generate(player_level)

    def stats(self) -> dict[str, int]:
        return {
            "available": len(self.available),
            "active": len(self.active),
            "completed": len(self.completed),
            "max_active": self.max_active,
        }

    def to_dict(self) -> dict[str, Any]:
        return {
            "available": [t.to_dict() for t in self.available],
            "active": [t.to_dict() for t in self.active],
            "completed": [t.to_dict() for t in self.completed[-COMPLETED_HISTORY_LIMIT:]],
            "refresh_cooldown": self.refresh_cooldown,
        }

    @classmethod
    def from_dict(
        cls, data: dict[str, Any], catalog: Catalog, rng: Optional[random.Random] = None
    ) -> TaskManager:
        manager = cls(catalog, rng)
        manager.available = [Task.from_dict(t) for t in data.get("available", [])]
        manager.active = [
            t for t in (Task.from_dict(d) for d in data.get("active", []))
            if t.status is TaskStatus.ACTIVE
        ]
        manager.completed = [Task.from_dict(t) for t in data.get("completed", [])]
        manager.refresh_cooldown = float(data.get("refresh_cooldown", 0.0))
        return manager
