"""Player economy: gold, experience, inventory, golden pearls and the game clock."""

from __future__ import annotations

import logging
from bisect import bisect_right
from dataclasses import dataclass
from typing import Any, Optional

from cellmaster.config.game import (
    BANKRUPTCY_THRESHOLD,
    GAME_START_HOUR,
    GOLDEN_PEARL_VALUE,
    SPEED_OPTIONS,
    STARTING_INVENTORY,
    TIME_SCALE,
)
from cellmaster.config.levels import LEVEL_THRESHOLDS, MAX_LEVEL
from cellmaster.config.modes import GameMode
from cellmaster.contracts.version import PLAYER_SCHEMA_VERSION, check_entity_version
from cellmaster.result import ActionResult

logger = logging.getLogger(__name__)


def calculate_level(total_exp: int) -> int:
    """Level reached with ``total_exp`` accumulated experience (1-based)."""
    return max(1, min(MAX_LEVEL, bisect_right(LEVEL_THRESHOLDS, total_exp)))


@dataclass(frozen=True)
class LevelUp:
    old_level: int
    new_level: int


class GameClock:
    """In-game clock driven by real elapsed seconds and the speed setting.

    One real second at speed 1 is ``TIME_SCALE`` in-game seconds.
    """

    def __init__(self, speed: int = 1, elapsed_minutes: float = 0.0) -> None:
        self.speed = speed
        self.elapsed_minutes = elapsed_minutes

    def advance_time(self, real_delta: float) -> float:
        """Advance by ``real_delta`` real seconds; returns in-game minutes added."""
        minutes = real_delta * self.speed * TIME_SCALE / 60.0
        self.elapsed_minutes += minutes
        return minutes

    def set_speed(self, speed: int) -> ActionResult:
        if speed not in SPEED_OPTIONS:
            return ActionResult.fail(f"Speed must be one of {list(SPEED_OPTIONS)}")
        self.speed = speed
        return ActionResult.ok(f"Speed set to {speed}x", speed=speed)

    @property
    def day(self) -> int:
        return 1 + int((GAME_START_HOUR * 60 + self.elapsed_minutes) // (24 * 60))

    @property
    def time_of_day(self) -> str:
        minutes = int(GAME_START_HOUR * 60 + self.elapsed_minutes) % (24 * 60)
        return f"{minutes // 60:02d}:{minutes % 60:02d}"

    def to_dict(self) -> dict[str, Any]:
        return {"speed": self.speed, "elapsed_minutes": self.elapsed_minutes}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> GameClock:
        speed = int(data.get("speed", 1))
        return cls(speed if speed in SPEED_OPTIONS else 1, float(data.get("elapsed_minutes", 0.0)))


class Player:
    """Economy and progression of the single player."""

    def __init__(self, mode: GameMode) -> None:
        self.mode_id = mode.id
        self.gold = mode.starting_gold
        self.total_exp = 0
        self.level = 1
        self.golden_pearls = 0
        self.inventory: dict[str, int] = dict(STARTING_INVENTORY)
        self.clock = GameClock()
        self.stats: dict[str, int] = {
            "cells_grown": 0,
            "cells_harvested": 0,
            "cells_contaminated": 0,
            "tasks_completed": 0,
            "tasks_failed": 0,
            "total_gold_earned": 0,
            "golden_pearls_found": 0,
            "reputation": 0,
        }

    # ------------------------------------------------------------------
    # Gold and experience
    # ------------------------------------------------------------------

    def add_gold(self, amount: int) -> None:
        self.gold += amount
        if amount > 0:
            self.stats["total_gold_earned"] += amount

    def spend_gold(self, amount: int) -> bool:
        """Deduct gold; refuses (and changes nothing) when short."""
        if amount < 0 or self.gold < amount:
            return False
        self.gold -= amount
        return True

    def charge_penalty(self, amount: int) -> int:
        """Deduct up to ``amount`` gold without going below zero; returns the charge."""
        charged = max(0, min(self.gold, amount))
        self.gold -= charged
        return charged

    def add_exp(self, amount: int) -> Optional[LevelUp]:
        """Add experience and report a level-up, if any."""
        self.total_exp += amount
        new_level = calculate_level(self.total_exp)
        if new_level > self.level:
            level_up = LevelUp(self.level, new_level)
            self.level = new_level
            logger.info("Level up: %d -> %d", level_up.old_level, level_up.new_level)
            return level_up
        return None

    def level_progress(self) -> dict[str, float]:
        current = LEVEL_THRESHOLDS[self.level - 1]
        if self.level >= MAX_LEVEL:
            return {"current": self.total_exp - current, "needed": 0, "percent": 100.0}
        needed = LEVEL_THRESHOLDS[self.level] - current
        into = self.total_exp - current
        return {"current": into, "needed": needed, "percent": into / needed * 100.0}

    # ------------------------------------------------------------------
    # Inventory
    # ------------------------------------------------------------------

    def add_item(self, item_id: str, quantity: int = 1) -> None:
        self.inventory[item_id] = self.inventory.get(item_id, 0) + quantity

    def remove_item(self, item_id: str, quantity: int = 1) -> bool:
        if self.inventory.get(item_id, 0) < quantity:
            return False
        self.inventory[item_id] -= quantity
        if self.inventory[item_id] <= 0:
            del self.inventory[item_id]
        return True

    def has_item(self, item_id: str, quantity: int = 1) -> bool:
        return self.inventory.get(item_id, 0) >= quantity

    def item_count(self, item_id: str) -> int:
        return self.inventory.get(item_id, 0)

    def has_items(self, item_ids: tuple[str, ...] | list[str]) -> list[str]:
        """Return the ids in ``item_ids`` the player is missing (one of each)."""
        return [item_id for item_id in item_ids if not self.has_item(item_id)]

    def consume_items(self, item_ids: tuple[str, ...] | list[str]) -> bool:
        """Remove one of each item, all-or-nothing."""
        if self.has_items(item_ids):
            return False
        for item_id in item_ids:
            self.remove_item(item_id)
        return True

    # ------------------------------------------------------------------
    # Golden pearls
    # ------------------------------------------------------------------

    def add_golden_pearl(self, count: int = 1) -> None:
        self.golden_pearls += count
        self.stats["golden_pearls_found"] += count

    def sell_golden_pearls(self, count: Optional[int] = None) -> ActionResult:
        """Liquidate pearls; sells all of them when ``count`` is None."""
        count = self.golden_pearls if count is None else count
        if count <= 0 or self.golden_pearls < count:
            return ActionResult.fail("Not enough golden pearls")
        self.golden_pearls -= count
        value = count * GOLDEN_PEARL_VALUE
        self.add_gold(value)
        return ActionResult.ok(f"Sold {count} golden pearl(s) for {value} gold", count=count, value=value)

    def total_assets(self) -> int:
        return self.gold + self.golden_pearls * GOLDEN_PEARL_VALUE

    def is_bankrupt(self) -> bool:
        return self.total_assets() < BANKRUPTCY_THRESHOLD

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def to_dict(self) -> dict[str, Any]:
        return {
            "schema_version": PLAYER_SCHEMA_VERSION,
            "mode_id": self.mode_id,
            "gold": self.gold,
            "total_exp": self.total_exp,
            "golden_pearls": self.golden_pearls,
            "inventory": dict(self.inventory),
            "clock": self.clock.to_dict(),
            "stats": dict(self.stats),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any], mode: GameMode) -> Player:
        check_entity_version(data, PLAYER_SCHEMA_VERSION, "player")
        player = cls(mode)
        player.gold = int(data.get("gold", mode.starting_gold))
        player.total_exp = int(data.get("total_exp", 0))
        player.level = calculate_level(player.total_exp)
        player.golden_pearls = int(data.get("golden_pearls", 0))
        player.inventory = {k: int(v) for k, v in data.get("inventory", {}).items() if int(v) > 0}
        player.clock = GameClock.from_dict(data.get("clock", {}))
        player.stats.update({k: int(v) for k, v in data.get("stats", {}).items()})
        return player
