"""Immutable reference data records.

The catalog is loaded once and never mutated; every runtime object
refers to catalog entries by their string id.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from cellmaster.effects import CellEffect, OverlayEffect


@dataclass(frozen=True)
class CellType:
    """A cultivable (or special) cell line.

    Attributes:
        id: Catalog key
        name: Display name
        tier: "T1".."T4", or "special"
        base_growth_time: Seconds to reach 100% at growth rate 1.0
        base_value: Nominal harvest payout
        exp_reward: Nominal harvest experience
        unlock_level: Player level required to cultivate
        contamination_base: Per-second contamination probability while growing
        quality_drift: Quality lost per 10s of overgrowth
        medium: Item consumed as culture medium
        serum: Item consumed as serum
        required_addons: Extra items consumed at cultivation
        optional_addons: Items that may be applied at cultivation
        harvest_yield: Storage records produced per harvest
        cultivable: False for reward-only types
        satisfies_any_requirement: Wildcard for contract delivery
        implied_quality: Quality assumed at delivery for wildcard types
    """

    id: str
    name: str
    tier: str
    base_growth_time: float
    base_value: int
    exp_reward: int
    unlock_level: int
    contamination_base: float
    quality_drift: float
    medium: str = "media_dmem"
    serum: str = "fbs"
    required_addons: tuple[str, ...] = ()
    optional_addons: tuple[str, ...] = ()
    harvest_yield: int = 1
    cultivable: bool = True
    satisfies_any_requirement: bool = False
    implied_quality: Optional[float] = None

    @property
    def cultivation_items(self) -> tuple[str, ...]:
        """Items consumed to start a culture, deduplicated in order."""
        seen: list[str] = []
        for item_id in (self.medium, self.serum, *self.required_addons):
            if item_id not in seen:
                seen.append(item_id)
        return tuple(seen)


@dataclass(frozen=True)
class ShopItem:
    """A purchasable item.

    ``effects`` are the cell effects the item applies when it is used on
    a culture; items without effects are consumed by bench operations.
    """

    id: str
    name: str
    category: str
    price: int
    unlock_level: int = 1
    effects: tuple[CellEffect, ...] = ()


@dataclass(frozen=True)
class TaskModifier:
    id: str
    name: str
    deadline_multiplier: float = 1.0
    reward_multiplier: float = 1.0
    penalty_multiplier: float = 1.0
    quality_bonus: int = 0
    constraints: tuple[str, ...] = ()


@dataclass(frozen=True)
class RequirementTemplate:
    """One line of a combo contract."""

    cell_type: str
    units: int
    quality: int


@dataclass(frozen=True)
class TaskTemplate:
    """Blueprint from which contracts are rolled.

    Single contracts draw units and quality from their ranges; combo
    contracts use ``requirements`` and price ``base_gold``/``base_exp`` as
    a bundle.
    """

    id: str
    name: str
    tier: str
    task_type: str
    base_gold: int
    base_exp: int
    deadline_range: tuple[int, int]
    unlock_level: int = 1
    cell_type: Optional[str] = None
    units_range: tuple[int, int] = (1, 1)
    quality_range: tuple[int, int] = (50, 60)
    modifiers: tuple[str, ...] = ()
    constraints: tuple[str, ...] = ()
    chain_count: int = 0
    chain_bonus_items: dict[str, int] = field(default_factory=dict)
    golden_chance: float = 0.0
    requirements: tuple[RequirementTemplate, ...] = ()

    @property
    def is_combo(self) -> bool:
        return bool(self.requirements)


@dataclass(frozen=True)
class RandomEventDefinition:
    """A random event that may be rolled every check interval.

    Attributes:
        id: Catalog key
        name: Display name
        kind: "negative", "positive" or "special"
        chance: Probability per check interval (before mode frequency)
        effect: Overlay effect carried while active
        duration: Seconds the record stays active; None uses the default
    """

    id: str
    name: str
    kind: str
    chance: float
    effect: OverlayEffect
    duration: Optional[float] = None
