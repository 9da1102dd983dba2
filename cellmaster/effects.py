"""Closed set of effect variants.

Two families live here:

- Cell effects are applied to a single culture (by items at cultivation
  time or from the bench) and are dispatched by ``Cell.apply_effect``.
- Overlay effects are carried by random events. Duration-bound ones fold
  into the overlay snapshot while the event is active; one-shot ones are
  applied exactly once by the engine.

Each variant is a frozen dataclass carrying only the fields it needs.
Consumers dispatch with ``match`` and raise ``TypeError`` on anything
they do not know, so adding a variant fails loudly instead of silently.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, fields
from typing import Any, Union

from cellmaster.config.cell import ANTIBIOTIC_QUALITY_PENALTY
from cellmaster.exceptions import ConfigurationError

# =============================================================================
# Cell effects
# =============================================================================


@dataclass(frozen=True)
class Protection:
    """Blocks contamination rolls while growing."""


@dataclass(frozen=True)
class Antibiotics:
    """Protection that always costs some quality."""

    quality_delta: float = ANTIBIOTIC_QUALITY_PENALTY


@dataclass(frozen=True)
class AntiContamination:
    """Anti-contamination agent.

    Attributes:
        quality_delta: Quality change applied immediately
        contamination_multiplier: Scales the cell's own contamination risk
        grants_immunity: Full immunity (also blocks overgrowth risk)
    """

    quality_delta: float = 0
    contamination_multiplier: float = 1.0
    grants_immunity: bool = False


@dataclass(frozen=True)
class GoldenChance:
    """Sets the golden-drop chance (scaled by the session golden boost)."""

    value: float


@dataclass(frozen=True)
class ValueMultiplier:
    """Scales harvest payout."""

    value: float


@dataclass(frozen=True)
class QualityBonus:
    """Additive quality change, clamped to the quality bounds."""

    value: float


@dataclass(frozen=True)
class SpeedBoost:
    """Growth speed multiplier, consulted every growing tick."""

    value: float


CellEffect = Union[
    Protection,
    Antibiotics,
    AntiContamination,
    GoldenChance,
    ValueMultiplier,
    QualityBonus,
    SpeedBoost,
]

# =============================================================================
# Overlay effects (random events)
# =============================================================================


@dataclass(frozen=True)
class PauseGrowth:
    """Freezes all growth while active."""


@dataclass(frozen=True)
class ContaminationShift:
    """Multiplies the lab-wide contamination rate (>1 outbreak, <1 clean day)."""

    value: float


@dataclass(frozen=True)
class GoldenBoost:
    value: float


@dataclass(frozen=True)
class EfficiencyBoost:
    """Multiplies the growth time step."""

    value: float


@dataclass(frozen=True)
class DeadlineShift:
    """Multiplies contract deadlines (<1 means deadlines run out faster)."""

    value: float


@dataclass(frozen=True)
class GoldBonus:
    amount: int


@dataclass(frozen=True)
class QualityDrop:
    """Quality delta on one random live culture."""

    value: float


@dataclass(frozen=True)
class LoseItems:
    """Removes one of each listed item the player holds."""

    item_ids: tuple[str, ...]


@dataclass(frozen=True)
class RareItem:
    """Grants one random item from the pool."""

    pool: tuple[str, ...] = ("anti_contam_high", "speed_boost")


@dataclass(frozen=True)
class Mutation:
    """Random quality shift in [low, high] on one random culture."""

    low: int
    high: int


DurationEffect = Union[PauseGrowth, ContaminationShift, GoldenBoost, EfficiencyBoost, DeadlineShift]
OneShotEffect = Union[GoldBonus, QualityDrop, LoseItems, RareItem, Mutation]
OverlayEffect = Union[DurationEffect, OneShotEffect]

ONE_SHOT_EFFECTS = (GoldBonus, QualityDrop, LoseItems, RareItem, Mutation)


def is_one_shot(effect: OverlayEffect) -> bool:
    return isinstance(effect, ONE_SHOT_EFFECTS)


# =============================================================================
# Serialization
# =============================================================================

_KINDS: dict[str, type] = {
    "protection": Protection,
    "antibiotics": Antibiotics,
    "anti_contamination": AntiContamination,
    "golden_chance": GoldenChance,
    "value_multiplier": ValueMultiplier,
    "quality_bonus": QualityBonus,
    "speed": SpeedBoost,
    "pause_growth": PauseGrowth,
    "contamination_shift": ContaminationShift,
    "golden_boost": GoldenBoost,
    "efficiency_boost": EfficiencyBoost,
    "deadline_shift": DeadlineShift,
    "gold_bonus": GoldBonus,
    "quality_drop": QualityDrop,
    "lose_items": LoseItems,
    "rare_item": RareItem,
    "mutation": Mutation,
}
_KIND_BY_TYPE = {cls: kind for kind, cls in _KINDS.items()}


def effect_kind(effect: Any) -> str:
    try:
        return _KIND_BY_TYPE[type(effect)]
    except KeyError:
        raise TypeError(f"Not an effect variant: {effect!r}") from None


def effect_to_dict(effect: Any) -> dict[str, Any]:
    """Serialize an effect as ``{"kind": ..., **fields}``."""
    data = asdict(effect)
    for key, value in data.items():
        if isinstance(value, tuple):
            data[key] = list(value)
    data["kind"] = effect_kind(effect)
    return data


def effect_from_dict(data: dict[str, Any]) -> Any:
    """Rebuild an effect from :func:`effect_to_dict` output.

    Unknown keys are ignored; missing optional fields take their defaults.

    Raises:
        ConfigurationError: If the kind tag is missing or unknown
    """
    kind = data.get("kind")
    cls = _KINDS.get(kind) if isinstance(kind, str) else None
    if cls is None:
        raise ConfigurationError(f"Unknown effect kind: {kind!r}")

    kwargs = {}
    for f in fields(cls):
        if f.name in data:
            value = data[f.name]
            kwargs[f.name] = tuple(value) if isinstance(value, list) else value
    return cls(**kwargs)
