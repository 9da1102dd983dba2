"""Cell entity: a single culture growing in an incubator slot.

A cell is created when cultivation starts, is advanced every tick by the
incubator that owns it, and leaves the incubator on harvest, discard,
rescue or freezing. Passage spawns new, independent child cells.

Lifecycle:
    growing -> ready            (normal)
    growing -> contaminated     (risk roll, failed QC)
    ready   -> contaminated     (overgrown risk roll, failed QC)

``overgrown`` is a flag on a ready cell, never a status, and never clears.
Once contaminated, ticks are no-ops; only rescue or removal touch the cell.

Every randomized parameter (growth rate, base quality, drift) is stored on
the instance and persisted, so a restored cell behaves exactly as the
original would have.
"""

from __future__ import annotations

import logging
import math
import random
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from cellmaster.catalog.models import CellType
from cellmaster.config.cell import (
    ADVANCED_REAGENT_LOSS_REDUCTION,
    ADVANCED_REAGENT_QUALITY_BONUS,
    BASE_GOLDEN_CHANCE,
    BASE_QUALITY_MIN,
    BASE_QUALITY_SPREAD,
    DEFAULT_CONTAMINATION_BASE,
    DEFAULT_QUALITY_DRIFT,
    EMERGENCY_EXP_FRACTION,
    EMERGENCY_VALUE_FRACTION,
    GOLDEN_PEARL_DROP_VALUE,
    GROWTH_RATE_VARIANCE,
    HARVEST_QUALITY_BASE,
    HARVEST_QUALITY_SPAN,
    MIN_GROWTH_RATE,
    OVERGROW_DECAY_START,
    OVERGROW_FLAG_AFTER,
    OVERGROWN_CONTAMINATION_RATE,
    PASSAGE_LOSS_MAX,
    PASSAGE_LOSS_MIN,
    PASSAGE_QUALITY_FLOOR,
    QC_PASS_CHANCE,
    QC_QUALITY_BONUS,
    QUALITY_MAX,
    QUALITY_MIN,
)
from cellmaster.contracts.version import CELL_SCHEMA_VERSION, check_entity_version
from cellmaster.effects import (
    AntiContamination,
    Antibiotics,
    CellEffect,
    GoldenChance,
    Protection,
    QualityBonus,
    SpeedBoost,
    ValueMultiplier,
    effect_from_dict,
    effect_to_dict,
)
from cellmaster.entity_ids import new_id

logger = logging.getLogger(__name__)


class CellStatus(str, Enum):
    GROWING = "growing"
    READY = "ready"
    CONTAMINATED = "contaminated"


@dataclass(frozen=True)
class HarvestOutcome:
    """Result of harvesting or salvaging a cell.

    Attributes:
        success: False when the cell was not in a harvestable state
        value: Gold paid out
        exp: Experience granted
        golden_pearl: Whether the golden bonus drop hit
        golden_value: Flat value of the golden drop (0 when it missed)
        quality: Cell quality at the moment of harvest
    """

    success: bool
    value: int = 0
    exp: int = 0
    golden_pearl: bool = False
    golden_value: int = 0
    quality: float = 0.0


def _clamp_quality(value: float) -> float:
    return max(QUALITY_MIN, min(QUALITY_MAX, value))


class Cell:
    """A single culture.

    Use :meth:`create` to roll a fresh cell from its catalog type; the
    constructor takes every parameter explicitly and is what restoration
    goes through.
    """

    def __init__(
        self,
        cell_type: CellType,
        *,
        cell_id: str,
        base_quality: float,
        growth_rate: float,
        golden_boost: float = 1.0,
        slot_index: Optional[int] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self._rng = rng or random.Random()

        self.id = cell_id
        self.type_id = cell_type.id
        self.name = cell_type.name
        self.tier = cell_type.tier
        self.slot_index = slot_index

        # Snapshot of catalog parameters
        self.base_growth_time = float(cell_type.base_growth_time)
        self.base_value = cell_type.base_value
        self.exp_reward = cell_type.exp_reward
        self.contamination_base = (
            cell_type.contamination_base
            if cell_type.contamination_base is not None
            else DEFAULT_CONTAMINATION_BASE
        )
        self.quality_drift = (
            cell_type.quality_drift if cell_type.quality_drift is not None else DEFAULT_QUALITY_DRIFT
        )

        # Per-instance randomized parameters
        self.growth_rate = growth_rate
        self.total_growth_time = self.base_growth_time / growth_rate if growth_rate > 0 else 0.0

        # Mutable state
        self.status = CellStatus.GROWING
        self.growth_progress = 0.0
        self.base_quality = float(base_quality)
        self.quality = float(base_quality)
        self.overgrow_time = 0.0
        self.overgrown = False
        self.age = 0.0
        self.ready_time: Optional[float] = None
        self.generation = 1
        self.parent_id: Optional[str] = None

        # Modifiers
        self.golden_boost = golden_boost
        self.golden_chance = BASE_GOLDEN_CHANCE * golden_boost
        self.value_multiplier = 1.0
        self.contamination_multiplier = 1.0

        # Flags
        self.has_protection = False
        self.has_antibiotics = False
        self.immune = False
        self.qc_passed = False
        self.had_contamination_risk = False

        self.effects: list[CellEffect] = []
        self.treatments: list[str] = []

    @classmethod
    def create(
        cls,
        cell_type: CellType,
        rng: random.Random,
        *,
        golden_boost: float = 1.0,
        slot_index: Optional[int] = None,
    ) -> Cell:
        """Roll a new cell of the given type."""
        base_quality = BASE_QUALITY_MIN + rng.randint(0, BASE_QUALITY_SPREAD)
        growth_rate = max(MIN_GROWTH_RATE, 1 + rng.uniform(-1, 1) * GROWTH_RATE_VARIANCE)
        return cls(
            cell_type,
            cell_id=new_id(rng, "cell"),
            base_quality=base_quality,
            growth_rate=growth_rate,
            golden_boost=golden_boost,
            slot_index=slot_index,
            rng=rng,
        )

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def is_growing(self) -> bool:
        return self.status is CellStatus.GROWING

    @property
    def is_ready(self) -> bool:
        return self.status is CellStatus.READY

    @property
    def is_contaminated(self) -> bool:
        return self.status is CellStatus.CONTAMINATED

    @property
    def speed_multiplier(self) -> float:
        speed = 1.0
        for effect in self.effects:
            if isinstance(effect, SpeedBoost):
                speed *= effect.value
        return speed

    def remaining_time(self) -> float:
        """Seconds until ready at the current speed (0 unless growing)."""
        if not self.is_growing or self.total_growth_time <= 0:
            return 0.0
        remaining = (100.0 - self.growth_progress) / 100.0 * self.total_growth_time
        return max(0.0, remaining / self.speed_multiplier)

    def quality_multiplier(self) -> float:
        return HARVEST_QUALITY_BASE + (self.quality / 100.0) * HARVEST_QUALITY_SPAN

    def estimated_value(self) -> int:
        return math.floor(self.base_value * self.value_multiplier * self.quality_multiplier())

    # ------------------------------------------------------------------
    # Tick
    # ------------------------------------------------------------------

    def update(self, delta_time: float, rate_multiplier: float = 1.0) -> None:
        """Advance the culture by ``delta_time`` seconds.

        Args:
            delta_time: Seconds to advance (already speed/efficiency scaled)
            rate_multiplier: Combined lab-wide contamination multiplier
        """
        if self.is_contaminated or delta_time <= 0:
            return

        self.age += delta_time

        if self.is_growing:
            if not (self.has_protection or self.immune):
                chance = (
                    self.contamination_base
                    * rate_multiplier
                    * self.contamination_multiplier
                    * delta_time
                )
                # Linear risk approximation; clamp for very large steps
                if self._rng.random() < min(1.0, max(0.0, chance)):
                    self.contaminate()
                    return

            if self.total_growth_time > 0:
                step = 100.0 / self.total_growth_time * self.speed_multiplier * delta_time
            else:
                step = 100.0
            self.growth_progress = min(100.0, self.growth_progress + step)
            if self.growth_progress >= 100.0:
                self.growth_progress = 100.0
                self.status = CellStatus.READY
                self.ready_time = self.age
                logger.debug("Cell %s (%s) ready", self.id, self.type_id)

        if self.is_ready:
            self.overgrow_time += delta_time
            if self.overgrow_time > OVERGROW_DECAY_START:
                decay = self.quality_drift * (self.overgrow_time / 10.0)
                self.quality = _clamp_quality(max(0.0, self.base_quality - decay))
            if self.overgrow_time > OVERGROW_FLAG_AFTER:
                self.overgrown = True
                if not self.immune:
                    chance = min(1.0, OVERGROWN_CONTAMINATION_RATE * delta_time)
                    if self._rng.random() < chance:
                        self.contaminate()

    def contaminate(self) -> None:
        """Force the culture into the contaminated state."""
        if self.is_contaminated:
            return
        self.status = CellStatus.CONTAMINATED
        self.quality = 0.0
        self.had_contamination_risk = True
        logger.debug("Cell %s (%s) contaminated", self.id, self.type_id)

    # ------------------------------------------------------------------
    # Effects
    # ------------------------------------------------------------------

    def apply_quality_bonus(self, bonus: float) -> None:
        if self.is_contaminated:
            return
        self.quality = _clamp_quality(self.quality + bonus)

    def apply_effect(self, effect: CellEffect) -> None:
        """Record an effect and apply its one fixed side effect.

        A contaminated culture ignores effects.

        Raises:
            TypeError: If ``effect`` is not a known cell effect variant
        """
        if self.is_contaminated:
            return
        match effect:
            case Protection():
                self.has_protection = True
            case Antibiotics(quality_delta=delta):
                self.has_antibiotics = True
                self.has_protection = True
                self.apply_quality_bonus(delta)
            case AntiContamination(
                quality_delta=delta, contamination_multiplier=multiplier, grants_immunity=immune
            ):
                self.apply_quality_bonus(delta)
                self.contamination_multiplier *= multiplier
                if immune:
                    self.has_protection = True
                    self.immune = True
            case GoldenChance(value=value):
                self.golden_chance = value * self.golden_boost
            case ValueMultiplier(value=value):
                self.value_multiplier *= value
            case QualityBonus(value=value):
                self.apply_quality_bonus(value)
            case SpeedBoost():
                # Consulted through speed_multiplier while growing
                pass
            case _:
                raise TypeError(f"Unsupported cell effect: {effect!r}")
        self.effects.append(effect)

    def apply_item(self, item_id: str, effects: tuple[CellEffect, ...]) -> None:
        """Apply an item's effects and remember the item as a treatment."""
        for effect in effects:
            self.apply_effect(effect)
        self.treatments.append(item_id)

    # ------------------------------------------------------------------
    # Bench operations
    # ------------------------------------------------------------------

    def perform_qc(self) -> bool:
        """Run a mycoplasma test.

        A pass grants a quality bonus and the ``qc_passed`` flag; a fail
        means a hidden contamination was found and contaminates the cell.
        A contaminated culture always fails without a test being run.
        """
        if self.is_contaminated:
            return False
        if self._rng.random() < QC_PASS_CHANCE:
            self.qc_passed = True
            self.apply_quality_bonus(QC_QUALITY_BONUS)
            return True
        self.contaminate()
        return False

    def harvest(self) -> HarvestOutcome:
        """Compute the payout of a ready culture. Does not mutate the cell."""
        if self.is_contaminated or not self.is_ready:
            return HarvestOutcome(success=False)

        multiplier = self.quality_multiplier()
        value = math.floor(self.base_value * self.value_multiplier * multiplier)
        exp = math.floor(self.exp_reward * self.value_multiplier * multiplier)
        golden = self._rng.random() < self.golden_chance
        return HarvestOutcome(
            success=True,
            value=value,
            exp=exp,
            golden_pearl=golden,
            golden_value=GOLDEN_PEARL_DROP_VALUE if golden else 0,
            quality=self.quality,
        )

    def emergency_save(self) -> HarvestOutcome:
        """Salvage a contaminated culture at a fixed loss."""
        if not self.is_contaminated:
            return HarvestOutcome(success=False)
        return HarvestOutcome(
            success=True,
            value=math.floor(self.base_value * EMERGENCY_VALUE_FRACTION),
            exp=math.floor(self.exp_reward * EMERGENCY_EXP_FRACTION),
            quality=self.quality,
        )

    def passage(
        self,
        cell_type: CellType,
        new_slot_index: Optional[int] = None,
        use_advanced_reagent: bool = False,
    ) -> Cell:
        """Create a child culture from this one. The parent is not modified.

        The child's quality is the parent's minus a random loss, floored;
        an advanced reagent shrinks the loss and then adds a flat bonus.
        """
        loss = self._rng.randint(PASSAGE_LOSS_MIN, PASSAGE_LOSS_MAX)
        if use_advanced_reagent:
            loss = max(0, loss - ADVANCED_REAGENT_LOSS_REDUCTION)

        child = Cell.create(
            cell_type, self._rng, golden_boost=self.golden_boost, slot_index=new_slot_index
        )
        child.base_quality = max(PASSAGE_QUALITY_FLOOR, self.quality - loss)
        child.quality = child.base_quality
        if use_advanced_reagent:
            child.apply_quality_bonus(ADVANCED_REAGENT_QUALITY_BONUS)
        child.generation = self.generation + 1
        child.parent_id = self.id
        return child

    def reset_after_passage(self) -> None:
        """Return the parent to a fresh growing culture after a split."""
        loss = self._rng.randint(PASSAGE_LOSS_MIN, PASSAGE_LOSS_MAX)
        self.quality = max(PASSAGE_QUALITY_FLOOR, self.quality - loss)
        self.base_quality = self.quality
        self.status = CellStatus.GROWING
        self.growth_progress = 0.0
        self.overgrow_time = 0.0
        self.overgrown = False
        self.ready_time = None
        self.generation += 1

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def to_dict(self) -> dict[str, Any]:
        return {
            "schema_version": CELL_SCHEMA_VERSION,
            "id": self.id,
            "type_id": self.type_id,
            "slot_index": self.slot_index,
            "base_growth_time": self.base_growth_time,
            "base_value": self.base_value,
            "exp_reward": self.exp_reward,
            "contamination_base": self.contamination_base,
            "quality_drift": self.quality_drift,
            "growth_rate": self.growth_rate,
            "status": self.status.value,
            "growth_progress": self.growth_progress,
            "base_quality": self.base_quality,
            "quality": self.quality,
            "overgrow_time": self.overgrow_time,
            "overgrown": self.overgrown,
            "age": self.age,
            "ready_time": self.ready_time,
            "generation": self.generation,
            "parent_id": self.parent_id,
            "golden_boost": self.golden_boost,
            "golden_chance": self.golden_chance,
            "value_multiplier": self.value_multiplier,
            "contamination_multiplier": self.contamination_multiplier,
            "has_protection": self.has_protection,
            "has_antibiotics": self.has_antibiotics,
            "immune": self.immune,
            "qc_passed": self.qc_passed,
            "had_contamination_risk": self.had_contamination_risk,
            "effects": [effect_to_dict(e) for e in self.effects],
            "treatments": list(self.treatments),
        }

    @classmethod
    def from_dict(
        cls, data: dict[str, Any], cell_type: CellType, rng: Optional[random.Random] = None
    ) -> Cell:
        """Restore a cell.

        Catalog parameters come from the record when present so a catalog
        rebalance does not change cultures already in progress. Missing
        multipliers and boosts default to 1, missing flags to False.
        """
        version = check_entity_version(data, CELL_SCHEMA_VERSION, "cell")

        golden_boost = data.get("golden_boost", 1.0)
        cell = cls(
            cell_type,
            cell_id=data["id"],
            base_quality=data.get("base_quality", data.get("quality", BASE_QUALITY_MIN)),
            growth_rate=data.get("growth_rate", 1.0),
            golden_boost=golden_boost,
            slot_index=data.get("slot_index"),
            rng=rng,
        )
        cell.base_growth_time = float(data.get("base_growth_time", cell.base_growth_time))
        cell.base_value = data.get("base_value", cell.base_value)
        cell.exp_reward = data.get("exp_reward", cell.exp_reward)
        cell.contamination_base = data.get("contamination_base", cell.contamination_base)
        cell.quality_drift = data.get("quality_drift", cell.quality_drift)
        cell.total_growth_time = (
            cell.base_growth_time / cell.growth_rate if cell.growth_rate > 0 else 0.0
        )

        cell.status = CellStatus(data.get("status", CellStatus.GROWING.value))
        cell.growth_progress = float(data.get("growth_progress", 0.0))
        cell.quality = _clamp_quality(float(data.get("quality", cell.base_quality)))
        cell.overgrow_time = float(data.get("overgrow_time", 0.0))
        cell.overgrown = bool(data.get("overgrown", False))
        cell.age = float(data.get("age", 0.0))
        cell.ready_time = data.get("ready_time")
        cell.generation = int(data.get("generation", 1))
        cell.parent_id = data.get("parent_id")

        cell.golden_chance = data.get("golden_chance", BASE_GOLDEN_CHANCE * golden_boost)
        cell.value_multiplier = data.get("value_multiplier", 1.0)
        cell.contamination_multiplier = data.get("contamination_multiplier", 1.0)

        cell.has_protection = bool(data.get("has_protection", False))
        cell.has_antibiotics = bool(data.get("has_antibiotics", False))
        cell.immune = bool(data.get("immune", False))
        cell.qc_passed = bool(data.get("qc_passed", False))
        cell.had_contamination_risk = bool(data.get("had_contamination_risk", False))

        cell.effects = [effect_from_dict(e) for e in data.get("effects", [])]
        if version < 2:
            # v1 stored no treatments; every other v2 field has a neutral default above
            cell.treatments = []
        else:
            cell.treatments = list(data.get("treatments", []))
        return cell

    def __repr__(self) -> str:
        return (
            f"Cell(id={self.id!r}, type={self.type_id!r}, status={self.status.value}, "
            f"progress={self.growth_progress:.1f}, quality={self.quality:.1f})"
        )
