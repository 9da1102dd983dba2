"""Contracts: delivery obligations rolled from catalog templates.

A contract moves ``available -> active -> completed | expired | abandoned``.
Its units, quality floor, deadline and reward are rolled once at
construction and never change afterwards; the deadline only counts down
while the contract is active.

Single contracts hold exactly one requirement, combo contracts several.
Both go through the same delivery path:

1. pick the requirement the record counts toward (first eligible in list
   order, a wildcard record matching any type),
2. check its quality against that requirement,
3. check the contract's constraints, stopping at the first failure.
"""

from __future__ import annotations

import logging
import math
import random
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from cellmaster.catalog.models import TaskTemplate
from cellmaster.catalog.registry import Catalog
from cellmaster.config.tasks import BASE_REPUTATION_PENALTY, PENALTY_REWARD_FRACTION
from cellmaster.contracts.version import TASK_SCHEMA_VERSION, check_entity_version
from cellmaster.entities.storage import HarvestedCell
from cellmaster.entity_ids import new_id
from cellmaster.result import ActionResult

logger = logging.getLogger(__name__)

NO_ANTIBIOTICS = "no_antibiotics"
REQUIRE_QC = "require_myco_test"
HARVEST_ON_TIME = "harvest_on_time"
ZERO_CONTAMINATION = "zero_contamination"
REQUIRE_ITEM_PREFIX = "require_"


class TaskStatus(str, Enum):
    AVAILABLE = "available"
    ACTIVE = "active"
    COMPLETED = "completed"
    EXPIRED = "expired"
    ABANDONED = "abandoned"


@dataclass
class Requirement:
    """One cell line a contract asks for."""

    cell_type: str
    units_required: int
    quality_required: float
    units_delivered: int = 0

    @property
    def remaining(self) -> int:
        return max(0, self.units_required - self.units_delivered)

    @property
    def is_satisfied(self) -> bool:
        return self.units_delivered >= self.units_required

    def to_dict(self) -> dict[str, Any]:
        return {
            "cell_type": self.cell_type,
            "units_required": self.units_required,
            "quality_required": self.quality_required,
            "units_delivered": self.units_delivered,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Requirement:
        return cls(
            cell_type=data["cell_type"],
            units_required=int(data.get("units_required", 1)),
            quality_required=float(data.get("quality_required", 0)),
            units_delivered=int(data.get("units_delivered", 0)),
        )


@dataclass(frozen=True)
class TaskReward:
    gold: int
    exp: int
    golden_chance: float = 0.0
    items: dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "gold": self.gold,
            "exp": self.exp,
            "golden_chance": self.golden_chance,
            "items": dict(self.items),
        }


@dataclass(frozen=True)
class TaskPenalty:
    gold: int
    reputation: int

    def to_dict(self) -> dict[str, int]:
        return {"gold": self.gold, "reputation": self.reputation}


class Task:
    """A single contract instance."""

    def __init__(
        self,
        *,
        task_id: str,
        template_id: str,
        name: str,
        tier: str,
        task_type: str,
        requirements: list[Requirement],
        deadline: float,
        reward_gold: int,
        reward_exp: int,
        is_combo: bool = False,
        modifiers: tuple[str, ...] = (),
        constraints: tuple[str, ...] = (),
        reward_multiplier: float = 1.0,
        penalty_multiplier: float = 1.0,
        golden_chance: float = 0.0,
        chain_count: int = 0,
        chain_bonus_items: Optional[dict[str, int]] = None,
        unlock_level: int = 1,
    ) -> None:
        self.id = task_id
        self.template_id = template_id
        self.name = name
        self.tier = tier
        self.task_type = task_type
        self.is_combo = is_combo
        self.requirements = requirements
        self.modifiers = tuple(modifiers)
        self.constraints = tuple(constraints)
        self.deadline = float(deadline)
        self.remaining_time = float(deadline)
        self.reward_multiplier = reward_multiplier
        self.penalty_multiplier = penalty_multiplier
        self.reward_gold = reward_gold
        self.reward_exp = reward_exp
        self.golden_chance = golden_chance
        self.chain_count = chain_count
        self.chain_progress = 0
        self.chain_bonus_items = dict(chain_bonus_items or {})
        self.unlock_level = unlock_level
        self.status = TaskStatus.AVAILABLE

    @classmethod
    def from_template(cls, template: TaskTemplate, catalog: Catalog, rng: random.Random) -> Task:
        """Roll a contract from a template.

        Modifiers apply in template order and compound: deadlines are
        floored after each multiplier, reward and penalty multipliers
        multiply, quality bonuses add to every requirement.

        Raises:
            UnknownCatalogIdError: If the template names an unknown modifier
        """
        if template.is_combo:
            requirements = [
                Requirement(req.cell_type, req.units, req.quality) for req in template.requirements
            ]
            units_factor = 1
        else:
            units = rng.randint(*template.units_range)
            quality = rng.randint(*template.quality_range)
            requirements = [Requirement(template.cell_type, units, quality)]
            units_factor = units

        deadline = rng.randint(*template.deadline_range)
        reward_multiplier = 1.0
        penalty_multiplier = 1.0
        constraints = list(template.constraints)
        for modifier_id in template.modifiers:
            modifier = catalog.modifier(modifier_id)
            deadline = math.floor(deadline * modifier.deadline_multiplier)
            reward_multiplier *= modifier.reward_multiplier
            penalty_multiplier *= modifier.penalty_multiplier
            for requirement in requirements:
                requirement.quality_required += modifier.quality_bonus
            constraints.extend(c for c in modifier.constraints if c not in constraints)

        return cls(
            task_id=new_id(rng, "task"),
            template_id=template.id,
            name=template.name,
            tier=template.tier,
            task_type=template.task_type,
            requirements=requirements,
            deadline=deadline,
            reward_gold=math.floor(template.base_gold * reward_multiplier * units_factor),
            reward_exp=math.floor(template.base_exp * reward_multiplier * units_factor),
            is_combo=template.is_combo,
            modifiers=template.modifiers,
            constraints=tuple(constraints),
            reward_multiplier=reward_multiplier,
            penalty_multiplier=penalty_multiplier,
            golden_chance=template.golden_chance,
            chain_count=template.chain_count,
            chain_bonus_items=template.chain_bonus_items,
            unlock_level=template.unlock_level,
        )

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def cell_type(self) -> Optional[str]:
        """Cell line of a single contract; None for combos."""
        if self.is_combo:
            return None
        return self.requirements[0].cell_type

    @property
    def units_required(self) -> int:
        return sum(r.units_required for r in self.requirements)

    @property
    def units_delivered(self) -> int:
        return sum(r.units_delivered for r in self.requirements)

    @property
    def is_active(self) -> bool:
        return self.status is TaskStatus.ACTIVE

    @property
    def is_final_link(self) -> bool:
        return self.chain_count <= 0 or self.chain_progress >= self.chain_count - 1

    def final_reward(self) -> TaskReward:
        """Reward paid on completion, chain bonus included on the final link."""
        items = dict(self.chain_bonus_items) if self.chain_count > 0 and self.is_final_link else {}
        return TaskReward(self.reward_gold, self.reward_exp, self.golden_chance, items)

    def penalty(self) -> TaskPenalty:
        return TaskPenalty(
            gold=math.floor(self.reward_gold * PENALTY_REWARD_FRACTION * self.penalty_multiplier),
            reputation=math.floor(BASE_REPUTATION_PENALTY * self.penalty_multiplier),
        )

    # ------------------------------------------------------------------
    # State transitions
    # ------------------------------------------------------------------

    def accept(self) -> ActionResult:
        if self.status is not TaskStatus.AVAILABLE:
            return ActionResult.fail("Contract cannot be accepted")
        self.status = TaskStatus.ACTIVE
        self.remaining_time = self.deadline
        return ActionResult.ok(f"Accepted contract: {self.name}", task_id=self.id)

    def abandon(self) -> None:
        self.status = TaskStatus.ABANDONED

    def update(self, delta_time: float) -> bool:
        """Count the deadline down.

        Returns:
            True on the single update that expires the contract
        """
        if self.status is not TaskStatus.ACTIVE:
            return False
        self.remaining_time -= delta_time
        if self.remaining_time <= 0:
            self.remaining_time = 0.0
            self.status = TaskStatus.EXPIRED
            return True
        return False

    # ------------------------------------------------------------------
    # Delivery
    # ------------------------------------------------------------------

    def _delivery_quality(self, record: HarvestedCell, catalog: Catalog) -> float:
        cell_type = catalog.cell_type(record.type_id)
        if cell_type.satisfies_any_requirement and cell_type.implied_quality is not None:
            return float(cell_type.implied_quality)
        return record.quality

    def _matches(self, requirement: Requirement, record: HarvestedCell, catalog: Catalog) -> bool:
        if requirement.cell_type == record.type_id:
            return True
        return catalog.cell_type(record.type_id).satisfies_any_requirement

    def check_constraints(self, record: HarvestedCell, catalog: Catalog) -> Optional[str]:
        """Return the message of the first violated constraint, or None."""
        wildcard = catalog.cell_type(record.type_id).satisfies_any_requirement
        for constraint in self.constraints:
            if constraint == NO_ANTIBIOTICS:
                if record.has_antibiotics:
                    return "Client refuses antibiotic-treated cells"
            elif constraint == REQUIRE_QC:
                if not record.qc_passed:
                    return "Mycoplasma test required"
            elif constraint == HARVEST_ON_TIME:
                if record.overgrown:
                    return "Cells were overgrown"
            elif constraint == ZERO_CONTAMINATION:
                if record.had_contamination_risk:
                    return "Zero-contamination record required"
            elif constraint.startswith(REQUIRE_ITEM_PREFIX) and ":" not in constraint:
                item_id = constraint[len(REQUIRE_ITEM_PREFIX):]
                if not wildcard and item_id not in record.treatments:
                    return f"Cells must be treated with {item_id}"
        return None

    def try_deliver(self, record: HarvestedCell, catalog: Catalog) -> ActionResult:
        """Count a harvested cell toward this contract.

        Args:
            record: Harvested cell offered for delivery
            catalog: Used to resolve the record's cell type capabilities

        Returns:
            ActionResult whose payload carries ``completed``, the delivered
            counts and, on completion, the ``reward``
        """
        if self.status is not TaskStatus.ACTIVE:
            return ActionResult.fail("Contract is not active")

        requirement = next(
            (r for r in self.requirements if not r.is_satisfied and self._matches(r, record, catalog)),
            None,
        )
        if requirement is None:
            if self.is_combo:
                return ActionResult.fail("Cell type not needed by this contract")
            return ActionResult.fail("Cell type does not match")

        quality = self._delivery_quality(record, catalog)
        if quality < requirement.quality_required:
            return ActionResult.fail(
                f"Quality too low ({quality:.0f}/{requirement.quality_required:.0f})",
                quality=quality,
                quality_required=requirement.quality_required,
            )

        violation = self.check_constraints(record, catalog)
        if violation is not None:
            return ActionResult.fail(violation)

        requirement.units_delivered += 1

        if all(r.is_satisfied for r in self.requirements):
            if not self.is_final_link:
                self.chain_progress += 1
                for r in self.requirements:
                    r.units_delivered = 0
                self.remaining_time = self.deadline
                return ActionResult.ok(
                    f"Chain progress {self.chain_progress}/{self.chain_count}",
                    completed=False,
                    chain_continue=True,
                    chain_progress=self.chain_progress,
                    units_delivered=self.units_delivered,
                    units_required=self.units_required,
                )
            self.status = TaskStatus.COMPLETED
            logger.info("Contract completed: %s (%s)", self.id, self.template_id)
            return ActionResult.ok(
                "Contract completed",
                completed=True,
                units_delivered=self.units_delivered,
                units_required=self.units_required,
                reward=self.final_reward().to_dict(),
            )

        return ActionResult.ok(
            f"Delivered ({requirement.units_delivered}/{requirement.units_required})",
            completed=False,
            units_delivered=self.units_delivered,
            units_required=self.units_required,
        )

    def check_can_complete(
        self, records: list[HarvestedCell], catalog: Catalog
    ) -> tuple[bool, list[str]]:
        """Preview whether stored cells could finish this contract.

        Each record is assigned to at most one requirement, greedily in
        requirement order; constraints are not consulted.

        Returns:
            (can_complete, ids of the records that would be used)
        """
        if self.status is not TaskStatus.ACTIVE:
            return False, []

        used: list[str] = []
        can_complete = True
        for requirement in self.requirements:
            needed = requirement.remaining
            if needed <= 0:
                continue
            matching = [
                r.id
                for r in records
                if r.id not in used
                and self._matches(requirement, r, catalog)
                and self._delivery_quality(r, catalog) >= requirement.quality_required
            ]
            if len(matching) < needed:
                can_complete = False
            used.extend(matching[:needed])
        return can_complete, used

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def to_dict(self) -> dict[str, Any]:
        return {
            "schema_version": TASK_SCHEMA_VERSION,
            "id": self.id,
            "template_id": self.template_id,
            "name": self.name,
            "tier": self.tier,
            "task_type": self.task_type,
            "is_combo": self.is_combo,
            "requirements": [r.to_dict() for r in self.requirements],
            "modifiers": list(self.modifiers),
            "constraints": list(self.constraints),
            "deadline": self.deadline,
            "remaining_time": self.remaining_time,
            "reward_multiplier": self.reward_multiplier,
            "penalty_multiplier": self.penalty_multiplier,
            "reward_gold": self.reward_gold,
            "reward_exp": self.reward_exp,
            "golden_chance": self.golden_chance,
            "chain_count": self.chain_count,
            "chain_progress": self.chain_progress,
            "chain_bonus_items": dict(self.chain_bonus_items),
            "unlock_level": self.unlock_level,
            "status": self.status.value,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Task:
        version = check_entity_version(data, TASK_SCHEMA_VERSION, "task")
        if version < 2 or "requirements" not in data or data["requirements"] is None:
            # v1 single contracts kept their one requirement at the top level
            requirements = [
                Requirement(
                    cell_type=data["cell_type"],
                    units_required=int(data.get("units_required", 1)),
                    quality_required=float(data.get("quality_required", 0)),
                    units_delivered=int(data.get("units_delivered", 0)),
                )
            ]
        else:
            requirements = [Requirement.from_dict(r) for r in data["requirements"]]

        task = cls(
            task_id=data["id"],
            template_id=data["template_id"],
            name=data.get("name", data["template_id"]),
            tier=data.get("tier", "T1"),
            task_type=data.get("task_type", "expand"),
            requirements=requirements,
            deadline=float(data.get("deadline", 0.0)),
            reward_gold=int(data.get("reward_gold", 0)),
            reward_exp=int(data.get("reward_exp", 0)),
            is_combo=bool(data.get("is_combo", len(requirements) > 1)),
            modifiers=tuple(data.get("modifiers", ())),
            constraints=tuple(data.get("constraints", ())),
            reward_multiplier=data.get("reward_multiplier", 1.0),
            penalty_multiplier=data.get("penalty_multiplier", 1.0),
            golden_chance=data.get("golden_chance", 0.0),
            chain_count=int(data.get("chain_count", 0)),
            chain_bonus_items=data.get("chain_bonus_items"),
            unlock_level=int(data.get("unlock_level", 1)),
        )
        task.remaining_time = float(data.get("remaining_time", task.deadline))
        task.chain_progress = int(data.get("chain_progress", 0))
        task.status = TaskStatus(data.get("status", TaskStatus.AVAILABLE.value))
        return task

    def __repr__(self) -> str:
        return (
            f"Task(id={self.id!r}, template={self.template_id!r}, status={self.status.value}, "
            f"delivered={self.units_delivered}/{self.units_required})"
        )
