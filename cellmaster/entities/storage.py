"""Harvested and frozen cell records.

Once a culture leaves the incubator it is no longer simulated; it becomes
a flat record that keeps only what contract delivery and selling need.
"""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Optional

from cellmaster.config.tasks import DEFAULT_DELIVERY_QUALITY
from cellmaster.contracts.version import STORAGE_SCHEMA_VERSION, check_entity_version
from cellmaster.entity_ids import new_id

if TYPE_CHECKING:
    from cellmaster.entities.cell import Cell


@dataclass
class HarvestedCell:
    """A harvested culture waiting to be delivered or sold."""

    id: str
    type_id: str
    quality: float
    has_antibiotics: bool = False
    qc_passed: bool = False
    overgrown: bool = False
    had_contamination_risk: bool = False
    generation: int = 1
    treatments: tuple[str, ...] = ()

    @classmethod
    def from_cell(cls, cell: Cell, rng: random.Random) -> HarvestedCell:
        return cls(
            id=new_id(rng, "harvest"),
            type_id=cell.type_id,
            quality=cell.quality,
            has_antibiotics=cell.has_antibiotics,
            qc_passed=cell.qc_passed,
            overgrown=cell.overgrown,
            had_contamination_risk=cell.had_contamination_risk,
            generation=cell.generation,
            treatments=tuple(cell.treatments),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "type_id": self.type_id,
            "quality": self.quality,
            "has_antibiotics": self.has_antibiotics,
            "qc_passed": self.qc_passed,
            "overgrown": self.overgrown,
            "had_contamination_risk": self.had_contamination_risk,
            "generation": self.generation,
            "treatments": list(self.treatments),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> HarvestedCell:
        return cls(
            id=data["id"],
            type_id=data["type_id"],
            quality=float(data.get("quality", DEFAULT_DELIVERY_QUALITY)),
            has_antibiotics=bool(data.get("has_antibiotics", False)),
            qc_passed=bool(data.get("qc_passed", False)),
            overgrown=bool(data.get("overgrown", False)),
            had_contamination_risk=bool(data.get("had_contamination_risk", False)),
            generation=int(data.get("generation", 1)),
            treatments=tuple(data.get("treatments", ())),
        )


@dataclass
class FrozenCell:
    """A cryopreserved culture that can be thawed back into the incubator."""

    id: str
    type_id: str
    quality: float
    generation: int = 1
    has_antibiotics: bool = False
    qc_passed: bool = False
    frozen_at: float = 0.0  # In-game minutes

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "type_id": self.type_id,
            "quality": self.quality,
            "generation": self.generation,
            "has_antibiotics": self.has_antibiotics,
            "qc_passed": self.qc_passed,
            "frozen_at": self.frozen_at,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> FrozenCell:
        return cls(
            id=data["id"],
            type_id=data["type_id"],
            quality=float(data.get("quality", 0.0)),
            generation=int(data.get("generation", 1)),
            has_antibiotics=bool(data.get("has_antibiotics", False)),
            qc_passed=bool(data.get("qc_passed", False)),
            frozen_at=float(data.get("frozen_at", 0.0)),
        )


@dataclass
class CellStorage:
    """Cold room: harvested cells pending delivery and frozen stocks."""

    harvested: list[HarvestedCell] = field(default_factory=list)
    frozen: list[FrozenCell] = field(default_factory=list)

    def add_harvested(self, record: HarvestedCell) -> None:
        self.harvested.append(record)

    def get_harvested(self, record_id: str) -> Optional[HarvestedCell]:
        return next((r for r in self.harvested if r.id == record_id), None)

    def remove_harvested(self, record_id: str) -> Optional[HarvestedCell]:
        record = self.get_harvested(record_id)
        if record is not None:
            self.harvested.remove(record)
        return record

    def add_frozen(self, record: FrozenCell) -> None:
        self.frozen.append(record)

    def get_frozen(self, record_id: str) -> Optional[FrozenCell]:
        return next((r for r in self.frozen if r.id == record_id), None)

    def remove_frozen(self, record_id: str) -> Optional[FrozenCell]:
        record = self.get_frozen(record_id)
        if record is not None:
            self.frozen.remove(record)
        return record

    def to_dict(self) -> dict[str, Any]:
        return {
            "schema_version": STORAGE_SCHEMA_VERSION,
            "harvested": [r.to_dict() for r in self.harvested],
            "frozen": [r.to_dict() for r in self.frozen],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CellStorage:
        check_entity_version(data, STORAGE_SCHEMA_VERSION, "storage")
        return cls(
            harvested=[HarvestedCell.from_dict(r) for r in data.get("harvested", [])],
            frozen=[FrozenCell.from_dict(r) for r in data.get("frozen", [])],
        )
