"""Reference catalog: cell lines, shop items, contracts and random events."""

from cellmaster.catalog.cell_types import WILDCARD_CELL_TYPE
from cellmaster.catalog.models import (
    CellType,
    RandomEventDefinition,
    RequirementTemplate,
    ShopItem,
    TaskModifier,
    TaskTemplate,
)
from cellmaster.catalog.registry import Catalog, default_catalog

__all__ = [
    "Catalog",
    "CellType",
    "RandomEventDefinition",
    "RequirementTemplate",
    "ShopItem",
    "TaskModifier",
    "TaskTemplate",
    "WILDCARD_CELL_TYPE",
    "default_catalog",
]
