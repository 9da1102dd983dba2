"""Catalog registry: id-keyed lookups over the reference data."""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Iterable, Iterator, Optional, TypeVar

from cellmaster.catalog.models import (
    CellType,
    RandomEventDefinition,
    ShopItem,
    TaskModifier,
    TaskTemplate,
)
from cellmaster.exceptions import ConfigurationError, UnknownCatalogIdError

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _index(kind: str, records: Iterable[T]) -> dict[str, T]:
    indexed: dict[str, T] = {}
    for record in records:
        record_id = record.id  # type: ignore[attr-defined]
        if record_id in indexed:
            raise ConfigurationError(f"Duplicate {kind} id: {record_id!r}")
        indexed[record_id] = record
    return indexed


class Catalog:
    """Immutable reference data keyed by string id.

    Every lookup raises ``UnknownCatalogIdError`` for an id that is not in
    the catalog. Cross references (template -> cell type, modifier, item)
    are validated at construction so a bad catalog fails fast.
    """

    def __init__(
        self,
        cell_types: Iterable[CellType],
        items: Iterable[ShopItem],
        modifiers: Iterable[TaskModifier],
        templates: Iterable[TaskTemplate],
        random_events: Iterable[RandomEventDefinition],
    ) -> None:
        self._cell_types = _index("cell type", cell_types)
        self._items = _index("item", items)
        self._modifiers = _index("task modifier", modifiers)
        self._templates = _index("task template", templates)
        # Roll order matters for random events
        self._random_events = _index("random event", random_events)
        self._validate()

    def _validate(self) -> None:
        for cell_type in self._cell_types.values():
            if not cell_type.cultivable:
                continue
            for item_id in (*cell_type.cultivation_items, *cell_type.optional_addons):
                self.item(item_id)
        for template in self._templates.values():
            for modifier_id in template.modifiers:
                self.modifier(modifier_id)
            if template.is_combo:
                for requirement in template.requirements:
                    self.cell_type(requirement.cell_type)
            elif template.cell_type is None:
                raise ConfigurationError(f"Template {template.id!r} has no cell type")
            else:
                self.cell_type(template.cell_type)
            for item_id in template.chain_bonus_items:
                self.item(item_id)

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def cell_type(self, type_id: str) -> CellType:
        try:
            return self._cell_types[type_id]
        except KeyError:
            raise UnknownCatalogIdError("cell type", type_id) from None

    def item(self, item_id: str) -> ShopItem:
        try:
            return self._items[item_id]
        except KeyError:
            raise UnknownCatalogIdError("item", item_id) from None

    def modifier(self, modifier_id: str) -> TaskModifier:
        try:
            return self._modifiers[modifier_id]
        except KeyError:
            raise UnknownCatalogIdError("task modifier", modifier_id) from None

    def template(self, template_id: str) -> TaskTemplate:
        try:
            return self._templates[template_id]
        except KeyError:
            raise UnknownCatalogIdError("task template", template_id) from None

    def random_event(self, event_id: str) -> RandomEventDefinition:
        try:
            return self._random_events[event_id]
        except KeyError:
            raise UnknownCatalogIdError("random event", event_id) from None

    def has_item(self, item_id: str) -> bool:
        return item_id in self._items

    # ------------------------------------------------------------------
    # Iteration
    # ------------------------------------------------------------------

    def cell_types(self) -> Iterator[CellType]:
        return iter(self._cell_types.values())

    def items(self, category: Optional[str] = None) -> Iterator[ShopItem]:
        for item in self._items.values():
            if category is None or item.category == category:
                yield item

    def templates(self) -> Iterator[TaskTemplate]:
        return iter(self._templates.values())

    def random_events(self) -> Iterator[RandomEventDefinition]:
        return iter(self._random_events.values())

    def wildcard_cell_types(self) -> list[CellType]:
        return [c for c in self._cell_types.values() if c.satisfies_any_requirement]


@lru_cache(maxsize=1)
def default_catalog() -> Catalog:
    """Build (once) the catalog shipped with the game."""
    from cellmaster.catalog.cell_types import CELL_TYPES
    from cellmaster.catalog.items import SHOP_ITEMS
    from cellmaster.catalog.random_events import RANDOM_EVENTS
    from cellmaster.catalog.tasks import TASK_MODIFIERS, TASK_TEMPLATES

    catalog = Catalog(CELL_TYPES, SHOP_ITEMS, TASK_MODIFIERS, TASK_TEMPLATES, RANDOM_EVENTS)
    logger.debug(
        "Catalog loaded: %d cell types, %d items, %d templates, %d random events",
        len(CELL_TYPES),
        len(SHOP_ITEMS),
        len(TASK_TEMPLATES),
        len(RANDOM_EVENTS),
    )
    return catalog
