"""Domain events published by the lab.

These are data-only facts (frozen dataclasses) carrying everything a
handler needs, so notification and statistics code never reaches back
into the simulation. ``game_minutes`` is the in-game clock when the
event happened.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Optional


@dataclass(frozen=True)
class CellStatusChangedEvent:
    """A culture became ready or contaminated.

    Attributes:
        cell_id: ID of the culture
        cell_type: Catalog id of its cell line
        slot_index: Incubator slot holding it
        previous: Status before the change ("growing", "ready")
        status: Status after the change ("ready", "contaminated")
        game_minutes: In-game clock
    """

    cell_id: str
    cell_type: str
    slot_index: int
    previous: str
    status: str
    game_minutes: float


@dataclass(frozen=True)
class CellHarvestedEvent:
    cell_id: str
    cell_type: str
    value: int
    exp: int
    quality: float
    golden_pearl: bool
    game_minutes: float


@dataclass(frozen=True)
class TaskCompletedEvent:
    """A contract's final delivery went through.

    Attributes:
        task_id: Contract id
        template_id: Template it was rolled from
        gold: Gold rewarded
        exp: Experience rewarded
        items: Bonus items granted (item id -> count)
        golden_pearl: Whether the reward's golden roll hit
        game_minutes: In-game clock
    """

    task_id: str
    template_id: str
    gold: int
    exp: int
    items: dict[str, int]
    golden_pearl: bool
    game_minutes: float


@dataclass(frozen=True)
class TaskExpiredEvent:
    task_id: str
    template_id: str
    penalty: int
    reputation: int
    game_minutes: float


@dataclass(frozen=True)
class RandomEventTriggeredEvent:
    event_id: str
    name: str
    kind: str
    duration: float
    game_minutes: float


@dataclass(frozen=True)
class RandomEventExpiredEvent:
    event_id: str
    name: str
    game_minutes: float


@dataclass(frozen=True)
class LevelUpEvent:
    old_level: int
    new_level: int
    game_minutes: float


@dataclass(frozen=True)
class BankruptcyEvent:
    """Liquid assets fell below the bankruptcy floor."""

    gold: int
    golden_pearls: int
    game_minutes: float


def event_to_dict(event: Any, extra: Optional[dict[str, Any]] = None) -> dict[str, Any]:
    """Flatten a domain event for notification feeds."""
    data = {"type": type(event).__name__, **asdict(event)}
    if extra:
        data.update(extra)
    return data
