"""Client-facing views of the lab session."""

from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict, List

from cellmaster.entities.cell import Cell
from cellmaster.simulation.actions import max_passage_ratio
from cellmaster.simulation.engine import LabEngine
from cellmaster.simulation.session import LabSession


def _cell_view(cell: Cell) -> Dict[str, Any]:
    data = cell.to_dict()
    data["remaining_time"] = cell.remaining_time()
    data["estimated_value"] = cell.estimated_value()
    return data


def build_slots(session: LabSession) -> List[Dict[str, Any]]:
    return [
        {
            "index": slot.index,
            "locked": slot.locked,
            "cell": _cell_view(slot.cell) if slot.cell is not None else None,
        }
        for slot in session.incubator.slots
    ]


def build_lab_state(session: LabSession, engine: LabEngine) -> Dict[str, Any]:
    """Everything a client needs to draw the lab in one payload."""
    player = session.player
    clock = player.clock
    incubator = session.incubator
    return {
        "mode": session.mode.id,
        "tick": engine.tick_count,
        "stopped": engine.stopped,
        "clock": {
            "day": clock.day,
            "time": clock.time_of_day,
            "speed": clock.speed,
            "elapsed_minutes": clock.elapsed_minutes,
        },
        "player": {
            "gold": player.gold,
            "level": player.level,
            "total_exp": player.total_exp,
            "level_progress": player.level_progress(),
            "golden_pearls": player.golden_pearls,
            "total_assets": player.total_assets(),
            "bankrupt": player.is_bankrupt(),
            "inventory": dict(player.inventory),
            "stats": dict(player.stats),
            "max_passage_ratio": max_passage_ratio(player.level),
        },
        "incubator": {
            **incubator.stats(),
            "next_unlock_cost": incubator.next_unlock_cost(),
            "paused": incubator.is_paused,
            "slots": build_slots(session),
        },
        "contracts": {
            **session.tasks.stats(),
            "available": [t.to_dict() for t in session.tasks.available],
            "active": [t.to_dict() for t in session.tasks.active],
            "refresh_cooldown": session.tasks.refresh_cooldown,
        },
        "events": {
            "active": [r.to_dict() for r in session.events.active],
            "overlay": asdict(session.events.snapshot()),
        },
        "storage": {
            "harvested": [r.to_dict() for r in session.storage.harvested],
            "frozen": [r.to_dict() for r in session.storage.frozen],
        },
    }
