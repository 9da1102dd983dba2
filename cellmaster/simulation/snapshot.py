"""Point-in-time capture and restoration of a whole lab session.

The snapshot is a plain JSON-compatible dict. It includes the state of the
session RNG, so a restored session rolls exactly what the original would
have rolled next.

Snapshot layout::

    {
        "schema_version": "1.0",
        "mode": "medium",
        "rng_state": [...],
        "player": {...},
        "incubator": {...},
        "tasks": {...},
        "events": {...},
        "storage": {...}
    }
"""

from __future__ import annotations

import logging
import random
from typing import Any, Optional

from cellmaster.catalog.registry import Catalog, default_catalog
from cellmaster.config.modes import DEFAULT_MODE, get_mode
from cellmaster.contracts.version import SNAPSHOT_VERSION, validate_snapshot_version
from cellmaster.entities.storage import CellStorage
from cellmaster.exceptions import PersistenceError, UnknownCatalogIdError
from cellmaster.incubator import Incubator
from cellmaster.overlay import RandomEventManager
from cellmaster.player import Player
from cellmaster.simulation.session import LabSession
from cellmaster.tasks.task_manager import TaskManager

logger = logging.getLogger(__name__)


def _encode_rng_state(state: tuple) -> list[Any]:
    version, internal, gauss = state
    return [version, list(internal), gauss]


def _decode_rng_state(data: list[Any]) -> tuple:
    version, internal, gauss = data
    return (version, tuple(internal), gauss)


def capture_session(session: LabSession) -> dict[str, Any]:
    """Capture every mutable part of a session."""
    return {
        "schema_version": SNAPSHOT_VERSION,
        "mode": session.mode.id,
        "rng_state": _encode_rng_state(session.rng.getstate()),
        "player": session.player.to_dict(),
        "incubator": session.incubator.to_dict(),
        "tasks": session.tasks.to_dict(),
        "events": session.events.to_dict(),
        "storage": session.storage.to_dict(),
    }


def restore_session(data: dict[str, Any], catalog: Optional[Catalog] = None) -> LabSession:
    """Rebuild a session from :func:`capture_session` output.

    Raises:
        VersionMismatchError: If the snapshot or an entity has an incompatible version
        PersistenceError: If a required section is missing or malformed
        UnknownCatalogIdError: If the snapshot references an unknown catalog id
    """
    validate_snapshot_version(data.get("schema_version"))
    catalog = catalog or default_catalog()
    mode = get_mode(data.get("mode", DEFAULT_MODE))

    rng = random.Random()
    if data.get("rng_state") is not None:
        try:
            rng.setstate(_decode_rng_state(data["rng_state"]))
        except (TypeError, ValueError) as e:
            raise PersistenceError(f"Invalid rng_state in snapshot: {e}") from e

    try:
        session = LabSession(
            mode=mode,
            catalog=catalog,
            rng=rng,
            player=Player.from_dict(data["player"], mode),
            incubator=Incubator.from_dict(data["incubator"], catalog, rng),
            tasks=TaskManager.from_dict(data.get("tasks", {}), catalog, rng),
            events=RandomEventManager.from_dict(data.get("events", {}), catalog, rng),
            storage=CellStorage.from_dict(data.get("storage", {})),
        )
    except UnknownCatalogIdError:
        raise
    except KeyError as e:
        raise PersistenceError(f"Snapshot missing field: {e}") from e
    logger.info("Restored lab session (mode=%s)", mode.id)
    return session
