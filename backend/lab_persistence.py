"""Lab state persistence.

This module saves the single lab session to disk and loads it back, so a
game survives server restarts.

Layout:
    <data_dir>/save.json    the latest snapshot
    <data_dir>/save.json.tmp written first, then moved over save.json

A load that fails for any reason (missing file, corrupt JSON, incompatible
schema version, unknown catalog id) is logged and reported as None so the
caller can start a fresh session instead.
"""

import json
import logging
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional, Union

from cellmaster.catalog.registry import Catalog
from cellmaster.config.server import DEFAULT_DATA_DIR
from cellmaster.contracts.version import SNAPSHOT_VERSION
from cellmaster.simulation.session import LabSession
from cellmaster.simulation.snapshot import capture_session, restore_session

logger = logging.getLogger(__name__)

# Base directory for saved games
DATA_DIR = Path(os.getenv("CELLMASTER_DATA_DIR", DEFAULT_DATA_DIR))
SAVE_FILENAME = "save.json"

PathLike = Union[str, Path]


def save_path(data_dir: PathLike = DATA_DIR) -> Path:
    return Path(data_dir) / SAVE_FILENAME


def save_snapshot_data(snapshot: Dict[str, Any], data_dir: PathLike = DATA_DIR) -> Optional[str]:
    """Write pre-captured snapshot data to disk.

    Args:
        snapshot: The complete snapshot dictionary
        data_dir: Directory holding the save file

    Returns:
        Filepath of the saved snapshot, or None if the save failed
    """
    try:
        snapshot["schema_version"] = SNAPSHOT_VERSION
        snapshot["saved_at"] = datetime.now(timezone.utc).isoformat()

        target = save_path(data_dir)
        target.parent.mkdir(parents=True, exist_ok=True)
        tmp = target.with_name(target.name + ".tmp")
        with open(tmp, "w") as f:
            json.dump(snapshot, f, indent=2)
        tmp.replace(target)

        logger.info(
            f"Saved lab state to {target} "
            f"({len(snapshot.get('incubator', {}).get('slots', []))} slots)"
        )
        return str(target)

    except Exception as e:
        logger.error(f"Failed to save lab state: {e}", exc_info=True)
        return None


def save_session(session: LabSession, data_dir: PathLike = DATA_DIR) -> Optional[str]:
    """Capture and save a session.

    Returns:
        Filepath of the saved snapshot, or None if the save failed
    """
    try:
        snapshot = capture_session(session)
    except Exception as e:
        logger.error(f"Failed to capture lab state: {e}", exc_info=True)
        return None
    return save_snapshot_data(snapshot, data_dir)


def load_snapshot(data_dir: PathLike = DATA_DIR) -> Optional[Dict[str, Any]]:
    """Load the raw snapshot dictionary, or None if there is none or it is unreadable."""
    path = save_path(data_dir)
    if not path.exists():
        logger.info(f"No saved lab found at {path}")
        return None
    try:
        with open(path) as f:
            return json.load(f)
    except Exception as e:
        logger.error(f"Failed to load snapshot {path}: {e}", exc_info=True)
        return None


def load_session(data_dir: PathLike = DATA_DIR, catalog: Optional[Catalog] = None) -> Optional[LabSession]:
    """Restore the saved session.

    Returns:
        The restored session, or None if nothing usable was saved
    """
    snapshot = load_snapshot(data_dir)
    if snapshot is None:
        return None
    try:
        session = restore_session(snapshot, catalog)
    except Exception as e:
        logger.error(f"Saved lab could not be restored: {e}", exc_info=True)
        return None
    logger.info(f"Loaded lab saved at {snapshot.get('saved_at', 'unknown time')}")
    return session

