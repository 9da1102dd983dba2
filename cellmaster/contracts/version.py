"""Schema version constants for saved lab state.

Each persisted entity carries its own integer schema version so it can be
migrated independently; the snapshot as a whole carries SNAPSHOT_VERSION.

Version Policy:
    - An entity record older than the current version is migrated by
      filling the fields it lacks with neutral defaults
    - A record newer than the current version is rejected
    - A snapshot whose major version differs is rejected
"""

from __future__ import annotations

from cellmaster.exceptions import PersistenceError

# Whole-snapshot schema version
# v1.0: player, incubator, tasks, random events, storage, rng state
SNAPSHOT_VERSION = "1.0"

# Per-entity schema versions
# Cell v2: explicit contamination multiplier, treatments and risk flag
CELL_SCHEMA_VERSION = 2
# Incubator v1: slots + wall-clock override expiries
INCUBATOR_SCHEMA_VERSION = 1
# Task v2: combo requirements carry their own delivered counts
TASK_SCHEMA_VERSION = 2
# Player v1: gold, exp, inventory, clock, stats
PLAYER_SCHEMA_VERSION = 1
# Random event manager v1
EVENTS_SCHEMA_VERSION = 1
# Storage v1: harvested and frozen records
STORAGE_SCHEMA_VERSION = 1


class VersionMismatchError(PersistenceError):
    """Raised when a schema version mismatch is detected."""

    def __init__(self, expected: str, actual: str, context: str = ""):
        self.expected = expected
        self.actual = actual
        self.context = context
        msg = f"Version mismatch: expected {expected}, got {actual}"
        if context:
            msg += f" ({context})"
        super().__init__(msg)


def validate_snapshot_version(version: str | None) -> None:
    """Validate a snapshot version, raising on an incompatible major version.

    Raises:
        VersionMismatchError: If version is missing or its major part differs
    """
    if version is None:
        raise VersionMismatchError(SNAPSHOT_VERSION, "None", "Snapshot missing schema_version")
    if str(version).split(".")[0] != SNAPSHOT_VERSION.split(".")[0]:
        raise VersionMismatchError(SNAPSHOT_VERSION, str(version), "Snapshot version incompatible")


def check_entity_version(data: dict, current: int, entity: str) -> int:
    """Return the record's schema version, defaulting to 1 when absent.

    Raises:
        VersionMismatchError: If the record was written by a newer schema
    """
    version = int(data.get("schema_version", 1))
    if version > current:
        raise VersionMismatchError(str(current), str(version), f"{entity} record is newer than supported")
    return version
