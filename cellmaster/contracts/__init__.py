"""Data contracts for saved lab state.

This package contains schema version constants and validation for
everything the persistence boundary reads and writes.
"""

from cellmaster.contracts.version import (
    CELL_SCHEMA_VERSION,
    EVENTS_SCHEMA_VERSION,
    INCUBATOR_SCHEMA_VERSION,
    PLAYER_SCHEMA_VERSION,
    SNAPSHOT_VERSION,
    STORAGE_SCHEMA_VERSION,
    TASK_SCHEMA_VERSION,
    VersionMismatchError,
    check_entity_version,
    validate_snapshot_version,
)

__all__ = [
    "CELL_SCHEMA_VERSION",
    "EVENTS_SCHEMA_VERSION",
    "INCUBATOR_SCHEMA_VERSION",
    "PLAYER_SCHEMA_VERSION",
    "SNAPSHOT_VERSION",
    "STORAGE_SCHEMA_VERSION",
    "TASK_SCHEMA_VERSION",
    "VersionMismatchError",
    "check_entity_version",
    "validate_snapshot_version",
]
