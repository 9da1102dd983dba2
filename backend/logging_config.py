"""Logging setup for the lab server.

The backend and the simulation core both log through the standard library.
The core logs every cell transition at DEBUG, so it can be given its own
level, separate from the server's.

Environment:
    CELLMASTER_LOG_LEVEL       backend and uvicorn level (default INFO)
    CELLMASTER_CORE_LOG_LEVEL  level of the ``cellmaster`` loggers
                               (default: the backend level)
"""

from __future__ import annotations

import logging
import os

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
LOG_DATEFMT = "%H:%M:%S"

BACKEND_LOGGER = "cellmaster.backend"
UVICORN_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access")


def resolve_level(explicit: str | None, env_var: str, fallback: str) -> str:
    """Pick a level name: explicit argument, then ``env_var``, then ``fallback``."""
    raw = explicit if explicit is not None else os.getenv(env_var)
    name = (raw or fallback).upper()
    if not isinstance(logging.getLevelName(name), int):
        raise ValueError(f"Unknown log level {raw!r}")
    return name


def configure_logging(
    *,
    level: str | None = None,
    core_level: str | None = None,
    include_uvicorn: bool = True,
) -> logging.Logger:
    """Configure the root handler and the lab's loggers.

    Safe to call more than once; the root handler is only installed the
    first time, later calls just adjust levels.

    Args:
        level: Backend level, overriding ``CELLMASTER_LOG_LEVEL``.
        core_level: Core level, overriding ``CELLMASTER_CORE_LOG_LEVEL``.
        include_uvicorn: Align uvicorn's loggers with the backend level.

    Returns:
        The ``cellmaster.backend`` logger.
    """
    backend_level = resolve_level(level, "CELLMASTER_LOG_LEVEL", "INFO")
    simulation_level = resolve_level(core_level, "CELLMASTER_CORE_LOG_LEVEL", backend_level)

    logging.basicConfig(level=backend_level, format=LOG_FORMAT, datefmt=LOG_DATEFMT)

    logging.getLogger("backend").setLevel(backend_level)
    app_logger = logging.getLogger(BACKEND_LOGGER)
    app_logger.setLevel(backend_level)
    logging.getLogger("cellmaster").setLevel(simulation_level)

    if include_uvicorn:
        for name in UVICORN_LOGGERS:
            logging.getLogger(name).setLevel(backend_level)

    app_logger.debug("Logging configured (backend=%s, core=%s)", backend_level, simulation_level)
    return app_logger
