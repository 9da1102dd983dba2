"""FastAPI app construction for the Cell Master lab.

``create_app`` has no import-time side effects: the lab session, its engine
and the background runner all hang off an :class:`AppContext`, which the
lifespan fills in at startup and tears down at shutdown. Routes reach the
session through the same context, loading it on first use when no lifespan
ran (a bare ``TestClient(app)``).

Usage:
------
    # Server: settings from CELLMASTER_* environment variables
    app = create_app()

    # Tests: isolated save directory, fixed seed, no background ticking
    app = create_app(context=AppContext(data_dir=tmp_path, seed=42), start_runner=False)
"""

import logging
import os
import time
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from backend import __version__
from backend.lab_persistence import load_session, save_session
from backend.lab_runner import LabRunner
from backend.logging_config import BACKEND_LOGGER, configure_logging
from backend.notifications import NotificationFeed
from cellmaster.config.modes import DEFAULT_MODE
from cellmaster.config.server import DEFAULT_API_PORT, DEFAULT_DATA_DIR
from cellmaster.simulation import LabActions, LabEngine, LabSession


def _env_flag(name: str) -> bool:
    return os.getenv(name, "false").lower() == "true"


def _env_seed() -> Optional[int]:
    raw = os.getenv("CELLMASTER_SEED")
    return int(raw) if raw else None


@dataclass
class AppContext:
    """Settings plus the live game of one app instance.

    Nothing here is module-global, so every test app gets its own lab.
    """

    # Settings
    data_dir: Path = field(
        default_factory=lambda: Path(os.getenv("CELLMASTER_DATA_DIR", DEFAULT_DATA_DIR))
    )
    api_port: int = field(
        default_factory=lambda: int(os.getenv("CELLMASTER_API_PORT", str(DEFAULT_API_PORT)))
    )
    mode: str = field(default_factory=lambda: os.getenv("CELLMASTER_MODE", DEFAULT_MODE))
    seed: Optional[int] = field(default_factory=_env_seed)
    production_mode: bool = field(default_factory=lambda: _env_flag("PRODUCTION"))
    allowed_origins: list = field(
        default_factory=lambda: os.getenv("ALLOWED_ORIGINS", "*").split(",")
    )

    # The live game, filled in by ensure_session() or new_game()
    session: Optional[LabSession] = None
    engine: Optional[LabEngine] = None
    actions: Optional[LabActions] = None
    runner: Optional[LabRunner] = None
    notifications: NotificationFeed = field(default_factory=NotificationFeed)

    server_start_time: float = field(default_factory=time.time)
    logger: logging.Logger = field(default_factory=lambda: logging.getLogger(BACKEND_LOGGER))

    def install_session(self, session: LabSession) -> None:
        """Make ``session`` the live game, stopping the previous one."""
        if self.engine is not None:
            self.engine.stop()
        self.session = session
        self.engine = LabEngine(session)
        self.actions = LabActions(session)
        self.notifications.clear()
        self.notifications.attach(session.bus)
        if self.runner is not None:
            self.runner.attach(self.engine)

    def ensure_session(self) -> LabSession:
        """Load the saved lab, or start a new one when there is none."""
        if self.session is None:
            session = load_session(self.data_dir)
            if session is None:
                session = LabSession.new(self.mode, seed=self.seed)
                self.logger.info(f"No usable save in {self.data_dir}, started a new {self.mode} lab")
            self.install_session(session)
        return self.session

    def new_game(self, mode: str, seed: Optional[int] = None) -> LabSession:
        """Replace the live game with a fresh one.

        Raises:
            ConfigurationError: If ``mode`` is unknown
        """
        session = LabSession.new(mode, seed=seed)
        self.mode = mode
        self.install_session(session)
        return session

    def save(self) -> Optional[str]:
        if self.session is None:
            return None
        return save_session(self.session, self.data_dir)

    def server_info(self) -> Dict[str, Any]:
        """Process-level facts about this server and its lab."""
        return {
            "version": __version__,
            "uptime_seconds": time.time() - self.server_start_time,
            "mode": self.session.mode.id if self.session is not None else self.mode,
            "ticks": self.engine.tick_count if self.engine is not None else 0,
            "runner_active": self.runner is not None and self.runner.running,
            "data_dir": str(self.data_dir),
        }


def create_app(
    *,
    production_mode: Optional[bool] = None,
    start_runner: bool = True,
    context: Optional[AppContext] = None,
) -> FastAPI:
    """Build the lab API.

    Args:
        production_mode: Overrides the PRODUCTION environment variable
        start_runner: Tick and autosave in the background while the app runs
        context: Context to serve; a fresh one from the environment if None

    Returns:
        The app, with its context on ``app.state.context``
    """
    logger = configure_logging()

    ctx = context if context is not None else AppContext()
    if production_mode is not None:
        ctx.production_mode = production_mode
    ctx.logger = logger

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Load the lab and start the runner; stop and save on the way out."""
        try:
            ctx.ensure_session()
            if start_runner:
                ctx.runner = LabRunner(ctx.engine, ctx.data_dir)
                await ctx.runner.start()
            ctx.logger.info(f"Lab server ready (mode={ctx.session.mode.id}, runner={start_runner})")
            yield
            ctx.logger.info("Lab server shutting down")
        except Exception as e:
            ctx.logger.error(f"Lab server startup failed: {e}", exc_info=True)
            raise
        finally:
            if ctx.runner is not None:
                await ctx.runner.stop()
                ctx.runner = None
            if ctx.session is not None:
                ctx.save()
            if ctx.engine is not None:
                ctx.engine.stop()
            ctx.notifications.detach()

    app = FastAPI(
        title="Cell Master Lab API",
        version=__version__,
        lifespan=lifespan,
        docs_url=None if ctx.production_mode else "/docs",
        redoc_url=None if ctx.production_mode else "/redoc",
    )
    app.state.context = ctx

    # Browsers may call the API from any origin while developing
    app.add_middleware(
        CORSMiddleware,
        allow_origins=ctx.allowed_origins if ctx.production_mode else ["*"],
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
    )

    _include_routers(app, ctx)
    return app


def _include_routers(app: FastAPI, ctx: AppContext) -> None:
    from backend.routers.lab import setup_lab_router

    app.include_router(setup_lab_router(ctx))
    ctx.logger.debug("Lab router included")
