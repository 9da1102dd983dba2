"""Entry point for the lab server.

``app`` is what uvicorn imports. ``main()`` adds a small command line: it
serves the API by default, or runs a lab headless for a fixed number of
ticks and optionally exports the final snapshot.
"""

import argparse
import json
import logging
import os
from pathlib import Path
from typing import Optional

import uvicorn

from backend.app_factory import AppContext, create_app
from backend.logging_config import configure_logging
from cellmaster.config.game import TICK_INTERVAL
from cellmaster.config.modes import DEFAULT_MODE, GAME_MODES
from cellmaster.config.server import DEFAULT_API_PORT
from cellmaster.simulation import LabEngine, LabSession
from cellmaster.simulation.snapshot import capture_session

logger = logging.getLogger(__name__)

# uvicorn looks up this module-level app
app = create_app()


def run_headless(
    ticks: int,
    mode: str = DEFAULT_MODE,
    seed: Optional[int] = None,
    stats_interval: int = 60,
    export: Optional[Path] = None,
) -> LabSession:
    """Tick a fresh lab with nobody at the bench.

    Useful to watch random events, contract expiry and the clock without a
    client attached.

    Returns:
        The session after the last tick
    """
    session = LabSession.new(mode, seed=seed)
    engine = LabEngine(session)
    for n in range(1, ticks + 1):
        report = engine.tick(TICK_INTERVAL)
        for event_id in report.triggered_events:
            logger.info("tick %d: %s started", n, event_id)
        if stats_interval and n % stats_interval == 0:
            clock = session.player.clock
            logger.info(
                "tick %d: day %d %s, gold=%d, contracts offered=%d active=%d",
                n,
                clock.day,
                clock.time_of_day,
                session.player.gold,
                len(session.tasks.available),
                len(session.tasks.active),
            )

    if export is not None:
        export.parent.mkdir(parents=True, exist_ok=True)
        with open(export, "w") as f:
            json.dump(capture_session(session), f, indent=2)
        logger.info("Exported final snapshot to %s", export)
    return session


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Cell Master lab server",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Serve the API (default)
  cellmaster-server

  # Fresh rich lab on another port
  cellmaster-server --mode rich --port 8080

  # One in-game day headless, reproducibly, keeping the final state
  cellmaster-server --headless --ticks 1440 --seed 42 --export run.json
        """,
    )
    parser.add_argument("--mode", choices=sorted(GAME_MODES), default=None, help="Difficulty of a new lab")
    parser.add_argument("--seed", type=int, default=None, help="Seed for a new lab (optional)")
    parser.add_argument(
        "--port",
        type=int,
        default=int(os.getenv("CELLMASTER_API_PORT", str(DEFAULT_API_PORT))),
        help=f"API port (default: {DEFAULT_API_PORT})",
    )
    parser.add_argument("--headless", action="store_true", help="Tick a lab without serving the API")
    parser.add_argument("--ticks", type=int, default=600, help="Ticks to run headless (default: 600)")
    parser.add_argument(
        "--stats-interval", type=int, default=60, help="Log a summary every N headless ticks (default: 60)"
    )
    parser.add_argument("--export", type=Path, default=None, metavar="FILENAME", help="Write the final snapshot here")
    args = parser.parse_args()

    if args.headless:
        configure_logging()
        run_headless(args.ticks, args.mode or DEFAULT_MODE, args.seed, args.stats_interval, args.export)
        return

    is_production = os.getenv("PRODUCTION", "false").lower() == "true"
    if is_production:
        context = AppContext(api_port=args.port)
        if args.mode is not None:
            context.mode = args.mode
        if args.seed is not None:
            context.seed = args.seed
        uvicorn.run(create_app(context=context), host="0.0.0.0", port=args.port, log_level="info")
        return

    # The reloader re-imports this module in a child process, which reads these
    if args.mode is not None:
        os.environ["CELLMASTER_MODE"] = args.mode
    if args.seed is not None:
        os.environ["CELLMASTER_SEED"] = str(args.seed)
    uvicorn.run("backend.main:app", host="0.0.0.0", port=args.port, reload=True, log_level="info")


if __name__ == "__main__":
    main()
