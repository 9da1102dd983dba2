"""Session, tick engine, player actions and snapshots."""

from cellmaster.simulation.actions import LabActions
from cellmaster.simulation.engine import LabEngine, TickReport
from cellmaster.simulation.phases import TickPhase
from cellmaster.simulation.session import LabSession
from cellmaster.simulation.snapshot import capture_session, restore_session

__all__ = [
    "LabActions",
    "LabEngine",
    "LabSession",
    "TickPhase",
    "TickReport",
    "capture_session",
    "restore_session",
]
