"""Tick phase definitions.

A tick always runs its phases in this order, so every subsystem observes
the state left behind by the phases before it:

    CLOCK -> OVERLAY -> INCUBATOR -> TASKS -> EVENTS -> EFFECTS -> BANKRUPTCY -> NOTIFY

The overlay snapshot is taken before any subsystem moves, so an event
triggered during EVENTS first influences growth and deadlines on the next
tick. Domain events raised during the tick are queued and only dispatched
at NOTIFY.
"""

from enum import Enum, auto


class TickPhase(Enum):
    """Phases of a lab tick, in execution order."""

    CLOCK = auto()  # Advance game clock and incubator wall clock
    OVERLAY = auto()  # Fold active random events into one snapshot
    INCUBATOR = auto()  # Grow cultures, roll contamination
    TASKS = auto()  # Count deadlines down, charge expiry penalties
    EVENTS = auto()  # Sweep expired events, roll new ones
    EFFECTS = auto()  # Apply one-shot event effects
    BANKRUPTCY = auto()  # Check liquid assets
    NOTIFY = auto()  # Dispatch queued domain events

