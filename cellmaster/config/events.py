"""Random event (effect overlay) constants."""

EVENT_CHECK_INTERVAL = 10.0  # Real seconds between trigger attempts
DEFAULT_EVENT_DURATION = 60.0  # Seconds an event record stays active
EVENT_HISTORY_LIMIT = 50
