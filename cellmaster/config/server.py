"""Server configuration constants."""

DEFAULT_API_PORT = 8000  # Default port for FastAPI backend
DEFAULT_DATA_DIR = "data/saves"  # Where the lab save file lives
NOTIFICATION_LIMIT = 100  # Domain events kept for polling clients
