"""Backend package for the Cell Master lab API.

This package provides the FastAPI web server, the background tick and
autosave runner, and save-file persistence for the single lab session.
"""

__version__ = "0.1.0"
