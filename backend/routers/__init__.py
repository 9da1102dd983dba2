"""API routers for the lab backend."""
