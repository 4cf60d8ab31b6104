"""Session token helpers and routes."""
