"""Permission checker adapter."""
