"""Permission override use cases."""
