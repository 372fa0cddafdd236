"""Role administration use cases."""
