"""Permission query use cases."""
