"""Process-local caches."""
