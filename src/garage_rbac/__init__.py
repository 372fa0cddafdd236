"""garage-rbac - permission resolution for multi-tenant auto-repair shops."""

__version__ = "0.1.0"
