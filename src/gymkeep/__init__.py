"""gymkeep: multi-tenant gym management."""

__version__ = "0.1.0"
