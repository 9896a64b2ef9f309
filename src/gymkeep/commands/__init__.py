"""CLI commands for gymkeep."""

from .gyms import create_gym, create_superadmin, list_gyms, seed_demo
from .init import init
from .serve import serve

__all__ = [
    "create_gym",
    "create_superadmin",
    "init",
    "list_gyms",
    "seed_demo",
    "serve",
]
