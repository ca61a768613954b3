"""API Routers."""
from . import frontend, translation

__all__ = [
    "frontend",
    "translation",
]
