"""API routes."""

from .rooms import router as rooms_router
from .notes import router as notes_router

__all__ = [
    "rooms_router",
    "notes_router",
]
