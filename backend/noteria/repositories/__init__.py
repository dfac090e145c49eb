"""Data access repositories."""

from .base import OwnedRepository
from .room_repository import RoomRepository
from .note_repository import NoteRepository

__all__ = [
    "OwnedRepository",
    "RoomRepository",
    "NoteRepository",
]
