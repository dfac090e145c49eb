"""Business logic services."""

from .note_service import NoteService
from .room_tree_service import RoomTreeService

__all__ = ["NoteService", "RoomTreeService"]
