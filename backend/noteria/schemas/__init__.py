"""Pydantic schemas for API validation."""

from .room import (
    RoomCreate,
    RoomRename,
    RoomMove,
    RoomResponse,
    RoomEnvelope,
    RoomListEnvelope,
    RoomDeleteResponse,
)
from .note import (
    NoteCreate,
    NoteUpdate,
    NoteResponse,
    NoteEnvelope,
    NoteListEnvelope,
    MessageResponse,
)

__all__ = [
    "RoomCreate",
    "RoomRename",
    "RoomMove",
    "RoomResponse",
    "RoomEnvelope",
    "RoomListEnvelope",
    "RoomDeleteResponse",
    "NoteCreate",
    "NoteUpdate",
    "NoteResponse",
    "NoteEnvelope",
    "NoteListEnvelope",
    "MessageResponse",
]
