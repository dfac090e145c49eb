"""Database models."""

from .room import Room
from .note import Note

__all__ = ["Room", "Note"]
