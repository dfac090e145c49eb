"""Note model."""

from sqlalchemy import Column, Index, String, Text, DateTime
from ..database import Base
from .room import OWNER_ID_MAX_LENGTH, utcnow


class Note(Base):
    """A note scoped to one room and one owner.

    ``room_id`` must name a room with the same owner; the note service
    checks this before every insert.
    """

    __tablename__ = "notes"
    __table_args__ = (
        Index("ix_notes_owner_room", "owner", "room_id"),
        Index("ix_notes_owner_created_at", "owner", "created_at"),
    )

    id = Column(String(50), primary_key=True)  # note-{uuid hex}
    title = Column(String(200), nullable=False)
    content = Column(Text, nullable=False, default="")
    room_id = Column(String(50), nullable=False)
    owner = Column(String(OWNER_ID_MAX_LENGTH), nullable=False)

    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)
