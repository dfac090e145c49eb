"""Room model: a named container in a per-owner hierarchy."""

from datetime import datetime, timezone

from sqlalchemy import Column, Index, String, DateTime, JSON
from ..database import Base


# Owner ids are JWT subjects from the identity provider, not generated here.
OWNER_ID_MAX_LENGTH = 255


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Room(Base):
    """A room or subroom.

    ``parent_id`` is NULL for root rooms. ``path`` holds the ancestor ids
    from the root down to the immediate parent (self excluded) and is
    written whenever ``parent_id`` is. There are no foreign keys: the
    services keep rooms, subrooms and notes consistent.
    """

    __tablename__ = "rooms"
    __table_args__ = (
        Index("ix_rooms_owner_parent", "owner", "parent_id"),
        Index("ix_rooms_owner_created_at", "owner", "created_at"),
    )

    id = Column(String(50), primary_key=True)  # room-{uuid hex}
    name = Column(String(100), nullable=False)
    owner = Column(String(OWNER_ID_MAX_LENGTH), nullable=False)

    # Hierarchy
    parent_id = Column(String(50), nullable=True)
    path = Column(JSON, nullable=False, default=list)

    # Timestamps (client-side so ordering has sub-second resolution on SQLite)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)
