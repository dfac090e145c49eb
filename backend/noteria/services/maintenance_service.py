"""Orphan sweep: removes rooms and notes whose parent chain is broken.

Cascade deletes run inside one transaction, so they never leave orphans on
their own. Orphans can still appear when another process writes to the same
database without that guarantee; this sweep is the recovery path and is run
at startup.
"""

import logging
from dataclasses import dataclass

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..exceptions import DatabaseError
from ..repositories.note_repository import NoteRepository
from ..repositories.room_repository import RoomRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SweepResult:
    rooms: int
    notes: int


def sweep_orphans(db: Session) -> SweepResult:
    """Delete orphaned subrooms (with their subtrees), then notes without a room."""
    rooms = RoomRepository(db)
    notes = NoteRepository(db)

    try:
        rooms_deleted = 0
        for orphan in rooms.list_orphans():
            subtree = rooms.collect_subtree_ids(orphan.owner, orphan.id)
            rooms_deleted += rooms.delete_owned_many(orphan.owner, subtree)
        notes_deleted = notes.delete_orphans()
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        raise DatabaseError("Orphan sweep failed", original_error=e) from e

    if rooms_deleted or notes_deleted:
        logger.info(
            "Orphan sweep removed records",
            extra={"rooms_deleted": rooms_deleted, "notes_deleted": notes_deleted},
        )
    return SweepResult(rooms=rooms_deleted, notes=notes_deleted)
