"""Repository for note queries and bulk deletes."""

from typing import Iterable, List

from sqlalchemy import exists

from .base import OwnedRepository, chunked
from ..exceptions import NoteNotFoundError
from ..models.note import Note
from ..models.room import Room


class NoteRepository(OwnedRepository[Note]):
    """Data access layer for notes."""

    model_class = Note
    not_found_error = NoteNotFoundError

    def list_all(self, owner: str) -> List[Note]:
        return self._owned_query(owner).order_by(Note.created_at.desc()).all()

    def list_by_room(self, owner: str, room_id: str) -> List[Note]:
        return (
            self._owned_query(owner)
            .filter(Note.room_id == room_id)
            .order_by(Note.created_at.desc())
            .all()
        )

    def delete_by_rooms(self, owner: str, room_ids: Iterable[str]) -> int:
        """Bulk-delete an owner's notes in any of the given rooms. Returns rows removed."""
        deleted = 0
        for batch in chunked(room_ids):
            deleted += (
                self._owned_query(owner)
                .filter(Note.room_id.in_(batch))
                .delete(synchronize_session=False)
            )
        return deleted

    def delete_orphans(self) -> int:
        """Delete notes (any owner) whose room no longer exists."""
        return (
            self.db.query(Note)
            .filter(~exists().where(Room.id == Note.room_id).correlate(Note))
            .delete(synchronize_session=False)
        )

    def count(self) -> int:
        return self.db.query(Note).count()
