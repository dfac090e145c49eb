"""Service for owner-scoped note CRUD."""

import logging
import uuid
from typing import List, Optional

from sqlalchemy.orm import Session

from ..exceptions import ValidationError
from ..models.note import Note
from ..models.room import utcnow
from ..repositories.note_repository import NoteRepository
from ..repositories.room_repository import RoomRepository
from ..schemas.note import NoteUpdate

logger = logging.getLogger(__name__)

DEFAULT_NOTE_TITLE = "Untitled Note"
MAX_NOTE_TITLE_LENGTH = 200


def clean_note_title(title: Optional[str]) -> str:
    """Blank titles fall back to the placeholder; long ones are rejected."""
    cleaned = (title or "").strip()
    if not cleaned:
        return DEFAULT_NOTE_TITLE
    if len(cleaned) > MAX_NOTE_TITLE_LENGTH:
        raise ValidationError(
            f"Note title cannot exceed {MAX_NOTE_TITLE_LENGTH} characters", field="title"
        )
    return cleaned


class NoteService:
    """Business logic for notes. Every note lives in a room of the same owner."""

    def __init__(self, db: Session):
        self.db = db
        self.repo = NoteRepository(db)
        self.rooms = RoomRepository(db)

    def create_note(
        self,
        owner: str,
        room_id: Optional[str],
        title: Optional[str] = None,
        content: Optional[str] = None,
    ) -> Note:
        """Create a note in one of owner's rooms.

        Raises ValidationError when room_id is missing and RoomNotFoundError
        when the room is not owner's. Nothing is written in either case.
        """
        if not room_id or not room_id.strip():
            raise ValidationError("Room reference is required", field="roomId")
        title = clean_note_title(title)
        room = self.rooms.get_owned(owner, room_id)

        note = self.repo.add(Note(
            id=self._generate_note_id(),
            title=title,
            content=content if content is not None else "",
            room_id=room.id,
            owner=owner,
        ))
        self.db.commit()
        self.db.refresh(note)
        logger.info("Note created", extra={"note_id": note.id, "room_id": room.id, "owner": owner})
        return note

    def get_note(self, owner: str, note_id: str) -> Note:
        return self.repo.get_owned(owner, note_id)

    def list_by_room(self, owner: str, room_id: str) -> List[Note]:
        return self.repo.list_by_room(owner, room_id)

    def list_all(self, owner: str) -> List[Note]:
        return self.repo.list_all(owner)

    def update_note(self, owner: str, note_id: str, update_data: NoteUpdate) -> Note:
        """Apply a partial update. Only fields that were supplied change.

        An explicit empty content clears it; an explicit blank title resets it
        to the placeholder.
        """
        note = self.repo.get_owned(owner, note_id)
        changes = update_data.model_dump(exclude_unset=True, exclude_none=True)

        if "title" in changes:
            note.title = clean_note_title(changes["title"])
        if "content" in changes:
            note.content = changes["content"]

        if changes:
            note.updated_at = utcnow()
            self.db.commit()
            self.db.refresh(note)
            logger.info(
                "Note updated",
                extra={"note_id": note.id, "owner": owner, "fields": sorted(changes)},
            )
        return note

    def delete_note(self, owner: str, note_id: str) -> None:
        note = self.repo.get_owned(owner, note_id)
        self.db.delete(note)
        self.db.commit()
        logger.info("Note deleted", extra={"note_id": note_id, "owner": owner})

    def delete_by_room(self, owner: str, room_id: str, commit: bool = True) -> int:
        """Bulk-delete owner's notes in a room without loading them. Returns the count."""
        return self.delete_by_rooms(owner, [room_id], commit=commit)

    def delete_by_rooms(self, owner: str, room_ids: List[str], commit: bool = True) -> int:
        deleted = self.repo.delete_by_rooms(owner, room_ids)
        if commit:
            self.db.commit()
        return deleted

    @staticmethod
    def _generate_note_id() -> str:
        return f"note-{uuid.uuid4().hex}"
