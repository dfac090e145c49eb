"""Note API. Every endpoint is scoped to the authenticated owner."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..core.auth import AuthContext, require_auth
from ..database import get_db
from ..schemas.note import (
    NoteCreate,
    NoteUpdate,
    NoteResponse,
    NoteEnvelope,
    NoteListEnvelope,
    MessageResponse,
)
from ..services.note_service import NoteService

router = APIRouter(prefix="/api/notes", tags=["notes"])


def _notes(message: str, notes) -> NoteListEnvelope:
    return NoteListEnvelope(
        message=message,
        notes=[NoteResponse.model_validate(note) for note in notes],
    )


@router.post("", response_model=NoteEnvelope, status_code=201)
def create_note(
    data: NoteCreate,
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(require_auth),
):
    """Create a note in one of the caller's rooms. ``roomId`` is required."""
    note = NoteService(db).create_note(auth.user_id, data.room_id, data.title, data.content)
    return NoteEnvelope(message="Note created successfully", note=NoteResponse.model_validate(note))


@router.get("", response_model=NoteListEnvelope)
def list_notes(
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(require_auth),
):
    return _notes("Notes retrieved successfully", NoteService(db).list_all(auth.user_id))


@router.get("/room/{room_id}", response_model=NoteListEnvelope)
def list_room_notes(
    room_id: str,
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(require_auth),
):
    """Notes of one room, newest first. Unknown rooms yield an empty list."""
    return _notes("Notes retrieved successfully", NoteService(db).list_by_room(auth.user_id, room_id))


@router.put("/{note_id}", response_model=NoteEnvelope)
def update_note(
    note_id: str,
    data: NoteUpdate,
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(require_auth),
):
    """Partial update of title and/or content."""
    note = NoteService(db).update_note(auth.user_id, note_id, data)
    return NoteEnvelope(message="Note updated successfully", note=NoteResponse.model_validate(note))


@router.delete("/{note_id}", response_model=MessageResponse)
def delete_note(
    note_id: str,
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(require_auth),
):
    NoteService(db).delete_note(auth.user_id, note_id)
    return MessageResponse(message="Note deleted successfully")
