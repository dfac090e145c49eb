"""Note schemas."""

from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from datetime import datetime
from typing import Optional, List


class NoteCreate(BaseModel):
    """Create a note in a room. A missing room_id is reported as a 400 by the service."""
    title: Optional[str] = None
    content: Optional[str] = None
    room_id: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("roomId", "room_id"),
    )


class NoteUpdate(BaseModel):
    """Partial update: fields left out (or null) keep their stored value."""
    title: Optional[str] = None
    content: Optional[str] = None


class NoteResponse(BaseModel):
    """Note in API responses, keyed like RoomResponse. ``room`` holds the room id."""
    id: str = Field(alias="_id")
    title: str
    content: str
    room_id: str = Field(alias="room")
    owner: str = Field(alias="user")
    created_at: datetime = Field(alias="createdAt")
    updated_at: datetime = Field(alias="updatedAt")

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)


class NoteEnvelope(BaseModel):
    message: str
    note: NoteResponse


class NoteListEnvelope(BaseModel):
    message: str
    notes: List[NoteResponse]


class MessageResponse(BaseModel):
    message: str
