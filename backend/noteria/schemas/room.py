"""Room schemas.

Request bodies accept both the frontend's camelCase field names
(``parentRoom``) and snake_case. Length and emptiness checks happen in
RoomTreeService so that direct service callers get the same errors.
"""

from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from datetime import datetime
from typing import Optional, List


class RoomCreate(BaseModel):
    """Create a room, or a subroom when parent_id is given."""
    name: Optional[str] = None
    parent_id: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("parentRoom", "parent_id"),
    )


class RoomRename(BaseModel):
    """Rename a room."""
    name: Optional[str] = None


class RoomMove(BaseModel):
    """Move a room under a new parent. None makes it a root room."""
    parent_id: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("parentRoom", "parent_id"),
    )


class RoomResponse(BaseModel):
    """Room in API responses.

    Serialized under the keys the web client reads: ``_id``, ``user``,
    ``parentRoom``, ``createdAt`` and ``updatedAt``.
    """
    id: str = Field(alias="_id")
    name: str
    owner: str = Field(alias="user")
    parent_id: Optional[str] = Field(default=None, alias="parentRoom")
    path: List[str] = []
    created_at: datetime = Field(alias="createdAt")
    updated_at: datetime = Field(alias="updatedAt")

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)


class RoomEnvelope(BaseModel):
    message: str
    room: RoomResponse


class RoomListEnvelope(BaseModel):
    message: str
    rooms: List[RoomResponse]


class RoomDeleteResponse(BaseModel):
    """Outcome of a cascade delete."""
    message: str
    rooms_deleted: int
    notes_deleted: int
