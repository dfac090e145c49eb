"""Room API: create, list, get, breadcrumb, rename, move, cascade delete.

Every endpoint is scoped to the authenticated owner. ``/root`` and
``/parent/{parent_id}`` are declared before ``/{room_id}`` so they are not
captured as room ids.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..core.auth import AuthContext, require_auth
from ..database import get_db
from ..schemas.room import (
    RoomCreate,
    RoomRename,
    RoomMove,
    RoomResponse,
    RoomEnvelope,
    RoomListEnvelope,
    RoomDeleteResponse,
)
from ..services.room_tree_service import RoomTreeService

router = APIRouter(prefix="/api/rooms", tags=["rooms"])


def _rooms(message: str, rooms) -> RoomListEnvelope:
    return RoomListEnvelope(
        message=message,
        rooms=[RoomResponse.model_validate(room) for room in rooms],
    )


@router.post("", response_model=RoomEnvelope, status_code=201)
def create_room(
    data: RoomCreate,
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(require_auth),
):
    """Create a room, or a subroom when ``parentRoom`` is given."""
    room = RoomTreeService(db).create_room(auth.user_id, data.name, data.parent_id)
    return RoomEnvelope(message="Room created successfully", room=RoomResponse.model_validate(room))


@router.get("", response_model=RoomListEnvelope)
def list_rooms(
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(require_auth),
):
    """Every room of the caller, newest first."""
    return _rooms("Rooms retrieved successfully", RoomTreeService(db).list_rooms(auth.user_id))


@router.get("/root", response_model=RoomListEnvelope)
def list_root_rooms(
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(require_auth),
):
    """Rooms without a parent, newest first."""
    rooms = RoomTreeService(db).list_children(auth.user_id)
    return _rooms("Root rooms retrieved successfully", rooms)


@router.get("/parent/{parent_id}", response_model=RoomListEnvelope)
def list_subrooms(
    parent_id: str,
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(require_auth),
):
    """Direct children of a room. 404 if the parent is not the caller's."""
    rooms = RoomTreeService(db).list_children(auth.user_id, parent_id)
    return _rooms("Subrooms retrieved successfully", rooms)


@router.get("/{room_id}", response_model=RoomEnvelope)
def get_room(
    room_id: str,
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(require_auth),
):
    room = RoomTreeService(db).get_room(auth.user_id, room_id)
    return RoomEnvelope(message="Room retrieved successfully", room=RoomResponse.model_validate(room))


@router.get("/{room_id}/breadcrumb", response_model=RoomListEnvelope)
def get_breadcrumb(
    room_id: str,
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(require_auth),
):
    """Ancestor chain from the root down to and including the room."""
    chain = RoomTreeService(db).get_breadcrumb(auth.user_id, room_id)
    return _rooms("Breadcrumb retrieved successfully", chain)


@router.put("/{room_id}", response_model=RoomEnvelope)
def rename_room(
    room_id: str,
    data: RoomRename,
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(require_auth),
):
    room = RoomTreeService(db).rename_room(auth.user_id, room_id, data.name)
    return RoomEnvelope(message="Room updated successfully", room=RoomResponse.model_validate(room))


@router.put("/{room_id}/move", response_model=RoomEnvelope)
def move_room(
    room_id: str,
    data: RoomMove,
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(require_auth),
):
    """Reparent a room. A null ``parentRoom`` makes it a root room."""
    room = RoomTreeService(db).move_room(auth.user_id, room_id, data.parent_id)
    return RoomEnvelope(message="Room moved successfully", room=RoomResponse.model_validate(room))


@router.delete("/{room_id}", response_model=RoomDeleteResponse)
def delete_room(
    room_id: str,
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(require_auth),
):
    """Delete a room together with all its subrooms and their notes."""
    result = RoomTreeService(db).delete_subtree(auth.user_id, room_id)
    return RoomDeleteResponse(
        message="Room deleted successfully",
        rooms_deleted=result.rooms_deleted,
        notes_deleted=result.notes_deleted,
    )
