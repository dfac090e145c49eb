"""Service for the room hierarchy: create, rename, list, move, cascade delete."""

import logging
import uuid
from dataclasses import dataclass
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..exceptions import CircularReferenceError, DatabaseError, ValidationError
from ..models.room import Room, utcnow
from ..repositories.room_repository import RoomRepository
from .note_service import NoteService

logger = logging.getLogger(__name__)

MAX_ROOM_NAME_LENGTH = 100


@dataclass(frozen=True)
class SubtreeDeleteResult:
    """Counts of records removed by one cascade delete."""
    rooms_deleted: int
    notes_deleted: int


def clean_room_name(name: Optional[str]) -> str:
    """Trim a room name and enforce the non-empty / length rules."""
    if name is None:
        raise ValidationError("Room name is required", field="name")
    cleaned = name.strip()
    if not cleaned:
        raise ValidationError("Room name cannot be empty", field="name")
    if len(cleaned) > MAX_ROOM_NAME_LENGTH:
        raise ValidationError(
            f"Room name cannot exceed {MAX_ROOM_NAME_LENGTH} characters", field="name"
        )
    return cleaned


class RoomTreeService:
    """Business logic for the per-owner room tree.

    Invariant: for every room with a parent, ``path == parent.path + [parent.id]``;
    root rooms have ``parent_id`` NULL and an empty path.

    Public methods:
        create_room     -- create a root room or a subroom (computes path)
        rename_room     -- change the name only
        get_room        -- owner-scoped lookup
        list_rooms      -- every room of the owner
        list_children   -- roots, or direct children of a parent
        get_breadcrumb  -- ancestors then the room itself, root first
        move_room       -- reparent, rejecting cycles, rewriting subtree paths
        delete_subtree  -- room + descendants + their notes, one transaction
    """

    def __init__(self, db: Session):
        self.db = db
        self.repo = RoomRepository(db)
        self.notes = NoteService(db)

    def create_room(self, owner: str, name: Optional[str], parent_id: Optional[str] = None) -> Room:
        """Create a room. When parent_id is given the parent must belong to owner."""
        name = clean_room_name(name)
        parent_id = parent_id or None

        path: List[str] = []
        if parent_id is not None:
            parent = self.repo.get_owned(owner, parent_id)
            path = list(parent.path or []) + [parent.id]

        room = self.repo.add(Room(
            id=self._generate_room_id(),
            name=name,
            owner=owner,
            parent_id=parent_id,
            path=path,
        ))
        self.db.commit()
        self.db.refresh(room)
        logger.info(
            "Room created",
            extra={"room_id": room.id, "owner": owner, "parent_id": parent_id, "depth": len(path)},
        )
        return room

    def rename_room(self, owner: str, room_id: str, name: Optional[str]) -> Room:
        """Rename a room. parent_id and path are untouched."""
        name = clean_room_name(name)
        room = self.repo.get_owned(owner, room_id)
        room.name = name
        room.updated_at = utcnow()
        self.db.commit()
        self.db.refresh(room)
        logger.info("Room renamed", extra={"room_id": room.id, "owner": owner})
        return room

    def get_room(self, owner: str, room_id: str) -> Room:
        return self.repo.get_owned(owner, room_id)

    def list_rooms(self, owner: str) -> List[Room]:
        return self.repo.list_all(owner)

    def list_children(self, owner: str, parent_id: Optional[str] = None) -> List[Room]:
        """Root rooms when parent_id is omitted, otherwise the parent's direct children.

        Newest first. Raises RoomNotFoundError if the parent is not the owner's.
        """
        if not parent_id:
            return self.repo.list_roots(owner)
        self.repo.get_owned(owner, parent_id)
        return self.repo.list_children(owner, parent_id)

    def get_breadcrumb(self, owner: str, room_id: str) -> List[Room]:
        """Ancestors listed in ``path`` followed by the room itself.

        Ancestors that have since disappeared are skipped rather than failing
        the whole lookup.
        """
        room = self.repo.get_owned(owner, room_id)
        path = list(room.path or [])
        ancestors = self.repo.get_many(owner, path)
        chain = [ancestors[ancestor_id] for ancestor_id in path if ancestor_id in ancestors]
        chain.append(room)
        return chain

    def move_room(self, owner: str, room_id: str, new_parent_id: Optional[str]) -> Room:
        """Move a room (with its subtree) under new_parent_id, or to the root level.

        Rejects a target that is the room itself or one of its descendants.
        Paths of the room and every descendant are rewritten in the same
        transaction.
        """
        room = self.repo.get_owned(owner, room_id)
        new_parent_id = new_parent_id or None
        if new_parent_id == room.parent_id:
            return room

        subtree_ids = self.repo.collect_subtree_ids(owner, room.id)
        new_path: List[str] = []
        if new_parent_id is not None:
            parent = self.repo.get_owned(owner, new_parent_id)
            if parent.id in subtree_ids or room.id in (parent.path or []):
                raise CircularReferenceError(room.id, parent.id)
            new_path = list(parent.path or []) + [parent.id]

        room.parent_id = new_parent_id
        room.path = new_path
        room.updated_at = utcnow()

        # Breadth-first order guarantees each parent's path is final before its children.
        by_id = self.repo.get_many(owner, subtree_ids)
        by_id[room.id] = room
        for descendant_id in subtree_ids[1:]:
            descendant = by_id.get(descendant_id)
            if descendant is None:
                continue
            parent_room = by_id.get(descendant.parent_id)
            if parent_room is None:
                continue
            descendant.path = list(parent_room.path) + [parent_room.id]

        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise DatabaseError("Failed to move room", original_error=e) from e

        self.db.refresh(room)
        logger.info(
            "Room moved",
            extra={
                "room_id": room.id,
                "owner": owner,
                "parent_id": new_parent_id,
                "subtree_size": len(subtree_ids),
            },
        )
        return room

    def delete_subtree(self, owner: str, room_id: str) -> SubtreeDeleteResult:
        """Delete a room, all its descendant rooms, and every note they hold.

        The subtree is collected into an explicit worklist, then the notes of
        every room in it and the rooms themselves are bulk-deleted by id
        inside a single transaction. Rooms or notes that a concurrent request
        already removed are simply not counted. On a store failure everything
        is rolled back, so a retry starts from an intact tree.

        Raises RoomNotFoundError only when the root itself is missing.
        """
        self.repo.get_owned(owner, room_id)
        worklist = self.repo.collect_subtree_ids(owner, room_id)

        try:
            notes_deleted = self.notes.delete_by_rooms(owner, worklist, commit=False)
            rooms_deleted = self.repo.delete_owned_many(owner, worklist)
            if rooms_deleted < len(worklist):
                logger.debug(
                    "Rooms already gone during cascade",
                    extra={"room_id": room_id, "owner": owner, "missing": len(worklist) - rooms_deleted},
                )
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(
                "Cascade delete rolled back",
                extra={"room_id": room_id, "owner": owner},
                exc_info=True,
            )
            raise DatabaseError("Failed to delete room", original_error=e) from e

        logger.info(
            "Room subtree deleted",
            extra={
                "room_id": room_id,
                "owner": owner,
                "rooms_deleted": rooms_deleted,
                "notes_deleted": notes_deleted,
            },
        )
        return SubtreeDeleteResult(rooms_deleted=rooms_deleted, notes_deleted=notes_deleted)

    @staticmethod
    def _generate_room_id() -> str:
        return f"room-{uuid.uuid4().hex}"
