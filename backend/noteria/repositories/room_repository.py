"""Repository for room queries: roots, children, subtrees, orphans."""

from typing import Dict, List

from sqlalchemy import exists
from sqlalchemy.orm import aliased

from .base import OwnedRepository, chunked
from ..exceptions import RoomNotFoundError
from ..models.room import Room


class RoomRepository(OwnedRepository[Room]):
    """Data access layer for rooms. Root rooms are exactly ``parent_id IS NULL``."""

    model_class = Room
    not_found_error = RoomNotFoundError

    def list_all(self, owner: str) -> List[Room]:
        return self._owned_query(owner).order_by(Room.created_at.desc()).all()

    def list_roots(self, owner: str) -> List[Room]:
        return (
            self._owned_query(owner)
            .filter(Room.parent_id.is_(None))
            .order_by(Room.created_at.desc())
            .all()
        )

    def list_children(self, owner: str, parent_id: str) -> List[Room]:
        return (
            self._owned_query(owner)
            .filter(Room.parent_id == parent_id)
            .order_by(Room.created_at.desc())
            .all()
        )

    def get_many(self, owner: str, room_ids: List[str]) -> Dict[str, Room]:
        """Load several rooms at once, keyed by id. Missing ids are left out."""
        found: Dict[str, Room] = {}
        for batch in chunked(room_ids):
            for room in self._owned_query(owner).filter(Room.id.in_(batch)).all():
                found[room.id] = room
        return found

    def collect_subtree_ids(self, owner: str, room_id: str) -> List[str]:
        """Ids of a room and all its descendants, breadth-first, root first.

        Walks ``parent_id`` links level by level with an explicit worklist.
        A visited set stops the walk if the stored links ever form a cycle.
        """
        ordered: List[str] = [room_id]
        seen = {room_id}
        frontier = [room_id]
        while frontier:
            next_frontier: List[str] = []
            for batch in chunked(frontier):
                rows = (
                    self.db.query(Room.id)
                    .filter(Room.owner == owner, Room.parent_id.in_(batch))
                    .order_by(Room.created_at)
                    .all()
                )
                for (child_id,) in rows:
                    if child_id in seen:
                        continue
                    seen.add(child_id)
                    ordered.append(child_id)
                    next_frontier.append(child_id)
            frontier = next_frontier
        return ordered

    def list_orphans(self) -> List[Room]:
        """Rooms (any owner) whose parent_id points at a room that no longer exists."""
        parent = aliased(Room)
        return (
            self.db.query(Room)
            .filter(
                Room.parent_id.isnot(None),
                ~exists().where(parent.id == Room.parent_id).correlate(Room),
            )
            .all()
        )

    def count(self) -> int:
        return self.db.query(Room).count()
