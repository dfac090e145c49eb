"""Base repository with the owner-scoped get-by-ID pattern.

Every lookup of a room or note goes through ``get_owned`` so that a record
belonging to someone else is indistinguishable from a missing one.
Subclasses specify model_class, id_column, owner_column and
not_found_error; the base provides the common implementations.
"""

from typing import Generic, Iterable, Iterator, List, Optional, Type, TypeVar
from sqlalchemy.orm import Session, Query

from ..database import Base
from ..exceptions import NoteriaException

ModelT = TypeVar("ModelT", bound=Base)

# Keeps IN (...) lists under SQLite's bound-parameter limit.
IN_CLAUSE_CHUNK = 500


def chunked(ids: Iterable[str], size: int = IN_CLAUSE_CHUNK) -> Iterator[List[str]]:
    batch: List[str] = []
    for entity_id in ids:
        batch.append(entity_id)
        if len(batch) >= size:
            yield batch
            batch = []
    if batch:
        yield batch


class OwnedRepository(Generic[ModelT]):
    """Shared repository logic for models scoped to an owner.

    Class variables to set in subclasses:
        model_class:     The SQLAlchemy model (e.g., Room)
        id_column:       Name of the primary-key column (default "id")
        owner_column:    Name of the owner column (default "owner")
        not_found_error: Exception class raised by get_owned
    """

    model_class: Type[ModelT]
    id_column: str = "id"
    owner_column: str = "owner"
    not_found_error: Type[NoteriaException]

    def __init__(self, db: Session):
        self.db = db

    def _owned_query(self, owner: str) -> Query:
        """Query restricted to one owner's records."""
        col = getattr(self.model_class, self.owner_column)
        return self.db.query(self.model_class).filter(col == owner)

    def get_owned(self, owner: str, entity_id: Optional[str]) -> ModelT:
        """Get an owner's entity by primary key. Raises not_found_error otherwise."""
        entity = self.get_owned_optional(owner, entity_id)
        if entity is None:
            raise self.not_found_error(entity_id or "")
        return entity

    def get_owned_optional(self, owner: str, entity_id: Optional[str]) -> Optional[ModelT]:
        """Get an owner's entity by primary key, or None."""
        if not entity_id:
            return None
        col = getattr(self.model_class, self.id_column)
        return self._owned_query(owner).filter(col == entity_id).first()

    def add(self, entity: ModelT) -> ModelT:
        self.db.add(entity)
        self.db.flush()
        self.db.refresh(entity)
        return entity

    def delete_owned_many(self, owner: str, entity_ids: Iterable[str]) -> int:
        """Bulk-delete an owner's entities by id without loading them.

        Ids that no longer exist (or belong to someone else) are skipped.
        Returns the number of rows removed.
        """
        col = getattr(self.model_class, self.id_column)
        deleted = 0
        for batch in chunked(entity_ids):
            deleted += (
                self._owned_query(owner)
                .filter(col.in_(batch))
                .delete(synchronize_session=False)
            )
        return deleted
