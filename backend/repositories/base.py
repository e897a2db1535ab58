"""
Base repository class providing common database operations.

Repositories never commit. Services group repository calls inside
``repositories.transaction.transaction`` so a multi-step change is applied
atomically.
"""

from typing import Generic, TypeVar

from sqlalchemy.orm import Session

from repositories.database import Base

T = TypeVar("T", bound=Base)  # type: ignore[type-arg]


class BaseRepository(Generic[T]):
    """
    Base repository providing common CRUD operations.

    Type parameter T should be a SQLAlchemy model class.
    """

    def __init__(self, model: type[T], db: Session):
        """
        Initialize repository.

        Args:
            model: SQLAlchemy model class
            db: Database session
        """
        self.model = model
        self.db = db

    def get_by_id(self, id: int) -> T | None:
        """
        Get entity by ID.

        Args:
            id: Entity ID

        Returns:
            Entity if found, None otherwise
        """
        return self.db.query(self.model).filter(self.model.id == id).first()  # type: ignore[attr-defined]

    def add(self, entity: T) -> T:
        """
        Add entity to the session and flush so its id is assigned.

        Args:
            entity: Entity to add

        Returns:
            The same entity, now carrying its primary key
        """
        self.db.add(entity)
        self.db.flush()
        return entity

    def delete(self, entity: T) -> None:
        """Mark entity for deletion and flush."""
        self.db.delete(entity)
        self.db.flush()

    def flush(self) -> None:
        """Flush pending changes without committing."""
        self.db.flush()
