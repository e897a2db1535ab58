"""
User repository for database operations.
"""

from typing import Optional

from sqlalchemy.orm import Session

import repositories.db_models as db_models
from .base import BaseRepository


class UserRepository(BaseRepository[db_models.User]):
    """Repository for User entity database operations."""

    def __init__(self, db: Session):
        """
        Initialize user repository.

        Args:
            db: Database session
        """
        super().__init__(db_models.User, db)

    def get_by_email(self, email: str) -> Optional[db_models.User]:
        """
        Get user by email.

        Callers pass the normalized (trimmed, lowercased) address.

        Args:
            email: User email

        Returns:
            User if found, None otherwise
        """
        return (
            self.db.query(db_models.User).filter(db_models.User.email == email).first()
        )

    def email_exists(self, email: str) -> bool:
        """Check if a normalized email is already registered."""
        return (
            self.db.query(db_models.User.id)
            .filter(db_models.User.email == email)
            .first()
            is not None
        )

    def count_members(self) -> int:
        """Count users that belong to the community."""
        return (
            self.db.query(db_models.User)
            .filter(db_models.User.community_id.isnot(None))
            .count()
        )

    def get_members(self) -> list[db_models.User]:
        """
        List community members, newest first then alphabetically.

        Returns:
            Users ordered by join date desc, last name, first name
        """
        return (
            self.db.query(db_models.User)
            .filter(db_models.User.community_id.isnot(None))
            .order_by(
                db_models.User.date_joined.desc(),
                db_models.User.last_name,
                db_models.User.first_name,
            )
            .all()
        )
