"""
Comment repository for database operations.
"""

from typing import Any, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

import repositories.db_models as db_models
from .base import BaseRepository


class CommentRepository(BaseRepository[db_models.Comment]):
    """Repository for Comment entity database operations."""

    def __init__(self, db: Session):
        """
        Initialize comment repository.

        Args:
            db: Database session
        """
        super().__init__(db_models.Comment, db)

    def _with_author_and_likes(self):  # type: ignore[no-untyped-def]
        like_counts = (
            self.db.query(
                db_models.Like.comment_id.label("comment_id"),
                func.count(db_models.Like.id).label("like_count"),
            )
            .filter(db_models.Like.comment_id.isnot(None))
            .group_by(db_models.Like.comment_id)
            .subquery()
        )
        return (
            self.db.query(
                db_models.Comment,
                db_models.User.first_name,
                db_models.User.last_name,
                db_models.User.job_title,
                func.coalesce(like_counts.c.like_count, 0),
            )
            .join(db_models.User, db_models.Comment.user_id == db_models.User.id)
            .outerjoin(like_counts, like_counts.c.comment_id == db_models.Comment.id)
        )

    def list_for_post(self, post_id: int) -> list[tuple[Any, ...]]:
        """
        List comments on a post, oldest first.

        Returns:
            Tuples of (comment, first_name, last_name, job_title, like_count)
        """
        return (
            self._with_author_and_likes()
            .filter(db_models.Comment.post_id == post_id)
            .order_by(db_models.Comment.created_at, db_models.Comment.id)
            .all()
        )

    def get_with_author(self, comment_id: int) -> Optional[tuple[Any, ...]]:
        return (
            self._with_author_and_likes()
            .filter(db_models.Comment.id == comment_id)
            .first()
        )

    def get_ids_for_post(self, post_id: int) -> list[int]:
        rows = (
            self.db.query(db_models.Comment.id)
            .filter(db_models.Comment.post_id == post_id)
            .all()
        )
        return [row.id for row in rows]

    def delete_for_post(self, post_id: int) -> int:
        """Delete every comment on a post. Returns the number removed."""
        return (
            self.db.query(db_models.Comment)
            .filter(db_models.Comment.post_id == post_id)
            .delete(synchronize_session=False)
        )

    def delete_by_id(self, comment_id: int) -> int:
        return (
            self.db.query(db_models.Comment)
            .filter(db_models.Comment.id == comment_id)
            .delete(synchronize_session=False)
        )
