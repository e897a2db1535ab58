"""
Post repository for database operations.
"""

from typing import Any, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

import repositories.db_models as db_models
from .base import BaseRepository


class PostRepository(BaseRepository[db_models.Post]):
    """Repository for Post entity database operations."""

    def __init__(self, db: Session):
        """
        Initialize post repository.

        Args:
            db: Database session
        """
        super().__init__(db_models.Post, db)

    def _with_author_and_counts(self):  # type: ignore[no-untyped-def]
        like_counts = (
            self.db.query(
                db_models.Like.post_id.label("post_id"),
                func.count(db_models.Like.id).label("like_count"),
            )
            .filter(db_models.Like.post_id.isnot(None))
            .group_by(db_models.Like.post_id)
            .subquery()
        )
        comment_counts = (
            self.db.query(
                db_models.Comment.post_id.label("post_id"),
                func.count(db_models.Comment.id).label("comment_count"),
            )
            .group_by(db_models.Comment.post_id)
            .subquery()
        )
        return (
            self.db.query(
                db_models.Post,
                db_models.User.first_name,
                db_models.User.last_name,
                db_models.User.job_title,
                func.coalesce(like_counts.c.like_count, 0),
                func.coalesce(comment_counts.c.comment_count, 0),
            )
            .join(db_models.User, db_models.Post.user_id == db_models.User.id)
            .outerjoin(like_counts, like_counts.c.post_id == db_models.Post.id)
            .outerjoin(comment_counts, comment_counts.c.post_id == db_models.Post.id)
        )

    def list_with_authors(
        self, skip: int = 0, limit: int = 100
    ) -> list[tuple[Any, ...]]:
        """
        List posts newest first with author fields and counts.

        Returns:
            Tuples of (post, first_name, last_name, job_title, like_count,
            comment_count)
        """
        return (
            self._with_author_and_counts()
            .order_by(db_models.Post.created_at.desc(), db_models.Post.id.desc())
            .offset(skip)
            .limit(limit)
            .all()
        )

    def get_with_author(self, post_id: int) -> Optional[tuple[Any, ...]]:
        """Same tuple shape as list_with_authors for a single post."""
        return (
            self._with_author_and_counts()
            .filter(db_models.Post.id == post_id)
            .first()
        )

    def delete_by_id(self, post_id: int) -> int:
        """
        Delete a post row.

        Returns:
            Number of rows deleted (0 when the post does not exist)
        """
        return (
            self.db.query(db_models.Post)
            .filter(db_models.Post.id == post_id)
            .delete(synchronize_session=False)
        )

    def count_with_image(self, image_path: str) -> int:
        """Number of posts that reference an uploaded image file."""
        return (
            self.db.query(db_models.Post)
            .filter(db_models.Post.image_path == image_path)
            .count()
        )
