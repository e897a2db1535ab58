"""Repository for like operations on posts and comments."""

from typing import Any, Optional

from sqlalchemy.orm import Session

import repositories.db_models as db_models
from repositories.base import BaseRepository


class LikeRepository(BaseRepository[db_models.Like]):
    """Repository for Like CRUD operations."""

    def __init__(self, db: Session):
        """
        Initialize like repository.

        Args:
            db: Database session
        """
        super().__init__(db_models.Like, db)

    def get_for_target(
        self,
        user_id: int,
        post_id: Optional[int] = None,
        comment_id: Optional[int] = None,
    ) -> Optional[db_models.Like]:
        """
        Get a user's like on a post or a comment.

        Exactly one of post_id and comment_id is expected.

        Returns:
            Like if found, None otherwise
        """
        query = self.db.query(db_models.Like).filter(
            db_models.Like.user_id == user_id
        )
        if post_id is not None:
            query = query.filter(db_models.Like.post_id == post_id)
        else:
            query = query.filter(db_models.Like.comment_id == comment_id)
        return query.first()

    def count_for_post(self, post_id: int) -> int:
        return (
            self.db.query(db_models.Like)
            .filter(db_models.Like.post_id == post_id)
            .count()
        )

    def count_for_comment(self, comment_id: int) -> int:
        return (
            self.db.query(db_models.Like)
            .filter(db_models.Like.comment_id == comment_id)
            .count()
        )

    def _with_liker(self):  # type: ignore[no-untyped-def]
        return self.db.query(
            db_models.Like,
            db_models.User.first_name,
            db_models.User.last_name,
        ).join(db_models.User, db_models.Like.user_id == db_models.User.id)

    def list_for_post(self, post_id: int) -> list[tuple[Any, ...]]:
        """
        List likes on a post, newest first.

        Returns:
            Tuples of (like, first_name, last_name)
        """
        return (
            self._with_liker()
            .filter(db_models.Like.post_id == post_id)
            .order_by(db_models.Like.created_at.desc(), db_models.Like.id.desc())
            .all()
        )

    def list_for_comment(self, comment_id: int) -> list[tuple[Any, ...]]:
        """Same as list_for_post for a comment."""
        return (
            self._with_liker()
            .filter(db_models.Like.comment_id == comment_id)
            .order_by(db_models.Like.created_at.desc(), db_models.Like.id.desc())
            .all()
        )

    def get_liked_post_ids(self, user_id: int, post_ids: list[int]) -> set[int]:
        """
        Get the subset of post_ids the user has liked (for batch loading).

        Args:
            user_id: User ID
            post_ids: Post IDs to check

        Returns:
            Set of liked post IDs
        """
        if not post_ids:
            return set()
        rows = (
            self.db.query(db_models.Like.post_id)
            .filter(
                db_models.Like.user_id == user_id,
                db_models.Like.post_id.in_(post_ids),
            )
            .all()
        )
        return {row.post_id for row in rows}

    def get_liked_comment_ids(
        self, user_id: int, comment_ids: list[int]
    ) -> set[int]:
        """Get the subset of comment_ids the user has liked."""
        if not comment_ids:
            return set()
        rows = (
            self.db.query(db_models.Like.comment_id)
            .filter(
                db_models.Like.user_id == user_id,
                db_models.Like.comment_id.in_(comment_ids),
            )
            .all()
        )
        return {row.comment_id for row in rows}

    def delete_for_post(self, post_id: int) -> int:
        return (
            self.db.query(db_models.Like)
            .filter(db_models.Like.post_id == post_id)
            .delete(synchronize_session=False)
        )

    def delete_for_comments(self, comment_ids: list[int]) -> int:
        """Delete likes on any of the given comments."""
        if not comment_ids:
            return 0
        return (
            self.db.query(db_models.Like)
            .filter(db_models.Like.comment_id.in_(comment_ids))
            .delete(synchronize_session=False)
        )
