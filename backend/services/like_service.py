"""Service for likes on posts and comments."""

from typing import Optional

from loguru import logger
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

import models.schemas as schemas
from models.exceptions import (
    CommentNotFoundException,
    DuplicateLikeException,
    InvalidLikeTargetException,
    LikeNotFoundException,
    NotResourceOwnerException,
    PostNotFoundException,
)
from repositories.comment_repository import CommentRepository
from repositories.db_models import Like
from repositories.like_repository import LikeRepository
from repositories.post_repository import PostRepository
from repositories.transaction import transaction


def _count(repo: LikeRepository, post_id: Optional[int], comment_id: Optional[int]) -> int:
    if post_id is not None:
        return repo.count_for_post(post_id)
    if comment_id is not None:
        return repo.count_for_comment(comment_id)
    raise InvalidLikeTargetException()


def _to_list(rows: list) -> schemas.LikeList:
    likes = [
        schemas.Like(
            id=like.id,
            user_id=like.user_id,
            first_name=first_name,
            last_name=last_name,
            created_at=like.created_at,
        )
        for like, first_name, last_name in rows
    ]
    return schemas.LikeList(likes=likes, total_likes=len(likes))


class LikeService:
    """Service for like business logic."""

    @staticmethod
    def toggle_like(
        db: Session,
        user_id: int,
        post_id: Optional[int] = None,
        comment_id: Optional[int] = None,
    ) -> schemas.LikeToggleResult:
        """
        Like the target if the user has not yet, otherwise remove the like.

        The unique constraints on (post, user) and (comment, user) settle
        concurrent toggles: the request that loses the insert gets a
        DuplicateLikeException instead of creating a second row.

        Args:
            db: Database session
            user_id: User performing the action
            post_id: Post to toggle, or None
            comment_id: Comment to toggle, or None

        Returns:
            The action taken and the target's like count after the commit

        Raises:
            InvalidLikeTargetException: Unless exactly one target is given
            PostNotFoundException: Post not found
            CommentNotFoundException: Comment not found
            DuplicateLikeException: A concurrent toggle inserted the same like
        """
        if (post_id is None) == (comment_id is None):
            raise InvalidLikeTargetException()

        repo = LikeRepository(db)
        like_id: Optional[int] = None

        with transaction(db, "toggle like"):
            if post_id is not None:
                if PostRepository(db).get_by_id(post_id) is None:
                    raise PostNotFoundException(f"Post with ID {post_id} not found")
            elif CommentRepository(db).get_by_id(comment_id) is None:  # type: ignore[arg-type]
                raise CommentNotFoundException(
                    f"Comment with ID {comment_id} not found"
                )

            existing = repo.get_for_target(user_id, post_id=post_id, comment_id=comment_id)
            if existing is not None:
                repo.delete(existing)
                liked = False
            else:
                try:
                    like = repo.add(
                        Like(user_id=user_id, post_id=post_id, comment_id=comment_id)
                    )
                except IntegrityError:
                    logger.info(
                        f"Concurrent like rejected: user_id={user_id} "
                        f"post_id={post_id} comment_id={comment_id}"
                    )
                    raise DuplicateLikeException()
                like_id = like.id
                liked = True

        # Count only after the toggle is committed
        total = _count(repo, post_id, comment_id)
        return schemas.LikeToggleResult(
            action="liked" if liked else "unliked",
            is_liked=liked,
            total_likes=total,
            like_id=like_id,
        )

    @staticmethod
    def get_post_likes(db: Session, post_id: int) -> schemas.LikeList:
        if PostRepository(db).get_by_id(post_id) is None:
            raise PostNotFoundException(f"Post with ID {post_id} not found")
        return _to_list(LikeRepository(db).list_for_post(post_id))

    @staticmethod
    def get_comment_likes(db: Session, comment_id: int) -> schemas.LikeList:
        if CommentRepository(db).get_by_id(comment_id) is None:
            raise CommentNotFoundException(f"Comment with ID {comment_id} not found")
        return _to_list(LikeRepository(db).list_for_comment(comment_id))

    @staticmethod
    def delete_like(db: Session, user_id: int, like_id: int) -> schemas.LikeDeleteResult:
        """
        Remove a specific like. Only its author may remove it.

        Raises:
            LikeNotFoundException: If the like does not exist
            NotResourceOwnerException: If the like belongs to someone else
        """
        repo = LikeRepository(db)
        with transaction(db, "delete like"):
            like = repo.get_by_id(like_id)
            if like is None:
                raise LikeNotFoundException(f"Like with ID {like_id} not found")
            if like.user_id != user_id:
                raise NotResourceOwnerException("You can only remove your own likes")
            post_id, comment_id = like.post_id, like.comment_id
            repo.delete(like)

        return schemas.LikeDeleteResult(total_likes=_count(repo, post_id, comment_id))

    @staticmethod
    def get_like_status(
        db: Session,
        user_id: int,
        post_ids: list[int],
        comment_ids: list[int],
    ) -> dict[str, bool]:
        """
        Batch check which of the given targets the user has liked.

        Returns:
            Sparse map with a True entry per liked target, keyed
            ``post_<id>`` or ``comment_<id>``
        """
        repo = LikeRepository(db)
        status = {f"post_{pid}": True for pid in repo.get_liked_post_ids(user_id, post_ids)}
        status.update(
            {
                f"comment_{cid}": True
                for cid in repo.get_liked_comment_ids(user_id, comment_ids)
            }
        )
        return status
