"""
Comment service for business logic.
"""

from datetime import datetime, timezone
from typing import Any, List, Optional

from loguru import logger
from sqlalchemy.orm import Session

import models.schemas as schemas
import repositories.db_models as db_models
from helpers.sanitization import sanitize_plain_text
from models.exceptions import (
    CommentNotFoundException,
    NotResourceOwnerException,
    PostNotFoundException,
    ValidationException,
)
from repositories.comment_repository import CommentRepository
from repositories.like_repository import LikeRepository
from repositories.post_repository import PostRepository
from repositories.transaction import transaction


def _clean_content(content: Optional[str]) -> str:
    text = (sanitize_plain_text(content) or "").strip()
    if not text:
        raise ValidationException("Comment content is required")
    return text


def _to_schema(row: tuple[Any, ...]) -> schemas.Comment:
    comment, first_name, last_name, job_title, like_count = row
    return schemas.Comment(
        id=comment.id,
        post_id=comment.post_id,
        user_id=comment.user_id,
        content=comment.content,
        is_edited=comment.is_edited,
        created_at=comment.created_at,
        updated_at=comment.updated_at,
        first_name=first_name,
        last_name=last_name,
        job_title=job_title,
        like_count=like_count,
    )


class CommentService:
    """Service for comment-related business logic."""

    @staticmethod
    def get_comments_for_post(db: Session, post_id: int) -> List[schemas.Comment]:
        """
        Get comments on a post, oldest first.

        Raises:
            PostNotFoundException: If the post does not exist
        """
        if PostRepository(db).get_by_id(post_id) is None:
            raise PostNotFoundException(f"Post with ID {post_id} not found")
        return [_to_schema(row) for row in CommentRepository(db).list_for_post(post_id)]

    @staticmethod
    def get_comment(db: Session, comment_id: int) -> schemas.Comment:
        row = CommentRepository(db).get_with_author(comment_id)
        if row is None:
            raise CommentNotFoundException(f"Comment with ID {comment_id} not found")
        return _to_schema(row)

    @staticmethod
    def create_comment(
        db: Session, user: schemas.AuthenticatedUser, data: schemas.CommentCreate
    ) -> schemas.Comment:
        """
        Add a comment to a post.

        Raises:
            ValidationException: If the content is blank
            PostNotFoundException: If the post does not exist
        """
        content = _clean_content(data.content)

        with transaction(db, "create comment"):
            if PostRepository(db).get_by_id(data.post_id) is None:
                raise PostNotFoundException(f"Post with ID {data.post_id} not found")
            comment = CommentRepository(db).add(
                db_models.Comment(post_id=data.post_id, user_id=user.id, content=content)
            )

        logger.info(f"Comment created: comment_id={comment.id} post_id={data.post_id}")
        return CommentService.get_comment(db, comment.id)

    @staticmethod
    def update_comment(
        db: Session,
        user: schemas.AuthenticatedUser,
        comment_id: int,
        data: schemas.CommentUpdate,
    ) -> schemas.Comment:
        """
        Edit a comment and mark it as edited. Only the author may edit.

        Raises:
            CommentNotFoundException: If the comment does not exist
            NotResourceOwnerException: If the caller is not the author
        """
        content = _clean_content(data.content)
        repo = CommentRepository(db)

        with transaction(db, "update comment"):
            comment = repo.get_by_id(comment_id)
            if comment is None:
                raise CommentNotFoundException(
                    f"Comment with ID {comment_id} not found"
                )
            if comment.user_id != user.id:
                raise NotResourceOwnerException("You can only edit your own comments")
            comment.content = content
            comment.is_edited = True
            comment.updated_at = datetime.now(timezone.utc)

        return CommentService.get_comment(db, comment_id)

    @staticmethod
    def delete_comment(
        db: Session, user: schemas.AuthenticatedUser, comment_id: int
    ) -> None:
        """
        Delete a comment and its likes atomically.

        Raises:
            CommentNotFoundException: If the comment does not exist
            NotResourceOwnerException: Unless the caller is the author or an admin
        """
        repo = CommentRepository(db)

        with transaction(db, "delete comment"):
            comment = repo.get_by_id(comment_id)
            if comment is None:
                raise CommentNotFoundException(
                    f"Comment with ID {comment_id} not found"
                )
            if comment.user_id != user.id and not user.is_admin:
                raise NotResourceOwnerException(
                    "You can only delete your own comments"
                )
            LikeRepository(db).delete_for_comments([comment_id])
            repo.delete_by_id(comment_id)

        logger.info(f"Comment deleted: comment_id={comment_id} by user_id={user.id}")
