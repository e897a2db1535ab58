"""
Post service for business logic.
"""

from datetime import datetime, timezone
from typing import Any, List, Optional

from loguru import logger
from sqlalchemy.orm import Session

import models.schemas as schemas
import repositories.db_models as db_models
from helpers.sanitization import sanitize_plain_text
from models.exceptions import (
    NotResourceOwnerException,
    PostNotFoundException,
    ValidationException,
)
from repositories.comment_repository import CommentRepository
from repositories.like_repository import LikeRepository
from repositories.post_repository import PostRepository
from repositories.transaction import transaction
from services.upload_service import UploadService, posts_dir


def _clean_content(content: Optional[str]) -> str:
    text = (sanitize_plain_text(content) or "").strip()
    if not text:
        raise ValidationException("Post content is required")
    return text


def _release_image(db: Session, image_path: Optional[str]) -> None:
    """Remove an image file once no post points at it any more."""
    if not image_path:
        return
    if PostRepository(db).count_with_image(image_path) > 0:
        logger.debug(f"Image still referenced, keeping {image_path}")
        return
    UploadService.remove(posts_dir(), image_path)


def _to_schema(row: tuple[Any, ...], is_liked: bool) -> schemas.Post:
    post, first_name, last_name, job_title, like_count, comment_count = row
    return schemas.Post(
        id=post.id,
        user_id=post.user_id,
        content=post.content,
        image_url=UploadService.post_image_url(post.image_path),
        created_at=post.created_at,
        updated_at=post.updated_at,
        first_name=first_name,
        last_name=last_name,
        job_title=job_title,
        like_count=like_count,
        comment_count=comment_count,
        is_liked_by_user=is_liked,
    )


class PostService:
    """Service for post-related business logic."""

    @staticmethod
    def list_posts(
        db: Session,
        current_user_id: Optional[int] = None,
        skip: int = 0,
        limit: int = 100,
    ) -> List[schemas.Post]:
        """
        List posts newest first.

        Args:
            db: Database session
            current_user_id: Caller's id for isLikedByUser, None if anonymous
            skip: Number of records to skip
            limit: Maximum number of records to return

        Returns:
            Posts with author fields, counts and the caller's like status
        """
        rows = PostRepository(db).list_with_authors(skip=skip, limit=limit)
        liked: set[int] = set()
        if current_user_id is not None:
            liked = LikeRepository(db).get_liked_post_ids(
                current_user_id, [row[0].id for row in rows]
            )
        return [_to_schema(row, row[0].id in liked) for row in rows]

    @staticmethod
    def get_post(
        db: Session, post_id: int, current_user_id: Optional[int] = None
    ) -> schemas.Post:
        """
        Get one post.

        Raises:
            PostNotFoundException: If the post does not exist
        """
        row = PostRepository(db).get_with_author(post_id)
        if row is None:
            raise PostNotFoundException(f"Post with ID {post_id} not found")
        liked = current_user_id is not None and bool(
            LikeRepository(db).get_for_target(current_user_id, post_id=post_id)
        )
        return _to_schema(row, liked)

    @staticmethod
    def create_post(
        db: Session, user: schemas.AuthenticatedUser, data: schemas.PostCreate
    ) -> schemas.Post:
        """
        Create a post for a community member.

        Raises:
            ValidationException: If the content is blank or the image
                reference is not an uploaded image
        """
        content = _clean_content(data.content)
        image_path = UploadService.post_image_filename(data.image_url)

        with transaction(db, "create post"):
            post = PostRepository(db).add(
                db_models.Post(user_id=user.id, content=content, image_path=image_path)
            )

        logger.info(f"Post created: post_id={post.id} user_id={user.id}")
        return PostService.get_post(db, post.id, user.id)

    @staticmethod
    def update_post(
        db: Session,
        user: schemas.AuthenticatedUser,
        post_id: int,
        data: schemas.PostUpdate,
    ) -> schemas.Post:
        """
        Edit a post's content and image. Only the author may edit.

        Raises:
            PostNotFoundException: If the post does not exist
            NotResourceOwnerException: If the caller is not the author
            ValidationException: If the content is blank
        """
        content = _clean_content(data.content)
        image_path = UploadService.post_image_filename(data.image_url)
        repo = PostRepository(db)

        with transaction(db, "update post"):
            post = repo.get_by_id(post_id)
            if post is None:
                raise PostNotFoundException(f"Post with ID {post_id} not found")
            if post.user_id != user.id:
                raise NotResourceOwnerException("You can only edit your own posts")
            old_image = post.image_path
            post.content = content
            post.image_path = image_path
            post.updated_at = datetime.now(timezone.utc)

        if old_image != image_path:
            _release_image(db, old_image)
        return PostService.get_post(db, post_id, user.id)

    @staticmethod
    def delete_post(db: Session, user: schemas.AuthenticatedUser, post_id: int) -> None:
        """
        Delete a post together with its comments and every like on either.

        Runs as one transaction: either everything goes or nothing does.

        Raises:
            PostNotFoundException: If the post does not exist
            NotResourceOwnerException: Unless the caller is the author or an admin
        """
        posts = PostRepository(db)
        comments = CommentRepository(db)
        likes = LikeRepository(db)

        with transaction(db, "delete post"):
            post = posts.get_by_id(post_id)
            if post is None:
                raise PostNotFoundException(f"Post with ID {post_id} not found")
            if post.user_id != user.id and not user.is_admin:
                raise NotResourceOwnerException("You can only delete your own posts")
            image_path = post.image_path

            comment_ids = comments.get_ids_for_post(post_id)
            likes.delete_for_comments(comment_ids)
            likes.delete_for_post(post_id)
            comments.delete_for_post(post_id)
            if posts.delete_by_id(post_id) == 0:
                raise PostNotFoundException(f"Post with ID {post_id} not found")

        _release_image(db, image_path)
        logger.info(
            f"Post deleted: post_id={post_id} comments={len(comment_ids)} by user_id={user.id}"
        )
