"""Like router endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

import authentication.auth as auth
import models.schemas as schemas
from models.exceptions import ValidationException
from repositories.database import get_db
from services.like_service import LikeService

router = APIRouter(prefix="/likes", tags=["likes"])


def _parse_ids(raw: Optional[str]) -> list[int]:
    """Parse "1,2,3". Entries that are not integers are skipped."""
    if not raw:
        return []
    return [int(part) for part in raw.split(",") if part.strip().isdigit()]


@router.get("/post/{post_id}", response_model=schemas.LikeList)
def get_post_likes(post_id: int, db: Session = Depends(get_db)) -> schemas.LikeList:
    return LikeService.get_post_likes(db, post_id)


@router.get("/comment/{comment_id}", response_model=schemas.LikeList)
def get_comment_likes(
    comment_id: int, db: Session = Depends(get_db)
) -> schemas.LikeList:
    return LikeService.get_comment_likes(db, comment_id)


@router.post("/toggle", response_model=schemas.LikeToggleResult)
def toggle_like(
    data: schemas.LikeToggleRequest,
    current_user: schemas.AuthenticatedUser = Depends(auth.require_community_member),
    db: Session = Depends(get_db),
) -> schemas.LikeToggleResult:
    """Like or unlike a post or a comment. Community members only."""
    return LikeService.toggle_like(
        db, current_user.id, post_id=data.post_id, comment_id=data.comment_id
    )


@router.delete("/{like_id}", response_model=schemas.LikeDeleteResult)
def delete_like(
    like_id: int,
    current_user: schemas.AuthenticatedUser = Depends(auth.get_current_user),
    db: Session = Depends(get_db),
) -> schemas.LikeDeleteResult:
    return LikeService.delete_like(db, current_user.id, like_id)


@router.get("/user/{user_id}/status", response_model=schemas.LikeStatus)
def get_like_status(
    user_id: int,
    post_ids: Optional[str] = Query(None, alias="postIds"),
    comment_ids: Optional[str] = Query(None, alias="commentIds"),
    db: Session = Depends(get_db),
) -> schemas.LikeStatus:
    """
    Which of the given posts and comments a user has liked.

    Query: ?postIds=1,2&commentIds=7. Only liked targets appear in the map.
    """
    if user_id <= 0:
        raise ValidationException("Invalid user ID")
    status_map = LikeService.get_like_status(
        db, user_id, _parse_ids(post_ids), _parse_ids(comment_ids)
    )
    return schemas.LikeStatus(like_status=status_map)
