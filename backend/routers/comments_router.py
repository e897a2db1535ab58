"""Comment router endpoints."""

from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

import authentication.auth as auth
import models.schemas as schemas
from repositories.database import get_db
from services.comment_service import CommentService

router = APIRouter(prefix="/comments", tags=["comments"])


@router.get("/post/{post_id}", response_model=List[schemas.Comment])
def get_comments_for_post(
    post_id: int, db: Session = Depends(get_db)
) -> List[schemas.Comment]:
    """Comments on a post, oldest first."""
    return CommentService.get_comments_for_post(db, post_id)


@router.post("", response_model=schemas.Comment, status_code=status.HTTP_201_CREATED)
def create_comment(
    data: schemas.CommentCreate,
    current_user: schemas.AuthenticatedUser = Depends(auth.require_community_member),
    db: Session = Depends(get_db),
) -> schemas.Comment:
    """Comment on a post. Community members only."""
    return CommentService.create_comment(db, current_user, data)


@router.put("/{comment_id}", response_model=schemas.Comment)
def update_comment(
    comment_id: int,
    data: schemas.CommentUpdate,
    current_user: schemas.AuthenticatedUser = Depends(auth.get_current_user),
    db: Session = Depends(get_db),
) -> schemas.Comment:
    return CommentService.update_comment(db, current_user, comment_id, data)


@router.delete("/{comment_id}", response_model=schemas.SuccessResponse)
def delete_comment(
    comment_id: int,
    current_user: schemas.AuthenticatedUser = Depends(auth.get_current_user),
    db: Session = Depends(get_db),
) -> schemas.SuccessResponse:
    CommentService.delete_comment(db, current_user, comment_id)
    return schemas.SuccessResponse(message="Comment deleted successfully")
