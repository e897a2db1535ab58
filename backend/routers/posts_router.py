"""Post router endpoints."""

from typing import List, Optional

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import FileResponse
from sqlalchemy.orm import Session

import authentication.auth as auth
import models.schemas as schemas
from helpers.pagination import PaginationLimit, PaginationSkip
from repositories.database import get_db
from services.post_service import PostService
from services.upload_service import (
    POST_IMAGE_PREFIX,
    UploadService,
    posts_dir,
)

router = APIRouter(prefix="/posts", tags=["posts"])


@router.get("", response_model=List[schemas.Post])
def list_posts(
    skip: PaginationSkip = 0,
    limit: PaginationLimit = 100,
    current_user: Optional[schemas.AuthenticatedUser] = Depends(
        auth.get_current_user_optional
    ),
    db: Session = Depends(get_db),
) -> List[schemas.Post]:
    """List posts newest first."""
    user_id = current_user.id if current_user else None
    return PostService.list_posts(db, user_id, skip=skip, limit=limit)


@router.post("", response_model=schemas.Post, status_code=status.HTTP_201_CREATED)
def create_post(
    data: schemas.PostCreate,
    current_user: schemas.AuthenticatedUser = Depends(auth.require_community_member),
    db: Session = Depends(get_db),
) -> schemas.Post:
    """Create a post. Community members only."""
    return PostService.create_post(db, current_user, data)


@router.post("/upload-image", response_model=schemas.ImageUploadResponse)
async def upload_image(
    request: Request,
    current_user: schemas.AuthenticatedUser = Depends(auth.require_community_member),
) -> schemas.ImageUploadResponse:
    """
    Upload one image (field "image") for use in a post.

    JPEG, PNG, GIF or WebP, up to 5MB.
    """
    form = await request.form()
    upload = UploadService.extract_single_image(form, field="image")
    filename = await UploadService.save_image(upload, POST_IMAGE_PREFIX, posts_dir())
    return schemas.ImageUploadResponse(
        image_url=UploadService.post_image_url(filename) or "",
        filename=filename,
    )


@router.get("/images/{filename}", response_class=FileResponse)
def get_image(filename: str) -> FileResponse:
    return FileResponse(UploadService.resolve(posts_dir(), filename))


@router.get("/{post_id}", response_model=schemas.Post)
def get_post(
    post_id: int,
    current_user: Optional[schemas.AuthenticatedUser] = Depends(
        auth.get_current_user_optional
    ),
    db: Session = Depends(get_db),
) -> schemas.Post:
    user_id = current_user.id if current_user else None
    return PostService.get_post(db, post_id, user_id)


@router.put("/{post_id}", response_model=schemas.Post)
def update_post(
    post_id: int,
    data: schemas.PostUpdate,
    current_user: schemas.AuthenticatedUser = Depends(auth.get_current_user),
    db: Session = Depends(get_db),
) -> schemas.Post:
    """Edit a post. Author only."""
    return PostService.update_post(db, current_user, post_id, data)


@router.delete("/{post_id}", response_model=schemas.SuccessResponse)
def delete_post(
    post_id: int,
    current_user: schemas.AuthenticatedUser = Depends(auth.get_current_user),
    db: Session = Depends(get_db),
) -> schemas.SuccessResponse:
    """Delete a post with its comments and likes. Author or admin only."""
    PostService.delete_post(db, current_user, post_id)
    return schemas.SuccessResponse(message="Post deleted successfully")
