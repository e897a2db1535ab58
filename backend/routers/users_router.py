"""User profile router endpoints."""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import FileResponse
from sqlalchemy.orm import Session

import authentication.auth as auth
import models.schemas as schemas
from repositories.database import get_db
from services.upload_service import UploadService
from services.user_service import UserService

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/{user_id}", response_model=schemas.UserProfile)
def get_user(user_id: int, db: Session = Depends(get_db)) -> schemas.UserProfile:
    return UserService.get_profile(db, user_id)


@router.put("/{user_id}", response_model=schemas.UserProfile)
def update_user(
    user_id: int,
    data: schemas.ProfileUpdate,
    current_user: schemas.AuthenticatedUser = Depends(auth.get_current_user),
    db: Session = Depends(get_db),
) -> schemas.UserProfile:
    """Update the caller's own profile."""
    return UserService.update_profile(db, current_user, user_id, data)


@router.post("/{user_id}/avatar", response_model=schemas.AvatarUploadResponse)
async def upload_avatar(
    user_id: int,
    request: Request,
    current_user: schemas.AuthenticatedUser = Depends(auth.get_current_user),
    db: Session = Depends(get_db),
) -> schemas.AvatarUploadResponse:
    """Replace the caller's avatar (multipart field "avatar")."""
    form = await request.form()
    upload = UploadService.extract_single_image(form, field="avatar")
    return await UserService.upload_avatar(db, current_user, user_id, upload)


@router.get("/{user_id}/avatar", response_class=FileResponse)
def get_avatar(user_id: int, db: Session = Depends(get_db)) -> FileResponse:
    return FileResponse(UserService.get_avatar_path(db, user_id))
