"""
User Service

Public profiles, profile edits and avatars.
"""

from pathlib import Path

from fastapi import UploadFile
from loguru import logger
from sqlalchemy.orm import Session

import models.schemas as schemas
import repositories.db_models as db_models
from helpers.sanitization import sanitize_display_text
from models.exceptions import (
    FileNotFoundException,
    NotResourceOwnerException,
    UserNotFoundException,
    ValidationException,
)
from repositories.transaction import transaction
from repositories.user_repository import UserRepository
from services.upload_service import AVATAR_PREFIX, UploadService, avatars_dir


def avatar_url(user: db_models.User) -> str | None:
    return f"/api/users/{user.id}/avatar" if user.avatar_path else None


def to_profile(user: db_models.User) -> schemas.UserProfile:
    """Public view of a user. Never includes the password or OAuth hash."""
    return schemas.UserProfile(
        id=user.id,
        first_name=user.first_name,
        last_name=user.last_name,
        email=user.email,
        company=user.company,
        job_title=user.job_title,
        industry=user.industry,
        avatar_url=avatar_url(user),
        date_joined=user.date_joined,
        community_id=user.community_id,
        permission_level=user.permission_level,
    )


class UserService:
    """Service for user profiles."""

    @staticmethod
    def _get_user(db: Session, user_id: int) -> db_models.User:
        user = UserRepository(db).get_by_id(user_id)
        if user is None:
            raise UserNotFoundException("User not found")
        return user

    @staticmethod
    def get_profile(db: Session, user_id: int) -> schemas.UserProfile:
        return to_profile(UserService._get_user(db, user_id))

    @staticmethod
    def update_profile(
        db: Session,
        current_user: schemas.AuthenticatedUser,
        user_id: int,
        data: schemas.ProfileUpdate,
    ) -> schemas.UserProfile:
        """
        Update the caller's own profile.

        First name, last name and job title are required; every text field is
        normalized to title case.

        Raises:
            NotResourceOwnerException: If user_id is not the caller
            UserNotFoundException: If the user does not exist
            ValidationException: If a required field is blank
        """
        if current_user.id != user_id:
            raise NotResourceOwnerException("You can only edit your own profile")

        first_name = sanitize_display_text(data.first_name)
        last_name = sanitize_display_text(data.last_name)
        job_title = sanitize_display_text(data.job_title)
        if not (first_name and last_name and job_title):
            raise ValidationException("First name, last name and job title are required")

        with transaction(db, "update profile"):
            user = UserService._get_user(db, user_id)
            user.first_name = first_name
            user.last_name = last_name
            user.job_title = job_title
            if data.company is not None:
                user.company = sanitize_display_text(data.company) or None
            if data.industry is not None:
                user.industry = sanitize_display_text(data.industry) or None

        logger.info(f"Profile updated: user_id={user_id}")
        return to_profile(user)

    @staticmethod
    async def upload_avatar(
        db: Session,
        current_user: schemas.AuthenticatedUser,
        user_id: int,
        file: UploadFile,
    ) -> schemas.AvatarUploadResponse:
        """
        Store a new avatar for the caller and remove the previous file.

        Raises:
            NotResourceOwnerException: If user_id is not the caller
            UserNotFoundException: If the user does not exist
            InvalidFileTypeException, FileTooLargeException: Bad upload
        """
        if current_user.id != user_id:
            raise NotResourceOwnerException("You can only change your own avatar")
        UserService._get_user(db, user_id)

        filename = await UploadService.save_image(file, AVATAR_PREFIX, avatars_dir())
        try:
            with transaction(db, "update avatar"):
                user = UserService._get_user(db, user_id)
                previous = user.avatar_path
                user.avatar_path = filename
        except Exception:
            UploadService.remove(avatars_dir(), filename)
            raise

        UploadService.remove(avatars_dir(), previous)
        return schemas.AvatarUploadResponse(avatar_url=avatar_url(user) or "")

    @staticmethod
    def get_avatar_path(db: Session, user_id: int) -> Path:
        """
        Locate a user's avatar file.

        Raises:
            UserNotFoundException: If the user does not exist
            FileNotFoundException: If the user has no avatar
        """
        user = UserService._get_user(db, user_id)
        if not user.avatar_path:
            raise FileNotFoundException("Avatar not found")
        return UploadService.resolve(avatars_dir(), user.avatar_path)
