"""
Upload Service

Validation and storage of uploaded images (post images and avatars).
Filenames are generated server side and never derived from the client's
filename.
"""

import secrets
import time
from pathlib import Path
from typing import Optional

import magic
from fastapi import UploadFile
from loguru import logger
from starlette.datastructures import FormData
from starlette.datastructures import UploadFile as StarletteUploadFile

from models.config import settings
from models.exceptions import (
    FileNotFoundException,
    FileTooLargeException,
    InternalException,
    InvalidFileTypeException,
    TooManyFilesException,
    ValidationException,
)

# Content type -> stored extension
ALLOWED_IMAGE_TYPES = {
    "image/jpeg": ".jpg",
    "image/jpg": ".jpg",
    "image/png": ".png",
    "image/gif": ".gif",
    "image/webp": ".webp",
}

POST_IMAGE_PREFIX = "post"
AVATAR_PREFIX = "avatar"
POST_IMAGE_URL_PREFIX = "/api/posts/images/"

CHUNK_SIZE = 64 * 1024


def posts_dir() -> Path:
    return Path(settings.UPLOAD_DIR) / "posts"


def avatars_dir() -> Path:
    return Path(settings.UPLOAD_DIR) / "avatars"


class UploadService:
    """Service for image upload business logic."""

    @staticmethod
    def extract_single_image(form: FormData, field: str = "image") -> UploadFile:
        """
        Pick the one image file out of a multipart form.

        Raises:
            ValidationException: If no file was sent or it used another field
            TooManyFilesException: If more than one file was sent
        """
        files = [
            (key, value)
            for key, value in form.multi_items()
            if isinstance(value, StarletteUploadFile)
        ]
        if not files:
            raise ValidationException("No image file provided")
        if len(files) > 1:
            raise TooManyFilesException()
        key, upload = files[0]
        if key != field:
            raise ValidationException(f"Unexpected field. Use '{field}' for the image.")
        return upload  # type: ignore[return-value]

    @staticmethod
    async def save_image(upload: UploadFile, prefix: str, directory: Path) -> str:
        """
        Validate and store an image.

        Args:
            upload: The uploaded file
            prefix: Filename prefix, e.g. "post"
            directory: Target directory (created if missing)

        Returns:
            The generated filename, e.g. post-1718000000000-3f9a1c2b7d4e.png

        Raises:
            InvalidFileTypeException: Declared or detected type is not JPEG,
                PNG, GIF or WebP
            FileTooLargeException: Larger than MAX_UPLOAD_SIZE
            InternalException: The file could not be written
        """
        content_type = (upload.content_type or "").lower()
        if content_type not in ALLOWED_IMAGE_TYPES:
            raise InvalidFileTypeException()

        max_size = settings.MAX_UPLOAD_SIZE
        chunks: list[bytes] = []
        size = 0
        while True:
            chunk = await upload.read(CHUNK_SIZE)
            if not chunk:
                break
            size += len(chunk)
            if size > max_size:
                raise FileTooLargeException(max_size)
            chunks.append(chunk)
        if size == 0:
            raise ValidationException("Uploaded image is empty")
        content = b"".join(chunks)

        # Validate actual file content, not just the declared header
        detected_type = magic.from_buffer(content, mime=True)
        extension = ALLOWED_IMAGE_TYPES.get(detected_type)
        if extension is None:
            logger.warning(
                f"Rejected upload declared as {content_type}, detected {detected_type}"
            )
            raise InvalidFileTypeException()

        filename = f"{prefix}-{int(time.time() * 1000)}-{secrets.token_hex(6)}{extension}"
        try:
            directory.mkdir(parents=True, exist_ok=True)
            (directory / filename).write_bytes(content)
        except OSError as e:
            logger.error(f"Failed to store upload {filename}: {e!r}")
            raise InternalException("Internal server error") from e

        logger.info(f"Stored upload {filename} ({size} bytes)")
        return filename

    @staticmethod
    def resolve(directory: Path, filename: str) -> Path:
        """
        Locate a stored file, refusing anything outside the directory.

        Raises:
            FileNotFoundException: Unknown file or a path traversal attempt
        """
        base = directory.resolve()
        path = (base / filename).resolve()
        if path.parent != base or not path.is_file():
            raise FileNotFoundException("Image not found")
        return path

    @staticmethod
    def remove(directory: Path, filename: Optional[str]) -> None:
        """Delete a stored file if it exists. Failures are logged only."""
        if not filename:
            return
        try:
            UploadService.resolve(directory, filename).unlink()
        except FileNotFoundException:
            return
        except OSError as e:
            logger.warning(f"Could not remove upload {filename}: {e!r}")

    @staticmethod
    def post_image_url(filename: Optional[str]) -> Optional[str]:
        return f"{POST_IMAGE_URL_PREFIX}{filename}" if filename else None

    @staticmethod
    def post_image_filename(image_url: Optional[str]) -> Optional[str]:
        """
        Turn an image URL returned by the upload endpoint back into a filename.

        Raises:
            ValidationException: If the URL does not point at an uploaded image
        """
        if not image_url:
            return None
        if not image_url.startswith(POST_IMAGE_URL_PREFIX):
            raise ValidationException("Invalid image reference")
        filename = image_url[len(POST_IMAGE_URL_PREFIX) :]
        if not filename or "/" in filename or "\\" in filename or ".." in filename:
            raise ValidationException("Invalid image reference")
        return filename
