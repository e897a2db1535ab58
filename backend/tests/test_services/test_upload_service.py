"""Tests for image upload validation and storage."""

import base64
import io

import pytest
from fastapi import UploadFile
from starlette.datastructures import FormData, Headers

from models.config import settings
from models.exceptions import (
    FileNotFoundException,
    FileTooLargeException,
    InvalidFileTypeException,
    TooManyFilesException,
    ValidationException,
)
from services.upload_service import UploadService, posts_dir

# 1x1 images
PNG_BYTES = base64.b64decode(
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mP8z8BQDwAEhQGAhKmMIQAAAABJRU5ErkJggg=="
)
GIF_BYTES = base64.b64decode("R0lGODlhAQABAIAAAP///wAAACH5BAEAAAAALAAAAAABAAEAAAICRAEAOw==")


def make_upload(
    data: bytes = PNG_BYTES,
    content_type: str = "image/png",
    filename: str = "photo.png",
) -> UploadFile:
    return UploadFile(
        file=io.BytesIO(data),
        filename=filename,
        headers=Headers({"content-type": content_type}),
    )


class TestExtractSingleImage:
    """Test cases for picking the image out of a multipart form."""

    def test_single_file(self):
        upload = make_upload()
        form = FormData([("image", upload)])

        assert UploadService.extract_single_image(form, "image") is upload

    def test_no_file(self):
        with pytest.raises(ValidationException):
            UploadService.extract_single_image(FormData([("note", "hi")]), "image")

    def test_two_files(self):
        form = FormData([("image", make_upload()), ("image", make_upload())])

        with pytest.raises(TooManyFilesException) as exc:
            UploadService.extract_single_image(form, "image")
        assert exc.value.message == "Too many files. Only one image allowed."

    def test_wrong_field(self):
        with pytest.raises(ValidationException, match="Unexpected field"):
            UploadService.extract_single_image(FormData([("file", make_upload())]), "image")


class TestSaveImage:
    """Test cases for UploadService.save_image."""

    @pytest.mark.asyncio
    async def test_saves_with_generated_name(self, upload_dir):
        filename = await UploadService.save_image(
            make_upload(filename="../../etc/passwd.png"), "post", posts_dir()
        )

        assert filename.startswith("post-")
        assert filename.endswith(".png")
        assert "passwd" not in filename
        assert (upload_dir / "posts" / filename).read_bytes() == PNG_BYTES

    @pytest.mark.asyncio
    async def test_rejects_non_image(self, upload_dir):
        with pytest.raises(InvalidFileTypeException):
            await UploadService.save_image(
                make_upload(content_type="application/pdf"), "post", posts_dir()
            )
        assert not (upload_dir / "posts").exists()

    @pytest.mark.asyncio
    async def test_rejects_markup_labelled_as_image(self, upload_dir):
        """The declared content type alone does not make a file an image."""
        html = b"<html><script>alert(1)</script></html>"

        with pytest.raises(InvalidFileTypeException):
            await UploadService.save_image(
                make_upload(data=html, content_type="image/png"), "post", posts_dir()
            )
        assert not (upload_dir / "posts").exists()

    @pytest.mark.asyncio
    async def test_extension_follows_detected_type(self, upload_dir):
        filename = await UploadService.save_image(
            make_upload(data=GIF_BYTES, content_type="image/png"), "post", posts_dir()
        )

        assert filename.endswith(".gif")
        assert (upload_dir / "posts" / filename).read_bytes() == GIF_BYTES

    @pytest.mark.asyncio
    async def test_rejects_oversized(self, monkeypatch):
        monkeypatch.setattr(settings, "MAX_UPLOAD_SIZE", 1024 * 1024)

        with pytest.raises(FileTooLargeException) as exc:
            await UploadService.save_image(
                make_upload(data=b"x" * (1024 * 1024 + 1)), "post", posts_dir()
            )
        assert exc.value.message == "Image size too large. Maximum size is 1MB."

    @pytest.mark.asyncio
    async def test_rejects_empty(self):
        with pytest.raises(ValidationException):
            await UploadService.save_image(make_upload(data=b""), "post", posts_dir())


class TestResolve:
    """Test cases for locating stored files."""

    def test_traversal_rejected(self, upload_dir):
        (upload_dir / "secret.txt").parent.mkdir(parents=True, exist_ok=True)
        (upload_dir / "secret.txt").write_text("nope")
        posts_dir().mkdir(parents=True)

        with pytest.raises(FileNotFoundException):
            UploadService.resolve(posts_dir(), "../secret.txt")

    def test_missing_file(self):
        with pytest.raises(FileNotFoundException):
            UploadService.resolve(posts_dir(), "post-missing.png")

    def test_remove_missing_is_quiet(self):
        UploadService.remove(posts_dir(), "post-missing.png")
        UploadService.remove(posts_dir(), None)


class TestImageReferences:
    def test_url_round_trip(self):
        url = UploadService.post_image_url("post-1-ab.png")

        assert url == "/api/posts/images/post-1-ab.png"
        assert UploadService.post_image_filename(url) == "post-1-ab.png"

    @pytest.mark.parametrize(
        "url",
        [
            "/api/posts/images/../secret",
            "/api/posts/images/",
            "/uploads/post-1.png",
        ],
    )
    def test_invalid_references(self, url):
        with pytest.raises(ValidationException):
            UploadService.post_image_filename(url)
