from unittest.mock import patch

import cloudinary.exceptions
import pytest

from community.config import Settings
from community.exceptions import InternalError, ValidationError
from community.services import storage_service
from community.services.storage_service import (
    CloudinaryImageStorage,
    ImageUpload,
    UnconfiguredImageStorage,
    build_image_storage,
    validate_images,
)

JPEG = ImageUpload("photo.jpg", b"\xff\xd8\xff\xe0", "image/jpeg")


class TestValidateImages:
    def test_accepts_supported_types(self):
        validate_images(
            [JPEG, ImageUpload("a.png", b"\x89PNG", "image/png"), ImageUpload("b.webp", b"RIFF", "image/webp")],
            max_size_bytes=1024,
        )

    def test_reports_each_bad_file(self):
        uploads = [
            JPEG,
            ImageUpload("doc.pdf", b"%PDF", "application/pdf"),
            ImageUpload("big.png", b"x" * 2048, "image/png"),
            ImageUpload("empty.jpg", b"", "image/jpeg"),
        ]

        with pytest.raises(ValidationError) as exc_info:
            validate_images(uploads, max_size_bytes=1024)
        assert [error["field"] for error in exc_info.value.errors] == ["images[1]", "images[2]", "images[3]"]


class TestCloudinaryImageStorage:
    def test_upload_returns_secure_url_and_public_id(self):
        storage = CloudinaryImageStorage("demo", "key", "secret", folder="issues-test")

        with patch.object(storage_service.cloudinary.uploader, "upload") as upload:
            upload.return_value = {"secure_url": "https://res.cloudinary.com/demo/x.jpg", "public_id": "issues-test/x"}
            stored = storage.upload(JPEG)

        assert stored.url == "https://res.cloudinary.com/demo/x.jpg"
        assert stored.storage_id == "issues-test/x"
        kwargs = upload.call_args.kwargs
        assert kwargs["folder"] == "issues-test"
        assert kwargs["cloud_name"] == "demo"
        assert kwargs["resource_type"] == "image"

    def test_provider_failure_is_internal_error(self):
        storage = CloudinaryImageStorage("demo", "key", "secret")

        with patch.object(
            storage_service.cloudinary.uploader, "upload", side_effect=cloudinary.exceptions.Error("quota exceeded")
        ):
            with pytest.raises(InternalError) as exc_info:
                storage.upload(JPEG)
        assert "quota" not in exc_info.value.message


def test_unconfigured_storage_records_empty_pair():
    stored = UnconfiguredImageStorage().upload(JPEG)

    assert stored.url == ""
    assert stored.storage_id == ""


def test_build_image_storage_picks_provider_from_settings():
    assert isinstance(build_image_storage(Settings()), UnconfiguredImageStorage)

    configured = Settings(
        CLOUDINARY_CLOUD_NAME="demo",
        CLOUDINARY_API_KEY="key",
        CLOUDINARY_API_SECRET="secret",
    )
    assert isinstance(build_image_storage(configured), CloudinaryImageStorage)


def test_sanitize_filename():
    assert storage_service.sanitize_filename("my photo (1).jpg") == "my_photo__1_.jpg"
    assert storage_service.sanitize_filename("") == "image"
