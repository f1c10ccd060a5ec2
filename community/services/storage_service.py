"""
Image upload side-channel.

Turns uploaded files into ``StoredImage(url, storage_id)`` pairs before the
issue is written. Cloudinary is used when configured; otherwise uploads are
accepted but not stored and the pairs come back empty.
"""

import io
import re
from dataclasses import dataclass
from typing import Protocol

import cloudinary.exceptions
import cloudinary.uploader

from community.config import Settings
from community.constants import ALLOWED_IMAGE_TYPES
from community.exceptions import InternalError, ValidationError
from community.logging import get_logger

logger = get_logger("storage")

SAFE_FILENAME_PATTERN = re.compile(r"[^a-zA-Z0-9._-]")


@dataclass(frozen=True)
class ImageUpload:
    """An uploaded file as received from the client."""

    filename: str
    content: bytes
    content_type: str


@dataclass(frozen=True)
class StoredImage:
    url: str
    storage_id: str


class ImageStorage(Protocol):
    def upload(self, image: ImageUpload) -> StoredImage: ...


def sanitize_filename(filename: str) -> str:
    return SAFE_FILENAME_PATTERN.sub("_", filename)[:100] or "image"


def validate_images(images: list[ImageUpload], max_size_bytes: int) -> None:
    """
    Reject unsupported or oversized files.

    Raises:
        ValidationError: One entry per offending file.
    """
    errors = []
    for index, image in enumerate(images):
        field = f"images[{index}]"
        if image.content_type not in ALLOWED_IMAGE_TYPES:
            errors.append({
                "field": field,
                "message": f"Unsupported image type: {image.content_type or 'unknown'}. "
                f"Allowed: {', '.join(sorted(ALLOWED_IMAGE_TYPES.values()))}",
            })
        elif not image.content:
            errors.append({"field": field, "message": "Image file is empty"})
        elif len(image.content) > max_size_bytes:
            errors.append({
                "field": field,
                "message": f"Image must be smaller than {max_size_bytes // (1024 * 1024)}MB",
            })
    if errors:
        raise ValidationError(errors)


class CloudinaryImageStorage:
    """Stores images in a Cloudinary folder; credentials are passed per call."""

    def __init__(self, cloud_name: str, api_key: str, api_secret: str, folder: str = "community-issues"):
        self.cloud_name = cloud_name
        self.api_key = api_key
        self.api_secret = api_secret
        self.folder = folder

    def upload(self, image: ImageUpload) -> StoredImage:
        try:
            result = cloudinary.uploader.upload(
                io.BytesIO(image.content),
                folder=self.folder,
                resource_type="image",
                allowed_formats=list(ALLOWED_IMAGE_TYPES.values()),
                filename_override=sanitize_filename(image.filename),
                cloud_name=self.cloud_name,
                api_key=self.api_key,
                api_secret=self.api_secret,
            )
        except cloudinary.exceptions.Error as exc:
            logger.error("image_upload_failed", filename=sanitize_filename(image.filename), error=str(exc))
            raise InternalError("Image upload failed") from exc

        return StoredImage(url=result.get("secure_url") or result.get("url", ""), storage_id=result.get("public_id", ""))


class UnconfiguredImageStorage:
    """Fallback when no provider is configured: the file is dropped, an empty pair is recorded."""

    def upload(self, image: ImageUpload) -> StoredImage:
        logger.warning("image_storage_unconfigured", filename=sanitize_filename(image.filename))
        return StoredImage(url="", storage_id="")


def build_image_storage(settings: Settings) -> ImageStorage:
    if settings.cloudinary_configured:
        return CloudinaryImageStorage(
            cloud_name=settings.cloudinary_cloud_name or "",
            api_key=settings.cloudinary_api_key or "",
            api_secret=settings.cloudinary_api_secret or "",
            folder=settings.cloudinary_folder,
        )
    return UnconfiguredImageStorage()
