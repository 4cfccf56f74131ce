"""Cloud Storage service for profile photos.

This module stores member profile photos in the Firebase Storage bucket under
``profile-photos/{user_id}/profile.{ext}``, replacing any previous upload.
"""

import asyncio
import mimetypes

from google.cloud.exceptions import GoogleCloudError
from google.cloud.storage import Bucket

from app.core.logging import logger
from app.domain.exceptions import (
    InvalidError,
    UnavailableError,
)

PROFILE_PHOTOS_PATH = "profile-photos"

# Max photo size (5MB)
MAX_PHOTO_SIZE = 5 * 1024 * 1024


class ProfilePhotoStorage:
    """Google Cloud Storage backed profile photo store."""

    def __init__(self, bucket: Bucket, max_size: int = MAX_PHOTO_SIZE):
        """Initialize profile photo storage.

        Args:
            bucket: Storage bucket photos are written to
            max_size: Largest accepted upload in bytes
        """
        self.bucket = bucket
        self.max_size = max_size

    async def upload(self, user_id: str, data: bytes, content_type: str) -> str:
        """Upload a profile photo.

        Args:
            user_id: Owner of the photo
            data: Image bytes
            content_type: MIME type, must be an image type

        Returns:
            str: Public URL of the stored photo

        Raises:
            InvalidError: If the file is empty, too large or not an image
            UnavailableError: If the upload fails
        """
        self._validate(data, content_type)

        extension = (mimetypes.guess_extension(content_type) or ".img").lstrip(".")
        storage_path = f"{PROFILE_PHOTOS_PATH}/{user_id}/profile.{extension}"
        blob = self.bucket.blob(storage_path)
        blob.metadata = {"user_id": user_id}

        try:
            await asyncio.to_thread(blob.upload_from_string, data, content_type=content_type)
        except GoogleCloudError as e:
            logger.error("profile_photo_upload_failed", user_id=user_id, error=str(e))
            raise UnavailableError("upload_photo", str(e)) from e

        logger.info("profile_photo_uploaded", user_id=user_id, path=storage_path, size=len(data))
        return blob.public_url

    def _validate(self, data: bytes, content_type: str) -> None:
        if not data:
            raise InvalidError("photo", "file is empty")
        if len(data) > self.max_size:
            raise InvalidError("photo", f"file too large: {len(data)} bytes (max: {self.max_size})")
        if not (content_type or "").startswith("image/"):
            raise InvalidError("photo", f"file type not allowed: {content_type}")
