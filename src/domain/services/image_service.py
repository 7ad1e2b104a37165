"""Profile image upload and removal."""

from pathlib import PurePosixPath
from urllib.parse import unquote, urlparse
from uuid import uuid4

import structlog

from core.exceptions import ErrorCode, ValidationError
from domain.entities.profile import ImageUpload
from infrastructure.storage.provider import IBlobStorage

logger = structlog.get_logger()

SUPPORTED_IMAGE_TYPES = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".webp": "image/webp",
}
DEFAULT_MAX_IMAGE_BYTES = 5 * 1024 * 1024


def key_from_url(image_url: str) -> str | None:
    """Recover the storage key (last path segment) from a public URL."""
    name = PurePosixPath(unquote(urlparse(image_url).path)).name
    return name or None


class ImageService:
    """Stores profile images under generated keys."""

    def __init__(
        self,
        storage: IBlobStorage,
        max_bytes: int = DEFAULT_MAX_IMAGE_BYTES,
    ) -> None:
        self._storage = storage
        self._max_bytes = max_bytes

    def validate(self, image: ImageUpload) -> str:
        """Check type and size. Returns the normalized file extension."""
        extension = PurePosixPath(image.filename or "").suffix.lower()
        if extension not in SUPPORTED_IMAGE_TYPES:
            raise ValidationError(
                "Unsupported image type. Use a JPEG, PNG or WebP file.",
                error_code=ErrorCode.UNSUPPORTED_IMAGE_TYPE,
                details={"filename": image.filename},
            )
        if not image.data:
            raise ValidationError("Image file is empty")
        if len(image.data) > self._max_bytes:
            raise ValidationError(
                f"Image is larger than {self._max_bytes} bytes",
                error_code=ErrorCode.IMAGE_TOO_LARGE,
                details={"size": len(image.data), "max_bytes": self._max_bytes},
            )
        return extension

    async def upload(self, image: ImageUpload) -> str:
        """Upload under a fresh random key and return the public URL.

        The caller's file name only contributes its extension, so two
        uploads never share a key even when their content is identical.
        """
        extension = self.validate(image)
        key = f"{uuid4().hex}{extension}"
        logger.info("image_upload_started", key=key, filename=image.filename)
        return await self._storage.upload(key, image.data, SUPPORTED_IMAGE_TYPES[extension])

    async def delete(self, image_url: str) -> None:
        """Remove the object behind a public URL."""
        key = key_from_url(image_url)
        if key is None:
            logger.warning("image_delete_skipped", image_url=image_url)
            return
        await self._storage.remove(key)
