"""Blob storage provider protocol."""

from typing import Protocol


class IBlobStorage(Protocol):
    """Protocol for object storage backends holding profile images."""

    async def upload(self, key: str, data: bytes, content_type: str) -> str:
        """
        Store bytes under a key.

        Args:
            key: Object key inside the configured bucket
            data: Raw file content
            content_type: MIME type recorded with the object

        Returns:
            The public URL of the stored object

        Raises:
            StorageError: If the store rejects the write
        """
        ...

    async def remove(self, key: str) -> None:
        """
        Remove an object. Removing a missing key is not an error.

        Raises:
            StorageError: If the store rejects the delete
        """
        ...

    def public_url(self, key: str) -> str:
        """Build the public URL for a key."""
        ...
