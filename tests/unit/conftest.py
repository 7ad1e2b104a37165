"""Shared fixtures for unit tests."""

from typing import Any
from unittest.mock import AsyncMock
from uuid import UUID, uuid4

import pytest

from core.exceptions import StorageError
from domain.entities.profile import ImageUpload

SUPABASE_URL = "https://project.supabase.co"
PUBLIC_PREFIX = f"{SUPABASE_URL}/storage/v1/object/public/profile_images/"


class FakeUnitOfWork:
    """Fake Unit of Work with a profile repository mock for unit testing."""

    def __init__(self) -> None:
        self.profiles = AsyncMock()
        self.committed = False
        self.rolled_back = False

    async def commit(self) -> None:
        self.committed = True

    async def rollback(self) -> None:
        self.rolled_back = True

    async def __aenter__(self) -> "FakeUnitOfWork":
        return self

    async def __aexit__(self, *args: Any) -> None:
        pass


class FakeBlobStorage:
    """In-memory blob store that records every call."""

    def __init__(self) -> None:
        self.objects: dict[str, bytes] = {}
        self.removed: list[str] = []
        self.fail_uploads = False
        self.fail_removals = False

    def public_url(self, key: str) -> str:
        return f"{PUBLIC_PREFIX}{key}"

    async def upload(self, key: str, data: bytes, content_type: str) -> str:
        if self.fail_uploads:
            raise StorageError("Bucket quota exceeded", key=key)
        self.objects[key] = data
        return self.public_url(key)

    async def remove(self, key: str) -> None:
        if self.fail_removals:
            raise StorageError("Storage unavailable", key=key)
        self.removed.append(key)
        self.objects.pop(key, None)


@pytest.fixture
def uow() -> FakeUnitOfWork:
    """Create a fresh FakeUnitOfWork."""
    return FakeUnitOfWork()


@pytest.fixture
def blob_storage() -> FakeBlobStorage:
    """Create an empty in-memory blob store."""
    return FakeBlobStorage()


@pytest.fixture
def encoder() -> AsyncMock:
    """Face encoder mock returning a 128-element vector."""
    mock = AsyncMock()
    mock.encode.return_value = [0.01 * i for i in range(128)]
    return mock


@pytest.fixture
def profile_id() -> UUID:
    """A random profile ID."""
    return uuid4()


@pytest.fixture
def photo() -> ImageUpload:
    """A small JPEG upload."""
    return ImageUpload(
        data=b"\xff\xd8\xff\xe0fake-jpeg-bytes",
        filename="Ada Portrait.JPG",
        content_type="image/jpeg",
    )
