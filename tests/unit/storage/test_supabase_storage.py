"""Unit tests for SupabaseBlobStorage."""

import json

import httpx
import pytest

from core.exceptions import StorageError
from infrastructure.storage.supabase_storage import SupabaseBlobStorage

SUPABASE_URL = "https://project.supabase.co"


def _storage(handler, base_url: str = SUPABASE_URL, service_key: str = "service-key"):
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return SupabaseBlobStorage(
        client, base_url=base_url, service_key=service_key, bucket="profile_images"
    )


class TestUpload:
    @pytest.mark.asyncio
    async def test_uploads_and_returns_public_url(self):
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"Key": "profile_images/abc.png"})

        url = await _storage(handler).upload("abc.png", b"png-bytes", "image/png")

        assert url == f"{SUPABASE_URL}/storage/v1/object/public/profile_images/abc.png"
        request = seen[0]
        assert request.method == "POST"
        assert str(request.url) == f"{SUPABASE_URL}/storage/v1/object/profile_images/abc.png"
        assert request.headers["Authorization"] == "Bearer service-key"
        assert request.headers["apikey"] == "service-key"
        assert request.headers["Content-Type"] == "image/png"
        assert request.headers["x-upsert"] == "false"
        assert request.content == b"png-bytes"

    @pytest.mark.asyncio
    async def test_rejection_raises_with_provider_message(self):
        storage = _storage(
            lambda request: httpx.Response(400, json={"message": "The resource already exists"})
        )

        with pytest.raises(StorageError) as exc_info:
            await storage.upload("abc.png", b"x", "image/png")

        assert exc_info.value.message == "The resource already exists"
        assert exc_info.value.status_code == 502

    @pytest.mark.asyncio
    async def test_transport_error_raises(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("dns failure", request=request)

        with pytest.raises(StorageError):
            await _storage(handler).upload("abc.png", b"x", "image/png")

    @pytest.mark.asyncio
    async def test_unconfigured_raises_without_request(self):
        calls = 0

        def handler(request: httpx.Request) -> httpx.Response:
            nonlocal calls
            calls += 1
            return httpx.Response(200)

        with pytest.raises(StorageError):
            await _storage(handler, service_key="").upload("abc.png", b"x", "image/png")
        assert calls == 0


class TestRemove:
    @pytest.mark.asyncio
    async def test_sends_prefix_delete(self):
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json=[])

        await _storage(handler).remove("abc.png")

        assert seen[0].method == "DELETE"
        assert str(seen[0].url) == f"{SUPABASE_URL}/storage/v1/object/profile_images"
        assert json.loads(seen[0].content) == {"prefixes": ["abc.png"]}

    @pytest.mark.asyncio
    async def test_missing_object_is_not_an_error(self):
        await _storage(lambda request: httpx.Response(404)).remove("gone.png")

    @pytest.mark.asyncio
    async def test_server_error_raises(self):
        storage = _storage(lambda request: httpx.Response(500, json={"error": "internal"}))

        with pytest.raises(StorageError) as exc_info:
            await storage.remove("abc.png")
        assert exc_info.value.message == "internal"


class TestPublicUrl:
    def test_built_from_base_url_and_bucket(self):
        storage = SupabaseBlobStorage(
            httpx.AsyncClient(),
            base_url=f"{SUPABASE_URL}/",
            service_key="service-key",
            bucket="avatars",
        )

        assert storage.public_url("k.webp") == (
            f"{SUPABASE_URL}/storage/v1/object/public/avatars/k.webp"
        )
