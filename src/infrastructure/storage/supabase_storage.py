"""Supabase Storage implementation over the REST API.

Targets the Storage API v1 object routes served under `/storage/v1`
(the same routes supabase-py's `storage.from_(bucket)` calls). All paths
this client uses are defined below.
"""

import httpx
import structlog

from core.config import settings
from core.exceptions import StorageError

logger = structlog.get_logger()

STORAGE_API_PREFIX = "/storage/v1"
# POST: upload one object. `x-upsert: false` rejects an existing key.
OBJECT_PATH = STORAGE_API_PREFIX + "/object/{bucket}/{key}"
# DELETE with {"prefixes": [...]}: bulk remove.
BUCKET_OBJECTS_PATH = STORAGE_API_PREFIX + "/object/{bucket}"
# GET without credentials, for buckets marked public.
PUBLIC_OBJECT_PATH = STORAGE_API_PREFIX + "/object/public/{bucket}/{key}"


class SupabaseBlobStorage:
    """Object storage backed by a Supabase Storage bucket."""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        base_url: str = settings.supabase_url,
        service_key: str = settings.supabase_service_role_key,
        bucket: str = settings.storage_bucket,
    ) -> None:
        self._client = http_client
        self._base_url = base_url.rstrip("/")
        self._service_key = service_key
        self._bucket = bucket

    def public_url(self, key: str) -> str:
        return self._url(PUBLIC_OBJECT_PATH, key=key)

    async def upload(self, key: str, data: bytes, content_type: str) -> str:
        self._require_configured(key)
        url = self._url(OBJECT_PATH, key=key)
        headers = self._auth_headers()
        headers.update(
            {
                "Content-Type": content_type,
                "Cache-Control": "max-age=3600",
                "x-upsert": "false",
            }
        )

        try:
            response = await self._client.post(url, content=data, headers=headers)
        except httpx.HTTPError as e:
            logger.error("storage_upload_transport_error", key=key, error=str(e))
            raise StorageError(f"Could not reach image storage: {e}", key=key) from e

        if response.is_error:
            message = self._error_message(response)
            logger.error(
                "storage_upload_rejected",
                key=key,
                status_code=response.status_code,
                error=message,
            )
            raise StorageError(message, key=key)

        logger.info("storage_upload_completed", key=key, size=len(data))
        return self.public_url(key)

    async def remove(self, key: str) -> None:
        self._require_configured(key)
        url = self._url(BUCKET_OBJECTS_PATH)

        try:
            response = await self._client.request(
                "DELETE",
                url,
                json={"prefixes": [key]},
                headers=self._auth_headers(),
            )
        except httpx.HTTPError as e:
            raise StorageError(f"Could not reach image storage: {e}", key=key) from e

        # Missing objects are already gone
        if response.status_code == 404:
            return
        if response.is_error:
            raise StorageError(self._error_message(response), key=key)

        logger.info("storage_object_removed", key=key)

    def _url(self, path: str, **parts: str) -> str:
        return self._base_url + path.format(bucket=self._bucket, **parts)

    def _require_configured(self, key: str) -> None:
        if not self._base_url or not self._service_key:
            raise StorageError("Image storage is not configured", key=key)

    def _auth_headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self._service_key}",
            "apikey": self._service_key,
        }

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            body = None
        if isinstance(body, dict):
            message = body.get("message") or body.get("error")
            if message:
                return str(message)
        return f"Image storage error: {response.status_code}"
