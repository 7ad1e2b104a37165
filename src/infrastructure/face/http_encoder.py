"""HTTP client for the external face recognition service.

Provider contract:
    POST {FACE_API_URL}/generate-encoding
    {"imageUrl": "https://..."}  ->  {"encoding": [0.12, ...]}

Some provider builds return the encoding as a JSON string
(``"[0.12, ...]"``); both shapes are accepted. Errors carry a FastAPI-style
``{"detail": "..."}`` body.
"""

import asyncio
from typing import Any

import httpx
import orjson
import structlog

from core.config import settings
from core.exceptions import (
    ConfigurationError,
    EncodingError,
    EncodingTimeoutError,
    MultipleFacesDetectedError,
    NoFaceDetectedError,
    ProviderError,
)

logger = structlog.get_logger()


class HTTPFaceEncoder:
    """Relays image URLs to the face recognition service with a hard time bound."""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        base_url: str = settings.face_api_url,
        api_key: str = settings.face_api_key,
        timeout_seconds: float = settings.face_api_timeout_seconds,
    ) -> None:
        self._client = http_client
        self._base_url = base_url.strip().rstrip("/")
        self._api_key = api_key
        self._timeout = timeout_seconds
        self._warned_missing_key = False

    @property
    def configured(self) -> bool:
        return bool(self._base_url)

    async def encode(self, image_url: str) -> list[float]:
        """Request the encoding for ``image_url``.

        The whole exchange, connect through body read, is bounded by the
        configured timeout. When the bound fires the in-flight request is
        cancelled and its connection released.
        """
        if not self._base_url:
            logger.error("face_service_not_configured")
            raise ConfigurationError()

        endpoint = f"{self._base_url}/generate-encoding"
        logger.info("face_encoding_requested", endpoint=endpoint)

        try:
            response = await asyncio.wait_for(
                self._client.post(
                    endpoint,
                    json={"imageUrl": image_url},
                    headers=self._headers(),
                    timeout=self._timeout,
                ),
                timeout=self._timeout,
            )
        except (asyncio.TimeoutError, httpx.TimeoutException) as e:
            logger.warning("face_encoding_timeout", timeout_seconds=self._timeout)
            raise EncodingTimeoutError(self._timeout) from e
        except httpx.HTTPError as e:
            logger.error("face_encoding_transport_error", error=str(e))
            raise ProviderError(f"Could not reach face recognition service: {e}") from e

        logger.info("face_encoding_response", status_code=response.status_code)

        if response.is_error:
            raise self._error_from_response(response)

        return self._parse_encoding(response)

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self._api_key:
            headers["Authorization"] = f"Bearer {self._api_key}"
        elif not self._warned_missing_key:
            logger.warning("face_api_key_not_set")
            self._warned_missing_key = True
        return headers

    @staticmethod
    def _error_from_response(response: httpx.Response) -> EncodingError:
        """Map a provider error response onto the encoding error taxonomy."""
        try:
            body = response.json()
        except ValueError:
            body = None

        detail = body.get("detail") if isinstance(body, dict) else None
        if detail is not None and not isinstance(detail, str):
            detail = str(detail)

        logger.error(
            "face_service_error",
            status_code=response.status_code,
            detail=detail,
        )

        # The condition comes from the detail; the status is always the provider's
        lowered = (detail or "").lower()
        status_code = response.status_code
        if "multiple face" in lowered:
            return MultipleFacesDetectedError(
                detail or "Multiple faces detected in image", status_code=status_code
            )
        if "no face" in lowered or status_code == 422:
            return NoFaceDetectedError(
                detail or "No face detected in image", status_code=status_code
            )

        return ProviderError(
            detail or f"Face recognition service error: {response.status_code}",
            status_code=response.status_code,
        )

    @staticmethod
    def _parse_encoding(response: httpx.Response) -> list[float]:
        try:
            body = response.json()
        except ValueError as e:
            raise ProviderError("Face recognition service returned invalid JSON") from e

        raw: Any = body.get("encoding") if isinstance(body, dict) else None
        if isinstance(raw, str):
            try:
                raw = orjson.loads(raw)
            except orjson.JSONDecodeError as e:
                raise ProviderError(
                    "Face recognition service returned an unreadable encoding"
                ) from e

        if not isinstance(raw, list) or not raw or not all(
            isinstance(value, (int, float)) and not isinstance(value, bool)
            for value in raw
        ):
            raise ProviderError("Face recognition service returned an invalid encoding")

        return [float(value) for value in raw]
