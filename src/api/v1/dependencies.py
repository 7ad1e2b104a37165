"""Dependency injection factories for API v1."""

from typing import Callable

import httpx
from fastapi import Depends, Request

from core.config import settings
from core.exceptions import CameraUnavailableError
from domain.services.capture_service import CaptureService
from domain.services.image_service import ImageService
from domain.services.profile_service import FailurePolicies, ProfileService
from infrastructure.capture.opencv_camera import OpenCVCamera
from infrastructure.database.session import async_session_factory
from infrastructure.database.sqlalchemy_uow import SQLAlchemyUnitOfWork
from infrastructure.face.http_encoder import HTTPFaceEncoder
from infrastructure.storage.supabase_storage import SupabaseBlobStorage


def get_uow_factory() -> Callable[[], SQLAlchemyUnitOfWork]:
    """Factory for creating Unit of Work instances."""

    def factory() -> SQLAlchemyUnitOfWork:
        return SQLAlchemyUnitOfWork(async_session_factory)

    return factory


def get_http_client(request: Request) -> httpx.AsyncClient:
    """The process-wide outbound HTTP client opened in the app lifespan."""
    return request.app.state.http_client  # type: ignore[no-any-return]


def build_face_encoder(http_client: httpx.AsyncClient) -> HTTPFaceEncoder:
    """Face recognition client from settings. Built once per application."""
    return HTTPFaceEncoder(
        http_client,
        base_url=settings.face_api_url,
        api_key=settings.face_api_key,
        timeout_seconds=settings.face_api_timeout_seconds,
    )


def get_face_encoder(request: Request) -> HTTPFaceEncoder:
    """The face recognition client opened in the app lifespan."""
    return request.app.state.face_encoder  # type: ignore[no-any-return]


def get_image_service(
    http_client: httpx.AsyncClient = Depends(get_http_client),
) -> ImageService:
    """Get the image upload service."""
    storage = SupabaseBlobStorage(
        http_client,
        base_url=settings.supabase_url,
        service_key=settings.supabase_service_role_key,
        bucket=settings.storage_bucket,
    )
    return ImageService(storage, max_bytes=settings.max_image_bytes)


def get_profile_service(
    images: ImageService = Depends(get_image_service),
    encoder: HTTPFaceEncoder = Depends(get_face_encoder),
) -> ProfileService:
    """Get Profile service instance."""
    return ProfileService(
        get_uow_factory(),
        images=images,
        encoder=encoder,
        policies=FailurePolicies(
            image_upload=settings.image_upload_policy,
            face_encoding=settings.face_encoding_policy,
        ),
    )


def get_capture_service() -> CaptureService:
    """Get the camera capture service, if capture is enabled."""
    if not settings.camera_enabled:
        raise CameraUnavailableError("Camera capture is disabled")
    return CaptureService(lambda: OpenCVCamera(camera_index=settings.camera_index))
