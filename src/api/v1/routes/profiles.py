"""Profile API routes."""

from uuid import UUID

from fastapi import APIRouter, Depends, File, Form, Request, UploadFile, status
from starlette.datastructures import FormData

from api.v1.dependencies import get_profile_service
from api.v1.schemas.common import ErrorResponse
from api.v1.schemas.profile import (
    NotificationResponse,
    ProfileDetailResponse,
    ProfileListResponse,
    ProfileOutcomeResponse,
    ProfileResponse,
)
from core.rate_limit import READ_LIMIT, WRITE_LIMIT, limiter
from domain.entities.profile import ImageUpload, ProfileFields
from domain.services.profile_service import ProfileOutcome, ProfileService

router = APIRouter(prefix="/profiles", tags=["profiles"])


async def _read_image(upload: UploadFile | None) -> ImageUpload | None:
    """Turn a multipart file part into an ImageUpload.

    Browsers send an empty, unnamed part when no file was chosen.
    """
    if upload is None or not upload.filename:
        return None
    data = await upload.read()
    return ImageUpload(
        data=data,
        filename=upload.filename,
        content_type=upload.content_type,
    )


def _submitted(form: FormData, key: str, parsed: str | None) -> str | None:
    """Value of an update field: None when omitted, "" when sent blank.

    FastAPI reports a blank form field as missing, so presence is read
    from the raw form.
    """
    if parsed is not None:
        return parsed
    return "" if key in form else None


def _outcome_response(outcome: ProfileOutcome) -> ProfileOutcomeResponse:
    return ProfileOutcomeResponse(
        data=ProfileResponse.model_validate(outcome.profile),
        notifications=[
            NotificationResponse.model_validate(n) for n in outcome.notifications
        ],
        redirect_to=outcome.redirect_to,
    )


@router.get(
    "",
    response_model=ProfileListResponse,
    summary="List all profiles",
)
@limiter.limit(READ_LIMIT)  # type: ignore[untyped-decorator]
async def list_profiles(
    request: Request,
    service: ProfileService = Depends(get_profile_service),
) -> ProfileListResponse:
    """Get all profiles, newest first."""
    profiles = await service.list_profiles()
    return ProfileListResponse(
        data=[ProfileResponse.model_validate(p) for p in profiles]
    )


@router.post(
    "",
    response_model=ProfileOutcomeResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a profile",
    responses={
        201: {"description": "Profile created (possibly with warnings)"},
        400: {"model": ErrorResponse, "description": "Invalid input"},
        422: {"model": ErrorResponse, "description": "No face detected (strict mode)"},
        502: {"model": ErrorResponse, "description": "Image upload failed (strict mode)"},
    },
)
@limiter.limit(WRITE_LIMIT)  # type: ignore[untyped-decorator]
async def create_profile(
    request: Request,
    name: str = Form(""),
    greeting: str | None = Form(None),
    bio: str | None = Form(None),
    image: UploadFile | None = File(None),
    service: ProfileService = Depends(get_profile_service),
) -> ProfileOutcomeResponse:
    """Create a profile from a multipart form.

    When an image is attached it is uploaded and encoded before the row
    is written. Recoverable failures come back as warning notifications.
    """
    outcome = await service.create_profile(
        ProfileFields(name=name, greeting=greeting, bio=bio),
        image=await _read_image(image),
    )
    return _outcome_response(outcome)


@router.get(
    "/{profile_id}",
    response_model=ProfileDetailResponse,
    summary="Get a profile",
    responses={404: {"model": ErrorResponse, "description": "Profile not found"}},
)
@limiter.limit(READ_LIMIT)  # type: ignore[untyped-decorator]
async def get_profile(
    request: Request,
    profile_id: UUID,
    service: ProfileService = Depends(get_profile_service),
) -> ProfileDetailResponse:
    """Get a single profile by ID."""
    profile = await service.get_profile(profile_id)
    return ProfileDetailResponse(data=ProfileResponse.model_validate(profile))


@router.put(
    "/{profile_id}",
    response_model=ProfileOutcomeResponse,
    summary="Update a profile",
    responses={
        200: {"description": "Profile updated (possibly with warnings)"},
        400: {"model": ErrorResponse, "description": "Invalid input"},
        404: {"model": ErrorResponse, "description": "Profile not found"},
    },
)
@limiter.limit(WRITE_LIMIT)  # type: ignore[untyped-decorator]
async def update_profile(
    request: Request,
    profile_id: UUID,
    name: str | None = Form(None),
    greeting: str | None = Form(None),
    bio: str | None = Form(None),
    image: UploadFile | None = File(None),
    remove_image: bool = Form(False),
    service: ProfileService = Depends(get_profile_service),
) -> ProfileOutcomeResponse:
    """Update a profile. Omitted fields are kept; blank fields are cleared."""
    form = await request.form()
    outcome = await service.update_profile(
        profile_id,
        ProfileFields(
            name=_submitted(form, "name", name),
            greeting=_submitted(form, "greeting", greeting),
            bio=_submitted(form, "bio", bio),
        ),
        image=await _read_image(image),
        remove_image=remove_image,
    )
    return _outcome_response(outcome)


@router.delete(
    "/{profile_id}",
    response_model=ProfileOutcomeResponse,
    summary="Delete a profile",
    responses={
        200: {"description": "Profile deleted"},
        404: {"model": ErrorResponse, "description": "Profile not found"},
    },
)
@limiter.limit(WRITE_LIMIT)  # type: ignore[untyped-decorator]
async def delete_profile(
    request: Request,
    profile_id: UUID,
    service: ProfileService = Depends(get_profile_service),
) -> ProfileOutcomeResponse:
    """Delete a profile and, best-effort, its image."""
    outcome = await service.delete_profile(profile_id)
    return _outcome_response(outcome)
