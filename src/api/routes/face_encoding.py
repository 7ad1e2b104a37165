"""Face encoding gateway endpoint."""

from fastapi import APIRouter, Depends, Request

from api.v1.dependencies import get_face_encoder
from api.v1.schemas.common import ErrorResponse
from api.v1.schemas.face_encoding import FaceEncodingRequest, FaceEncodingResponse
from core.exceptions import ConfigurationError, ValidationError
from core.rate_limit import WRITE_LIMIT, limiter
from infrastructure.face.http_encoder import HTTPFaceEncoder

router = APIRouter(tags=["face-encoding"])


@router.post(
    "/generate-face-encoding",
    response_model=FaceEncodingResponse,
    summary="Generate a face encoding for an image URL",
    responses={
        400: {"model": ErrorResponse, "description": "Missing imageUrl or multiple faces"},
        422: {"model": ErrorResponse, "description": "No face detected"},
        500: {"model": ErrorResponse, "description": "Service not configured"},
        502: {"model": ErrorResponse, "description": "Face recognition service failed"},
        504: {"model": ErrorResponse, "description": "Face recognition service timed out"},
    },
)
@limiter.limit(WRITE_LIMIT)  # type: ignore[untyped-decorator]
async def generate_face_encoding(
    request: Request,
    body: FaceEncodingRequest | None = None,
    encoder: HTTPFaceEncoder = Depends(get_face_encoder),
) -> FaceEncodingResponse:
    """Relay an image URL to the face recognition service and return its encoding."""
    if not encoder.configured:
        raise ConfigurationError()

    image_url = (body.image_url or "").strip() if body else ""
    if not image_url:
        raise ValidationError("Image URL is required", details={"field": "imageUrl"})

    encoding = await encoder.encode(image_url)
    return FaceEncodingResponse(encoding=encoding)
