"""Camera capture routes."""

from fastapi import APIRouter, Depends, Request, Response

from api.v1.dependencies import get_capture_service
from api.v1.schemas.common import ErrorResponse
from core.rate_limit import WRITE_LIMIT, limiter
from domain.services.capture_service import CaptureService

router = APIRouter(prefix="/captures", tags=["captures"])


@router.post(
    "",
    summary="Capture one camera frame",
    response_class=Response,
    responses={
        200: {"content": {"image/jpeg": {}}, "description": "JPEG frame"},
        503: {"model": ErrorResponse, "description": "Camera disabled or unavailable"},
    },
)
@limiter.limit(WRITE_LIMIT)  # type: ignore[untyped-decorator]
async def capture_frame(
    request: Request,
    service: CaptureService = Depends(get_capture_service),
) -> Response:
    """Open the camera, grab one frame and release the camera again."""
    image = await service.capture_still()
    return Response(
        content=image.data,
        media_type="image/jpeg",
        headers={"Content-Disposition": f'inline; filename="{image.filename}"'},
    )
