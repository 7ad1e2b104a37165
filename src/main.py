"""Main FastAPI application entry point."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import httpx
import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import ORJSONResponse
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from api.exception_handlers import setup_exception_handlers
from api.middleware.logging import RequestLoggingMiddleware
from api.middleware.request_id import RequestIDMiddleware
from api.middleware.security import SecurityHeadersMiddleware
from api.routes.face_encoding import router as face_encoding_router
from api.routes.health import router as health_router
from api.v1 import router as v1_router
from api.v1.dependencies import build_face_encoder
from core.config import settings
from core.logging import setup_logging
from core.rate_limit import limiter, rate_limit_exceeded_handler
from infrastructure.database.session import engine

logger = structlog.get_logger()

# Initialize structured logging
setup_logging()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Own the process-wide HTTP client and database engine."""
    if not settings.face_service_configured:
        logger.warning("face_service_not_configured")
    if not settings.supabase_url:
        logger.warning("image_storage_not_configured")

    async with httpx.AsyncClient(timeout=10.0) as http_client:
        app.state.http_client = http_client
        app.state.face_encoder = build_face_encoder(http_client)
        logger.info(
            "application_started",
            image_upload_policy=settings.image_upload_policy,
            face_encoding_policy=settings.face_encoding_policy,
        )
        yield

    await engine.dispose()
    logger.info("application_stopped")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        lifespan=lifespan,
        default_response_class=ORJSONResponse,
        title=settings.app_name,
        description=(
            "## Profiles\n\n"
            "Manage profiles with a name, greeting, bio, image and an optional "
            "face encoding.\n\n"
            "### Image pipeline\n"
            "Creating or updating a profile with an image uploads it to object "
            "storage, asks the face recognition service for an encoding and then "
            "saves the profile. Recoverable failures are reported as warning "
            "notifications in the response.\n\n"
            "### Rate Limits\n"
            "- GET endpoints: 30 requests/minute\n"
            "- POST/PUT/DELETE: 10 requests/minute"
        ),
        version="1.0.0",
        debug=settings.debug,
        license_info={
            "name": "MIT",
        },
        openapi_tags=[
            {
                "name": "health",
                "description": "Health check endpoints",
            },
            {
                "name": "profiles",
                "description": "Profile management operations",
            },
            {
                "name": "face-encoding",
                "description": "Face encoding gateway",
            },
            {
                "name": "captures",
                "description": "Camera capture",
            },
        ],
    )

    _add_middleware(app)
    setup_exception_handlers(app)

    app.include_router(health_router)
    # Unversioned path kept for existing face encoding clients
    app.include_router(face_encoding_router)
    app.include_router(v1_router, prefix="/api/v1")

    return app


def _add_middleware(app: FastAPI) -> None:
    """Install middleware. Starlette runs the last one added first."""
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
    app.add_middleware(SlowAPIMiddleware)

    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # Profile lists carry 128-float encodings per row
    app.add_middleware(GZipMiddleware, minimum_size=1000)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "Content-Disposition"],
    )


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host=settings.host,
        port=settings.port,
        reload=not settings.is_production,
    )
