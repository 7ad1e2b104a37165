"""Pytest configuration and fixtures."""

import os
import sys
from collections.abc import AsyncGenerator
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock

# Disable rate limiting in tests
os.environ["RATE_LIMIT_ENABLED"] = "false"

import httpx
import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.ext.compiler import compiles
from sqlalchemy.pool import StaticPool

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from infrastructure.database.models import Base


# Compile JSONB as JSON for SQLite (used in tests)
@compiles(JSONB, "sqlite")
def _compile_jsonb_sqlite(type_: Any, compiler: Any, **kw: Any) -> str:
    return "JSON"


# Test database URL (SQLite in memory, one shared connection per engine)
TEST_DATABASE_URL = "sqlite+aiosqlite://"

STORAGE_URL = "https://project.supabase.co"
FACE_API_URL = "https://face.example.com"


@pytest.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """Create a fresh in-memory database for each test."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create session factory."""
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


@pytest.fixture
def face_api() -> AsyncMock:
    """Stand-in for the remote face recognition service.

    Set ``return_value`` or ``side_effect`` to an ``httpx.Response``.
    """
    handler = AsyncMock()
    handler.return_value = httpx.Response(200, json={"encoding": [0.01 * i for i in range(128)]})
    return handler


@pytest.fixture
def storage_api() -> AsyncMock:
    """Stand-in for the Supabase Storage REST API."""
    handler = AsyncMock()
    handler.return_value = httpx.Response(200, json={"Key": "profile_images/object"})
    return handler


@pytest.fixture
async def http_client(
    face_api: AsyncMock, storage_api: AsyncMock
) -> AsyncGenerator[httpx.AsyncClient, None]:
    """Outbound client that routes to the fake face service or fake storage by host."""

    async def route(request: httpx.Request) -> httpx.Response:
        if request.url.host == httpx.URL(FACE_API_URL).host:
            return await face_api(request)  # type: ignore[no-any-return]
        return await storage_api(request)  # type: ignore[no-any-return]

    async with httpx.AsyncClient(transport=httpx.MockTransport(route)) as c:
        yield c


@pytest.fixture
def app(
    session_factory: async_sessionmaker[AsyncSession],
    http_client: httpx.AsyncClient,
) -> FastAPI:
    """
    Application wired to test doubles.

    This app:
    - Uses an in-memory SQLite database
    - Sends storage and face service calls to in-process fakes
    - Runs with lenient failure policies
    """
    from api.v1.dependencies import get_face_encoder, get_profile_service
    from domain.services.image_service import ImageService
    from domain.services.profile_service import FailurePolicies, ProfileService
    from infrastructure.database.session import get_async_session
    from infrastructure.database.sqlalchemy_uow import SQLAlchemyUnitOfWork
    from infrastructure.face.http_encoder import HTTPFaceEncoder
    from infrastructure.storage.supabase_storage import SupabaseBlobStorage
    from main import create_app

    app = create_app()

    def test_uow_factory() -> SQLAlchemyUnitOfWork:
        return SQLAlchemyUnitOfWork(session_factory)

    def override_get_face_encoder() -> HTTPFaceEncoder:
        return HTTPFaceEncoder(
            http_client, base_url=FACE_API_URL, api_key="test-key", timeout_seconds=1.0
        )

    def override_get_profile_service() -> ProfileService:
        storage = SupabaseBlobStorage(
            http_client,
            base_url=STORAGE_URL,
            service_key="service-key",
            bucket="profile_images",
        )
        return ProfileService(
            test_uow_factory,
            images=ImageService(storage),
            encoder=override_get_face_encoder(),
            policies=FailurePolicies(),
        )

    async def override_get_async_session() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_face_encoder] = override_get_face_encoder
    app.dependency_overrides[get_profile_service] = override_get_profile_service
    app.dependency_overrides[get_async_session] = override_get_async_session
    return app


@pytest.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """Create async test client against the wired app."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c

    app.dependency_overrides.clear()
