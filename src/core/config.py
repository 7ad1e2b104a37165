"""Application configuration using Pydantic Settings."""

from functools import lru_cache
from typing import Literal

from pydantic import AliasChoices, Field, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict

FailurePolicy = Literal["strict", "lenient"]


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    # Application
    app_name: str = Field(default="Profiles API")
    app_env: str = Field(default="development")
    debug: bool = Field(default=False)

    # Server
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8000)

    # Database
    database_url: str = Field(
        default="postgresql+asyncpg://localhost:5432/profiles",
        description="PostgreSQL connection URL with asyncpg driver",
    )

    # Supabase storage
    supabase_url: str = Field(
        default="",
        description="Supabase project URL (e.g. https://xyzabc.supabase.co)",
    )
    supabase_service_role_key: str = Field(
        default="",
        description="Supabase service role key (server-side only, keep secret)",
    )
    storage_bucket: str = Field(default="profile_images")
    max_image_bytes: int = Field(
        default=5 * 1024 * 1024,
        description="Largest accepted profile image upload, in bytes",
    )

    # Face encoding provider
    face_api_url: str = Field(
        default="",
        validation_alias=AliasChoices("face_api_url", "railway_face_api_url"),
        description="Base URL of the face recognition service",
    )
    face_api_key: str = Field(
        default="",
        validation_alias=AliasChoices("face_api_key", "railway_face_api_key"),
        description="Optional bearer credential for the face recognition service",
    )
    face_api_timeout_seconds: float = Field(default=30.0, gt=0)

    # Failure policy per pipeline step
    image_upload_policy: FailurePolicy = Field(
        default="lenient",
        description="strict: abort on upload failure; lenient: keep the previous image",
    )
    face_encoding_policy: FailurePolicy = Field(
        default="lenient",
        description="strict: abort on encoding failure; lenient: persist without encoding",
    )

    # Camera capture
    camera_enabled: bool = Field(default=False)
    camera_index: int = Field(default=0)

    # Rate Limiting
    rate_limit_enabled: bool = Field(
        default=True,
        description="Enable/disable rate limiting (disable for tests)",
    )

    # CORS
    cors_origins: str = Field(
        default="http://localhost:3000,http://localhost:5173",
        description="Comma-separated list of allowed origins",
    )

    @computed_field  # type: ignore[prop-decorator]
    @property
    def async_database_url(self) -> str:
        """Ensure the database URL uses the asyncpg driver scheme.

        Render and other providers supply a standard ``postgresql://`` URL.
        SQLAlchemy's async engine requires ``postgresql+asyncpg://``.
        """
        url = self.database_url
        if url.startswith("postgresql://"):
            url = url.replace("postgresql://", "postgresql+asyncpg://", 1)
        return url

    @computed_field  # type: ignore[prop-decorator]
    @property
    def face_service_configured(self) -> bool:
        """Whether a face recognition base URL is set."""
        return bool(self.face_api_url.strip())

    @computed_field  # type: ignore[prop-decorator]
    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.app_env == "production"

    @computed_field  # type: ignore[prop-decorator]
    @property
    def cors_origins_list(self) -> list[str]:
        """Parse CORS origins into a list."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
