"""SQLAlchemy implementation of Profile repository."""

from collections.abc import Iterator
from contextlib import contextmanager
from uuid import UUID

import structlog
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from core.exceptions import PersistenceError
from domain.entities.profile import Profile
from infrastructure.database.models import ProfileModel

logger = structlog.get_logger()


@contextmanager
def translate_db_errors(action: str) -> Iterator[None]:
    """Re-raise driver errors as PersistenceError."""
    try:
        yield
    except SQLAlchemyError as e:
        logger.error("database_error", action=action, error=str(e))
        raise PersistenceError(f"Failed to {action}: {e.__class__.__name__}") from e


class SQLAlchemyProfileRepository:
    """SQLAlchemy implementation of IProfileRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, id: UUID) -> Profile | None:
        """Get a profile by ID."""
        with translate_db_errors("load profile"):
            model = await self._get_model(id)
        return self._to_entity(model) if model else None

    async def list_all(self) -> list[Profile]:
        """Get all profiles, newest first."""
        stmt = select(ProfileModel).order_by(ProfileModel.created_at.desc())
        with translate_db_errors("list profiles"):
            result = await self._session.execute(stmt)
        return [self._to_entity(model) for model in result.scalars()]

    async def create(self, profile: Profile) -> Profile:
        """Create a new profile."""
        model = self._to_model(profile)
        with translate_db_errors("create profile"):
            self._session.add(model)
            await self._session.flush()
        return self._to_entity(model)

    async def update(self, profile: Profile) -> Profile | None:
        """Overwrite editable columns. ``id`` and ``created_at`` are never touched."""
        with translate_db_errors("update profile"):
            model = await self._get_model(profile.id)
            if not model:
                return None

            model.name = profile.name
            model.greeting = profile.greeting
            model.bio = profile.bio
            model.image_url = profile.image_url
            model.face_encoding = profile.face_encoding
            model.updated_at = profile.updated_at
            await self._session.flush()
        return self._to_entity(model)

    async def delete(self, id: UUID) -> bool:
        """Delete a profile. Deleting a missing id returns False."""
        with translate_db_errors("delete profile"):
            model = await self._get_model(id)
            if not model:
                return False

            await self._session.delete(model)
            await self._session.flush()
        return True

    async def _get_model(self, id: UUID) -> ProfileModel | None:
        stmt = select(ProfileModel).where(ProfileModel.id == id)
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    def _to_entity(self, model: ProfileModel) -> Profile:
        """Convert ORM model to domain entity."""
        return Profile(
            id=model.id,
            name=model.name,
            greeting=model.greeting,
            bio=model.bio,
            image_url=model.image_url,
            face_encoding=(
                [float(v) for v in model.face_encoding]
                if model.face_encoding is not None
                else None
            ),
            created_at=model.created_at,
            updated_at=model.updated_at,
        )

    def _to_model(self, entity: Profile) -> ProfileModel:
        """Convert domain entity to ORM model."""
        return ProfileModel(
            id=entity.id,
            name=entity.name,
            greeting=entity.greeting,
            bio=entity.bio,
            image_url=entity.image_url,
            face_encoding=entity.face_encoding,
            created_at=entity.created_at,
            updated_at=entity.updated_at,
        )
