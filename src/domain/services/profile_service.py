"""Profile service: the upload -> encode -> persist pipeline.

Every create or update runs through

    IDLE -> UPLOADING -> ENCODING -> PERSISTING -> SUCCESS | FAILED

Upload and encoding failures are handled per ``FailurePolicies``:
``strict`` aborts before anything is written, ``lenient`` degrades
(keeps the previous image, or stores no encoding) and adds a warning
notification. Persistence failures always abort. A blob uploaded before
a later failure is not removed.
"""

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from typing import Optional
from uuid import UUID

import structlog

from core.config import FailurePolicy
from core.exceptions import (
    AppException,
    EncodingError,
    ProfileNotFoundError,
    StorageError,
    ValidationError,
)
from domain.entities.notification import Notification
from domain.entities.profile import ImageUpload, Profile, ProfileFields
from domain.repositories.unit_of_work import IUnitOfWork
from domain.services.image_service import ImageService
from infrastructure.face.provider import IFaceEncoder

logger = structlog.get_logger()

NAME_MAX_LENGTH = 100
GREETING_MAX_LENGTH = 255


class PipelineStage(StrEnum):
    """Stages of a profile create/update."""

    IDLE = "idle"
    UPLOADING = "uploading"
    ENCODING = "encoding"
    PERSISTING = "persisting"
    SUCCESS = "success"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class FailurePolicies:
    """How each recoverable step reacts to failure."""

    image_upload: FailurePolicy = "lenient"
    face_encoding: FailurePolicy = "lenient"


@dataclass
class ProfileOutcome:
    """Result of a profile operation, ready to show to the user."""

    profile: Profile
    notifications: list[Notification] = field(default_factory=list)
    redirect_to: str | None = None
    stage: PipelineStage = PipelineStage.SUCCESS


@dataclass
class _Run:
    """Per-operation working state."""

    operation: str
    stage: PipelineStage = PipelineStage.IDLE
    notifications: list[Notification] = field(default_factory=list)

    def advance(self, stage: PipelineStage) -> None:
        self.stage = stage
        logger.debug("profile_pipeline_stage", operation=self.operation, stage=stage.value)


def _clean_optional(value: str | None) -> str | None:
    """Blank optional text is stored as null."""
    if value is None:
        return None
    value = value.strip()
    return value or None


class ProfileService:
    """Service layer for Profile business logic."""

    def __init__(
        self,
        uow_factory: Callable[[], IUnitOfWork],
        images: ImageService,
        encoder: IFaceEncoder,
        policies: Optional[FailurePolicies] = None,
    ) -> None:
        self._uow_factory = uow_factory
        self._images = images
        self._encoder = encoder
        self._policies = policies or FailurePolicies()

    async def list_profiles(self) -> list[Profile]:
        """All profiles, newest first."""
        async with self._uow_factory() as uow:
            return await uow.profiles.list_all()  # type: ignore[no-any-return]

    async def get_profile(self, profile_id: UUID) -> Profile:
        """Get a profile or raise ProfileNotFoundError."""
        async with self._uow_factory() as uow:
            profile = await uow.profiles.get(profile_id)
        if not profile:
            raise ProfileNotFoundError(str(profile_id))
        return profile

    async def create_profile(
        self,
        fields: ProfileFields,
        image: Optional[ImageUpload] = None,
    ) -> ProfileOutcome:
        """Create a profile, uploading and encoding the image first if one is given."""
        run = _Run(operation="create_profile")
        name = self._validate_name(fields.name)
        greeting = self._validate_greeting(fields.greeting)
        if image is not None:
            self._images.validate(image)

        try:
            image_url: str | None = None
            encoding: list[float] | None = None

            if image is not None:
                image_url = await self._upload(
                    run, image, "Profile will be created without an image."
                )
                if image_url:
                    encoding = await self._encode(run, image_url)

            run.advance(PipelineStage.PERSISTING)
            now = datetime.utcnow()
            profile = Profile(
                name=name,
                greeting=_clean_optional(greeting),
                bio=_clean_optional(fields.bio),
                image_url=image_url,
                face_encoding=encoding,
                created_at=now,
                updated_at=now,
            )
            async with self._uow_factory() as uow:
                created = await uow.profiles.create(profile)
                await uow.commit()
        except AppException as e:
            self._log_failure(run, e)
            raise

        run.advance(PipelineStage.SUCCESS)
        logger.info(
            "profile_created",
            profile_id=str(created.id),
            has_image=created.image_url is not None,
            has_encoding=created.face_encoding is not None,
        )
        run.notifications.append(
            Notification.success(
                "Profile created", "Your profile has been created successfully."
            )
        )
        return ProfileOutcome(
            profile=created,
            notifications=run.notifications,
            redirect_to="/profiles",
        )

    async def update_profile(
        self,
        profile_id: UUID,
        fields: ProfileFields,
        image: Optional[ImageUpload] = None,
        remove_image: bool = False,
    ) -> ProfileOutcome:
        """Overwrite a profile.

        Omitted fields keep their stored value. Without a new image the
        stored image and encoding are kept, except that an image which
        never got an encoding is encoded now. A replaced or removed image
        is deleted from storage once the row is saved.
        """
        run = _Run(operation="update_profile")
        existing = await self.get_profile(profile_id)

        name = existing.name if fields.name is None else self._validate_name(fields.name)
        greeting = self._validate_greeting(fields.greeting)
        if image is not None:
            self._images.validate(image)

        try:
            image_url = existing.image_url
            encoding = existing.face_encoding
            stale_url: str | None = None

            if image is not None:
                new_url = await self._upload(run, image, "The previous image was kept.")
                if new_url:
                    stale_url = existing.image_url
                    image_url = new_url
                    encoding = await self._encode(run, new_url)
            elif remove_image:
                stale_url = existing.image_url
                image_url = None
                encoding = None
            elif image_url and encoding is None:
                encoding = await self._encode(run, image_url)

            run.advance(PipelineStage.PERSISTING)
            existing.name = name
            if greeting is not None:
                existing.greeting = _clean_optional(greeting)
            if fields.bio is not None:
                existing.bio = _clean_optional(fields.bio)
            existing.image_url = image_url
            existing.face_encoding = encoding
            existing.updated_at = datetime.utcnow()

            async with self._uow_factory() as uow:
                updated = await uow.profiles.update(existing)
                if updated is None:
                    raise ProfileNotFoundError(str(profile_id))
                await uow.commit()
        except AppException as e:
            self._log_failure(run, e)
            raise

        run.advance(PipelineStage.SUCCESS)
        logger.info(
            "profile_updated",
            profile_id=str(profile_id),
            image_replaced=stale_url is not None,
            has_encoding=updated.face_encoding is not None,
        )

        if stale_url:
            await self._discard_image(stale_url)

        run.notifications.append(
            Notification.success(
                "Profile updated", "Your changes have been saved successfully."
            )
        )
        return ProfileOutcome(
            profile=updated,
            notifications=run.notifications,
            redirect_to=f"/profiles/{profile_id}",
        )

    async def delete_profile(self, profile_id: UUID) -> ProfileOutcome:
        """Delete a profile. Image removal is best-effort and never blocks the row delete."""
        profile = await self.get_profile(profile_id)
        notifications: list[Notification] = []

        if profile.image_url:
            try:
                await self._images.delete(profile.image_url)
            except StorageError as e:
                logger.warning(
                    "profile_image_delete_failed",
                    profile_id=str(profile_id),
                    error=e.message,
                )
                notifications.append(
                    Notification.warning(
                        "Image Not Removed",
                        "The profile image could not be removed from storage.",
                    )
                )

        async with self._uow_factory() as uow:
            await uow.profiles.delete(profile_id)
            await uow.commit()

        logger.info("profile_deleted", profile_id=str(profile_id))
        notifications.append(
            Notification.success(
                "Profile deleted", "The profile has been deleted successfully."
            )
        )
        return ProfileOutcome(
            profile=profile,
            notifications=notifications,
            redirect_to="/profiles",
        )

    async def _upload(self, run: _Run, image: ImageUpload, fallback: str) -> str | None:
        """Upload a new image. Returns None when a lenient policy swallowed a failure."""
        run.advance(PipelineStage.UPLOADING)
        try:
            return await self._images.upload(image)
        except StorageError as e:
            if self._policies.image_upload == "strict":
                raise
            logger.warning("image_upload_skipped", operation=run.operation, error=e.message)
            run.notifications.append(
                Notification.warning(
                    "Image Upload Failed",
                    f"There was a problem uploading your image. {fallback}",
                )
            )
            return None

    async def _encode(self, run: _Run, image_url: str) -> list[float] | None:
        """Fetch the face encoding. Returns None when a lenient policy swallowed a failure."""
        run.advance(PipelineStage.ENCODING)
        try:
            return await self._encoder.encode(image_url)
        except EncodingError as e:
            if self._policies.face_encoding == "strict":
                raise
            logger.warning(
                "face_encoding_skipped",
                operation=run.operation,
                error_code=e.error_code.value,
            )
            run.notifications.append(
                Notification.warning(
                    e.title,
                    f"{e.message} The profile was saved without a face encoding.",
                )
            )
            return None

    async def _discard_image(self, image_url: str) -> None:
        try:
            await self._images.delete(image_url)
        except StorageError as e:
            logger.warning("stale_image_delete_failed", image_url=image_url, error=e.message)

    @staticmethod
    def _log_failure(run: _Run, exc: AppException) -> None:
        failed_at = run.stage
        run.advance(PipelineStage.FAILED)
        logger.warning(
            "profile_pipeline_failed",
            operation=run.operation,
            stage=failed_at.value,
            error_code=exc.error_code.value,
        )

    @staticmethod
    def _validate_name(name: str | None) -> str:
        name = (name or "").strip()
        if not name:
            raise ValidationError("Name is required", details={"field": "name"})
        if len(name) > NAME_MAX_LENGTH:
            raise ValidationError(
                f"Name must be at most {NAME_MAX_LENGTH} characters",
                details={"field": "name"},
            )
        return name

    @staticmethod
    def _validate_greeting(greeting: str | None) -> str | None:
        if greeting is not None and len(greeting.strip()) > GREETING_MAX_LENGTH:
            raise ValidationError(
                f"Greeting must be at most {GREETING_MAX_LENGTH} characters",
                details={"field": "greeting"},
            )
        return greeting
