"""Profile domain entity."""

from dataclasses import dataclass, field
from datetime import datetime
from uuid import UUID, uuid4


@dataclass
class Profile:
    """Domain entity for a profile.

    ``face_encoding`` is only ever written from the face recognition
    provider's answer for the image at ``image_url``.
    """

    name: str
    id: UUID = field(default_factory=uuid4)
    greeting: str | None = None
    bio: str | None = None
    image_url: str | None = None
    face_encoding: list[float] | None = None
    created_at: datetime = field(default_factory=datetime.utcnow)
    updated_at: datetime = field(default_factory=datetime.utcnow)

    def __post_init__(self) -> None:
        """Ensure updated_at is always at least as recent as created_at."""
        if self.updated_at < self.created_at:
            self.updated_at = self.created_at


@dataclass(frozen=True, slots=True)
class ProfileFields:
    """User-editable subset of a Profile as submitted by a form.

    ``None`` means the field was not submitted at all; an empty string
    means it was submitted blank.
    """

    name: str | None = None
    greeting: str | None = None
    bio: str | None = None


@dataclass(frozen=True, slots=True)
class ImageUpload:
    """A new image file supplied with a form."""

    data: bytes
    filename: str
    content_type: str | None = None
