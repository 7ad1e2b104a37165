"""Profile repository protocol."""

from typing import Protocol
from uuid import UUID

from domain.entities.profile import Profile


class IProfileRepository(Protocol):
    """Repository interface for Profile entities."""

    async def get(self, id: UUID) -> Profile | None:
        """Get a profile by ID."""
        ...

    async def list_all(self) -> list[Profile]:
        """Get all profiles, newest first."""
        ...

    async def create(self, profile: Profile) -> Profile:
        """Create a new profile."""
        ...

    async def update(self, profile: Profile) -> Profile | None:
        """Overwrite every editable column. Returns None when the profile is gone."""
        ...

    async def delete(self, id: UUID) -> bool:
        """Delete a profile. Returns False when nothing was deleted."""
        ...
