"""Face encoding provider protocol."""

from typing import Protocol


class IFaceEncoder(Protocol):
    """Protocol for services turning an image URL into a face encoding."""

    async def encode(self, image_url: str) -> list[float]:
        """
        Compute the face encoding of the single face in an image.

        Args:
            image_url: Publicly reachable URL of the image

        Returns:
            The encoding as a list of floats

        Raises:
            EncodingError: One of its subclasses, describing the failure
        """
        ...
