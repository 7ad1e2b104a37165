"""Capture device protocol."""

from typing import Protocol


class ICaptureDevice(Protocol):
    """Protocol for a live image source such as a webcam.

    Methods are blocking; callers run them off the event loop.
    """

    def open(self) -> None:
        """Acquire the device. Raises CameraUnavailableError on failure."""
        ...

    def read_frame(self) -> bytes:
        """Grab one frame, JPEG-encoded."""
        ...

    def release(self) -> None:
        """Release the device. Safe to call more than once."""
        ...
