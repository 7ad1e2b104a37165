"""Live camera capture with scoped device ownership."""

import asyncio
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from datetime import datetime
from typing import TypeVar

import structlog

from domain.entities.profile import ImageUpload
from infrastructure.capture.device import ICaptureDevice

logger = structlog.get_logger()

T = TypeVar("T")


async def _settle_in_thread(call: Callable[[], T]) -> T:
    """Run a blocking device call in a worker thread.

    A worker thread cannot be interrupted, so when the caller is cancelled
    the call is still awaited to completion before the cancellation
    propagates. The device is never released while a call on it is running.
    """
    task = asyncio.ensure_future(asyncio.to_thread(call))
    try:
        return await asyncio.shield(task)
    except asyncio.CancelledError:
        logger.info("camera_call_interrupted", call=getattr(call, "__name__", "call"))
        await asyncio.wait({task})
        if not task.cancelled():
            # Mark the outcome as retrieved; the cancellation wins
            task.exception()
        raise


class CaptureService:
    """Hands out a capture device for the duration of a session only.

    The device is released when the session ends, whether it ends
    normally, by exception, or by task cancellation.
    """

    def __init__(self, device_factory: Callable[[], ICaptureDevice]) -> None:
        self._device_factory = device_factory

    @asynccontextmanager
    async def session(self) -> AsyncIterator[ICaptureDevice]:
        device = self._device_factory()
        try:
            await _settle_in_thread(device.open)
            logger.info("camera_acquired")
            yield device
        finally:
            # Synchronous so it still runs when the task is being cancelled
            device.release()
            logger.info("camera_released")

    async def capture_still(self) -> ImageUpload:
        """Grab a single JPEG frame."""
        async with self.session() as device:
            data = await _settle_in_thread(device.read_frame)

        filename = f"capture-{datetime.utcnow():%Y%m%d%H%M%S}.jpg"
        return ImageUpload(data=data, filename=filename, content_type="image/jpeg")
