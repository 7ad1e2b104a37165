"""OpenCV webcam implementation of ICaptureDevice."""

import cv2
import structlog

from core.config import settings
from core.exceptions import CameraUnavailableError

logger = structlog.get_logger()


class OpenCVCamera:
    """Single-frame camera access through ``cv2.VideoCapture``."""

    def __init__(
        self,
        camera_index: int = settings.camera_index,
        width: int = 640,
        height: int = 480,
        jpeg_quality: int = 90,
    ) -> None:
        self._index = camera_index
        self._width = width
        self._height = height
        self._jpeg_quality = jpeg_quality
        self._cap: cv2.VideoCapture | None = None

    def open(self) -> None:
        cap = cv2.VideoCapture(self._index)
        if not cap.isOpened():
            cap.release()
            logger.warning("camera_open_failed", camera_index=self._index)
            raise CameraUnavailableError(f"Could not open camera {self._index}")

        cap.set(cv2.CAP_PROP_FRAME_WIDTH, self._width)
        cap.set(cv2.CAP_PROP_FRAME_HEIGHT, self._height)
        self._cap = cap

    def read_frame(self) -> bytes:
        if self._cap is None:
            raise CameraUnavailableError("Camera is not open")

        ok, frame = self._cap.read()
        if not ok or frame is None:
            raise CameraUnavailableError("Could not read a frame from the camera")

        ok, buffer = cv2.imencode(
            ".jpg", frame, [int(cv2.IMWRITE_JPEG_QUALITY), self._jpeg_quality]
        )
        if not ok:
            raise CameraUnavailableError("Could not encode the captured frame")
        return bytes(buffer.tobytes())

    def release(self) -> None:
        if self._cap is not None:
            self._cap.release()
            self._cap = None
