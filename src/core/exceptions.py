"""Custom exceptions and error codes."""

from enum import StrEnum
from typing import Any


class ErrorCode(StrEnum):
    """Standardized error codes for the API."""

    # Not found errors (404)
    PROFILE_NOT_FOUND = "PROFILE_NOT_FOUND"

    # Validation errors (400)
    VALIDATION_ERROR = "VALIDATION_ERROR"
    UNSUPPORTED_IMAGE_TYPE = "UNSUPPORTED_IMAGE_TYPE"
    IMAGE_TOO_LARGE = "IMAGE_TOO_LARGE"

    # Face encoding errors
    NO_FACE_DETECTED = "NO_FACE_DETECTED"
    MULTIPLE_FACES_DETECTED = "MULTIPLE_FACES_DETECTED"
    FACE_SERVICE_ERROR = "FACE_SERVICE_ERROR"
    FACE_SERVICE_TIMEOUT = "FACE_SERVICE_TIMEOUT"
    FACE_SERVICE_NOT_CONFIGURED = "FACE_SERVICE_NOT_CONFIGURED"

    # Storage errors (502)
    STORAGE_ERROR = "STORAGE_ERROR"

    # Camera errors (503)
    CAMERA_UNAVAILABLE = "CAMERA_UNAVAILABLE"

    # Rate limiting (429)
    RATE_LIMIT_EXCEEDED = "RATE_LIMIT_EXCEEDED"

    # Server errors (500)
    INTERNAL_ERROR = "INTERNAL_ERROR"
    DATABASE_ERROR = "DATABASE_ERROR"


class AppException(Exception):
    """Base application exception.

    ``title`` is the short heading shown to the user next to ``message``.
    """

    def __init__(
        self,
        error_code: ErrorCode,
        message: str,
        status_code: int = 400,
        details: Any | None = None,
        title: str = "Error",
    ) -> None:
        self.error_code = error_code
        self.message = message
        self.status_code = status_code
        self.details = details
        self.title = title
        super().__init__(self.message)


class ValidationError(AppException):
    """Form input rejected before any work starts."""

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.VALIDATION_ERROR,
        details: Any | None = None,
    ) -> None:
        super().__init__(
            error_code=error_code,
            message=message,
            status_code=400,
            details=details,
            title="Invalid Input",
        )


class ProfileNotFoundError(AppException):
    """Profile not found."""

    def __init__(self, profile_id: str) -> None:
        super().__init__(
            error_code=ErrorCode.PROFILE_NOT_FOUND,
            message=f"Profile not found: {profile_id}",
            status_code=404,
            details={"profile_id": profile_id},
            title="Not Found",
        )


class StorageError(AppException):
    """The object store rejected an upload or delete."""

    def __init__(self, message: str, key: str | None = None) -> None:
        super().__init__(
            error_code=ErrorCode.STORAGE_ERROR,
            message=message,
            status_code=502,
            details={"key": key} if key else None,
            title="Image Upload Failed",
        )


class PersistenceError(AppException):
    """The profile store rejected a read or write."""

    def __init__(self, message: str = "Failed to save profile") -> None:
        super().__init__(
            error_code=ErrorCode.DATABASE_ERROR,
            message=message,
            status_code=500,
            title="Database Error",
        )


class EncodingError(AppException):
    """Base class for face encoding failures."""


class NoFaceDetectedError(EncodingError):
    """The provider found no face in the image."""

    def __init__(
        self, detail: str = "No face detected in image", status_code: int = 422
    ) -> None:
        super().__init__(
            error_code=ErrorCode.NO_FACE_DETECTED,
            message=(
                f"{detail}. Please upload a clear, well-lit photo "
                "where one face is fully visible."
            ),
            status_code=status_code,
            details={"provider_detail": detail},
            title="No Face Detected",
        )


class MultipleFacesDetectedError(EncodingError):
    """The provider found more than one face in the image."""

    def __init__(
        self, detail: str = "Multiple faces detected in image", status_code: int = 400
    ) -> None:
        super().__init__(
            error_code=ErrorCode.MULTIPLE_FACES_DETECTED,
            message=f"{detail}. Please upload a photo that shows only one person.",
            status_code=status_code,
            details={"provider_detail": detail},
            title="Multiple Faces Detected",
        )


class ProviderError(EncodingError):
    """The provider failed or answered with something unusable."""

    def __init__(self, message: str, status_code: int = 502) -> None:
        super().__init__(
            error_code=ErrorCode.FACE_SERVICE_ERROR,
            message=message,
            status_code=status_code,
            details={"provider_status": status_code},
            title="Face Recognition Failed",
        )


class EncodingTimeoutError(EncodingError):
    """The provider did not answer within the configured bound."""

    def __init__(self, timeout_seconds: float) -> None:
        super().__init__(
            error_code=ErrorCode.FACE_SERVICE_TIMEOUT,
            message=(
                "Request timeout - face recognition service took too long to respond"
            ),
            status_code=504,
            details={"timeout_seconds": timeout_seconds},
            title="Face Recognition Timed Out",
        )


class ConfigurationError(EncodingError):
    """No face recognition provider is configured."""

    def __init__(self) -> None:
        super().__init__(
            error_code=ErrorCode.FACE_SERVICE_NOT_CONFIGURED,
            message="Face recognition service is not properly configured",
            status_code=500,
            title="Service Misconfigured",
        )


class CameraUnavailableError(AppException):
    """The capture device could not be opened or read."""

    def __init__(self, message: str = "Camera is not available") -> None:
        super().__init__(
            error_code=ErrorCode.CAMERA_UNAVAILABLE,
            message=message,
            status_code=503,
            title="Camera Unavailable",
        )
