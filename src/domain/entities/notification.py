"""User-facing notification value objects."""

from dataclasses import dataclass
from enum import StrEnum


class NotificationLevel(StrEnum):
    """Severity of a notification shown to the user."""

    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


@dataclass(frozen=True, slots=True)
class Notification:
    """A short, non-blocking message: a title plus a description."""

    level: NotificationLevel
    title: str
    message: str

    @classmethod
    def success(cls, title: str, message: str) -> "Notification":
        return cls(NotificationLevel.SUCCESS, title, message)

    @classmethod
    def warning(cls, title: str, message: str) -> "Notification":
        return cls(NotificationLevel.WARNING, title, message)
