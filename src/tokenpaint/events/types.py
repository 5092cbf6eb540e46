"""Event types emitted by the host and styling sessions."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum


class NotificationLevel(StrEnum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


@dataclass(frozen=True)
class Notification:
    """A user-visible, non-blocking message."""

    level: NotificationLevel
    message: str

    def to_dict(self) -> dict[str, str]:
        return {"level": self.level.value, "message": self.message}


@dataclass(frozen=True)
class SessionOpened:
    theme: str
    scope: str
    language_id: str


@dataclass(frozen=True)
class SessionClosed:
    rolled_back: bool


@dataclass(frozen=True)
class PreviewApplied:
    scope: str
    theme: str
    selector_count: int


@dataclass(frozen=True)
class RollbackCompleted:
    scope: str


@dataclass(frozen=True)
class PresetSaved:
    scope: str
    theme: str
    language_id: str


@dataclass(frozen=True)
class RecoveryCompleted:
    restored: int
    failed: int
