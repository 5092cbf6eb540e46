"""Error hierarchy for tokenpaint."""
from __future__ import annotations


class TokenPaintError(Exception):
    """Base error for all tokenpaint errors."""

    def __init__(self, message: str, *, cause: Exception | None = None) -> None:
        super().__init__(message)
        self.cause = cause


class SettingsWriteError(TokenPaintError):
    """The layered settings document rejected an update."""

    def __init__(
        self,
        message: str,
        *,
        key: str = "",
        layer: str = "",
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message, cause=cause)
        self.key = key
        self.layer = layer


class StateStoreError(TokenPaintError):
    """Durable local state could not be read or written."""


class WorkspaceUnavailableError(TokenPaintError):
    """Workspace scope was requested but no workspace is open."""


class InvalidTransitionError(TokenPaintError):
    """A session event is not allowed in the current phase."""

    def __init__(self, message: str, *, phase: str = "", event: str = "") -> None:
        super().__init__(message)
        self.phase = phase
        self.event = event


class SessionAlreadyOpenError(TokenPaintError):
    """A styling session is already open on this host."""


class NoActiveSessionError(TokenPaintError):
    """The operation needs an open styling session."""


class MalformedMessageError(TokenPaintError):
    """An inbound front-end message could not be understood."""
