"""Exception hierarchy for todoistsync.

This module defines every exception raised by the library:
- TransportError (and subclasses): the HTTP exchange failed
- DecodeError: the response body does not have the expected shape
- StatusDecodeError: a single command status has an unrecognised shape
- DanglingTempIdError: a command refers to a temp id that has no real id yet
- StateError: the local sync state could not be read or written

Per-command failures reported by the server are not exceptions; they are
returned as CommandError values (see todoistsync.client.sync.status).
"""

from __future__ import annotations

from typing import Any


class TodoistSyncError(Exception):
    """Base exception for todoistsync errors."""


class TransportError(TodoistSyncError):
    """The HTTP exchange failed or returned a non-success status.

    A batch that failed with a TransportError must be assumed not applied.
    Re-sending it with the same command uuids is safe.
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code

    @property
    def retryable(self) -> bool:
        """Whether re-sending the same request may succeed."""
        if self.status_code is None:
            return True
        return self.status_code == 429 or self.status_code >= 500


class AuthenticationError(TransportError):
    """Authentication failed (missing, invalid or revoked token)."""

    @property
    def retryable(self) -> bool:
        return False


class NotFoundError(TransportError):
    """Endpoint or resource not found."""


class RateLimitError(TransportError):
    """Too many requests."""

    def __init__(
        self,
        message: str,
        status_code: int | None = 429,
        retry_after: float | None = None,
    ) -> None:
        super().__init__(message, status_code)
        self.retry_after = retry_after


class DecodeError(TodoistSyncError):
    """Response body does not match the expected shape."""


class StatusDecodeError(TodoistSyncError):
    """A sync_status entry is neither "ok" nor an error object."""

    def __init__(self, raw: Any, reason: str) -> None:
        super().__init__(f"Unrecognized command status ({reason}): {raw!r}")
        self.raw = raw
        self.reason = reason


class DanglingTempIdError(TodoistSyncError):
    """A command references a temp id which has no resolved real id."""

    def __init__(self, temp_id: str, command_uuid: str | None = None) -> None:
        message = f"Temp id {temp_id} is not resolved"
        if command_uuid:
            message += f" (referenced by command {command_uuid})"
        super().__init__(message)
        self.temp_id = temp_id
        self.command_uuid = command_uuid


class StateError(TodoistSyncError):
    """The local sync state store failed (e.g. database is locked)."""
