"""Core module - Shared configuration, errors and types."""

from todoistsync.core.config import DEFAULT_BASE_URL, ApiConfig
from todoistsync.core.errors import (
    AuthenticationError,
    DanglingTempIdError,
    DecodeError,
    NotFoundError,
    RateLimitError,
    StateError,
    StatusDecodeError,
    TodoistSyncError,
    TransportError,
)
from todoistsync.core.types import FULL_SYNC_TOKEN, SessionState

__all__ = [
    # Config
    "ApiConfig",
    "DEFAULT_BASE_URL",
    # Errors
    "AuthenticationError",
    "DanglingTempIdError",
    "DecodeError",
    "NotFoundError",
    "RateLimitError",
    "StateError",
    "StatusDecodeError",
    "TodoistSyncError",
    "TransportError",
    # Types
    "FULL_SYNC_TOKEN",
    "SessionState",
]
