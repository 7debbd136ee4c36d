"""Per-command status classification.

Each command of a batch gets an entry in the response's sync_status map,
keyed by the command uuid. An entry is either the literal string "ok" or an
error object:

    {"error_code": 21, "error": "Project not found", "error_tag": "...",
     "http_code": 404, "error_extra": {...}}

classify_status() turns one raw entry into a CommandStatus value. It is a
pure function of the raw value: the same payload always yields the same
status, whatever the submission history of the command.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Any

from todoistsync.core.errors import StatusDecodeError

STATUS_OK = "ok"

_KNOWN_ERROR_KEYS = frozenset({"error_code", "error", "error_tag", "http_code"})


class ErrorCode(IntEnum):
    """Documented command error codes.

    Not exhaustive: the server may return codes that are not listed here.
    """

    PROJECT_NOT_FOUND = 21  # project deleted or missing, do not retry
    ITEM_NOT_FOUND = 22  # task deleted or missing, do not retry
    USER_DELETED = 411  # account deleted, do not retry


@dataclass(frozen=True)
class CommandOk:
    """The command was applied."""

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class CommandError:
    """The server rejected the command.

    Attributes:
        code: Error code (see ErrorCode for documented values).
        message: Human readable error message.
        tag: Symbolic error tag, when the server sends one.
        http_code: HTTP status the error would map to, when sent.
        extra: Every other key of the error object (including error_extra),
            or None when there is none.
    """

    code: int
    message: str
    tag: str | None = None
    http_code: int | None = None
    extra: dict[str, Any] | None = None

    @property
    def ok(self) -> bool:
        return False

    @property
    def known_code(self) -> ErrorCode | None:
        """Documented code matching this error, if any."""
        try:
            return ErrorCode(self.code)
        except ValueError:
            return None


@dataclass(frozen=True)
class CommandUnresolved:
    """The status entry could not be classified.

    The command may or may not have been applied.
    """

    raw: Any
    reason: str

    @property
    def ok(self) -> bool:
        return False


CommandStatus = CommandOk | CommandError | CommandUnresolved

OK = CommandOk()


def _optional_int(data: dict[str, Any], key: str) -> int | None:
    value = data.get(key)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int):
        raise StatusDecodeError(data, f"{key} is not an integer")
    return value


def classify_status(raw: Any) -> CommandOk | CommandError:
    """Classify a raw sync_status value.

    Args:
        raw: Value found in sync_status for one command uuid.

    Returns:
        OK for the literal "ok", a CommandError for an error object.

    Raises:
        StatusDecodeError: If the value has any other shape.
    """
    if isinstance(raw, str):
        if raw == STATUS_OK:
            return OK
        raise StatusDecodeError(raw, "unexpected string")

    if not isinstance(raw, dict):
        raise StatusDecodeError(raw, f"unexpected {type(raw).__name__}")

    code = raw.get("error_code")
    if isinstance(code, bool) or not isinstance(code, int):
        raise StatusDecodeError(raw, "missing or invalid error_code")

    message = raw.get("error")
    if not isinstance(message, str):
        raise StatusDecodeError(raw, "missing or invalid error")

    tag = raw.get("error_tag")
    if tag is not None and not isinstance(tag, str):
        raise StatusDecodeError(raw, "error_tag is not a string")

    extra = {k: v for k, v in raw.items() if k not in _KNOWN_ERROR_KEYS}

    return CommandError(
        code=code,
        message=message,
        tag=tag,
        http_code=_optional_int(raw, "http_code"),
        extra=extra or None,
    )


def status_or_unresolved(raw: Any) -> CommandStatus:
    """Classify a raw value, turning classification failures into data.

    Returns:
        CommandOk, CommandError, or CommandUnresolved when the shape is
        not recognised.
    """
    try:
        return classify_status(raw)
    except StatusDecodeError as e:
        return CommandUnresolved(raw=raw, reason=e.reason)
