"""Tests for command status classification."""

from __future__ import annotations

from typing import Any

import pytest

from todoistsync.client.sync.status import (
    OK,
    CommandError,
    CommandOk,
    CommandUnresolved,
    ErrorCode,
    classify_status,
    status_or_unresolved,
)
from todoistsync.core.errors import StatusDecodeError


class TestClassifyStatus:
    """Tests for classify_status."""

    def test_ok(self) -> None:
        """The literal "ok" is CommandOk."""
        status = classify_status("ok")

        assert status == OK
        assert isinstance(status, CommandOk)
        assert status.ok is True

    def test_minimal_error(self) -> None:
        """An error object with code and message."""
        status = classify_status({"error_code": 21, "error": "Project not found"})

        assert status == CommandError(code=21, message="Project not found")
        assert status.ok is False
        assert status.tag is None
        assert status.http_code is None
        assert status.extra is None

    def test_full_error(self) -> None:
        """Optional fields are decoded when present."""
        status = classify_status(
            {
                "error_code": 22,
                "error": "Item not found",
                "error_tag": "ITEM_NOT_FOUND",
                "http_code": 404,
                "error_extra": {"retry_after": 3},
            }
        )

        assert isinstance(status, CommandError)
        assert status.code == 22
        assert status.tag == "ITEM_NOT_FOUND"
        assert status.http_code == 404
        assert status.extra == {"error_extra": {"retry_after": 3}}

    def test_unknown_fields_preserved(self) -> None:
        """Unrecognised keys end up in extra instead of being dropped."""
        status = classify_status(
            {"error_code": 999, "error": "New failure", "hint": "upgrade", "error_extra": 5}
        )

        assert isinstance(status, CommandError)
        assert status.extra == {"hint": "upgrade", "error_extra": 5}

    def test_known_code(self) -> None:
        """Documented codes map to ErrorCode, others to None."""
        assert classify_status({"error_code": 411, "error": "x"}).known_code is ErrorCode.USER_DELETED  # type: ignore[union-attr]
        assert classify_status({"error_code": 21, "error": "x"}).known_code is ErrorCode.PROJECT_NOT_FOUND  # type: ignore[union-attr]
        assert classify_status({"error_code": 1234, "error": "x"}).known_code is None  # type: ignore[union-attr]

    def test_code_is_pattern_matchable(self) -> None:
        """Callers can branch on the code."""
        status = classify_status({"error_code": 22, "error": "Item not found"})

        match status:
            case CommandError(code=ErrorCode.ITEM_NOT_FOUND):
                matched = True
            case _:
                matched = False
        assert matched

    @pytest.mark.parametrize(
        "raw",
        [
            "OK",
            "error",
            "",
            None,
            42,
            True,
            ["ok"],
            {},
            {"error": "no code"},
            {"error_code": "21", "error": "code as string"},
            {"error_code": True, "error": "code as bool"},
            {"error_code": 21},
            {"error_code": 21, "error": None},
            {"error_code": 21, "error": "x", "http_code": "404"},
            {"error_code": 21, "error": "x", "error_tag": 7},
        ],
    )
    def test_unrecognized_shapes_raise(self, raw: Any) -> None:
        """Anything else fails classification."""
        with pytest.raises(StatusDecodeError) as exc_info:
            classify_status(raw)
        assert exc_info.value.raw == raw

    def test_pure_function(self) -> None:
        """The same payload always gives the same status."""
        raw = {"error_code": 21, "error": "Project not found"}

        first = classify_status(raw)
        second = classify_status(dict(raw))

        assert first == second
        assert raw == {"error_code": 21, "error": "Project not found"}


class TestStatusOrUnresolved:
    """Tests for status_or_unresolved."""

    def test_passes_through(self) -> None:
        """Recognised values are classified."""
        assert status_or_unresolved("ok") == OK
        assert isinstance(status_or_unresolved({"error_code": 1, "error": "x"}), CommandError)

    def test_unresolved(self) -> None:
        """Unrecognised values become CommandUnresolved instead of raising."""
        status = status_or_unresolved(["weird"])

        assert isinstance(status, CommandUnresolved)
        assert status.raw == ["weird"]
        assert status.reason == "unexpected list"
        assert status.ok is False
