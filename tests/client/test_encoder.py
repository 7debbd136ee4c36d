"""Tests for sync request encoding."""

from __future__ import annotations

import json
import logging

import pytest

from todoistsync.client.sync.commands import add_project, delete_project
from todoistsync.client.sync.encoder import (
    ResourceTypes,
    encode_sync_request,
    validate_token,
)


class TestResourceTypes:
    """Tests for ResourceTypes."""

    def test_duplicates_collapse(self) -> None:
        """Duplicate entries are sent once."""
        types = ResourceTypes(["projects", "items", "projects"])

        assert list(types) == ["projects", "items"]
        assert len(types) == 2

    def test_order_irrelevant_for_equality(self) -> None:
        """Two sets with the same entries are equal."""
        assert ResourceTypes(["projects", "items"]) != ResourceTypes(["items"])
        assert ResourceTypes.of("projects", "items") == ResourceTypes.of("items", "projects")

    def test_single_string(self) -> None:
        """A single string is one resource type, not a list of characters."""
        assert list(ResourceTypes("projects")) == ["projects"]

    def test_encode_is_json_array_text(self) -> None:
        """The encoded value is one string shaped like a JSON array."""
        encoded = ResourceTypes.of("projects", "items").encode()

        assert isinstance(encoded, str)
        assert encoded == '["projects", "items"]'

    def test_encode_empty(self) -> None:
        """An empty set encodes as []."""
        assert ResourceTypes([]).encode() == "[]"

    def test_negation(self) -> None:
        """A '-' prefix excludes a type from 'all'."""
        types = ResourceTypes.of("all", "-notes")

        assert types.includes("projects")
        assert not types.includes("notes")
        assert types.encode() == '["all", "-notes"]'

    def test_includes_explicit(self) -> None:
        """includes only matches requested types when 'all' is absent."""
        types = ResourceTypes.of("projects")

        assert types.includes("projects")
        assert not types.includes("items")

    def test_empty_entry_rejected(self) -> None:
        """Empty entries are rejected."""
        with pytest.raises(ValueError):
            ResourceTypes(["projects", ""])
        with pytest.raises(ValueError):
            ResourceTypes(["-"])

    def test_unknown_type_warns(self, caplog: pytest.LogCaptureFixture) -> None:
        """Unknown types are kept and logged."""
        with caplog.at_level(logging.WARNING):
            types = ResourceTypes.of("projects", "widgets")

        assert "widgets" in types
        assert "Unknown resource type: widgets" in caplog.text


class TestValidateToken:
    """Tests for validate_token."""

    def test_full_sync_token(self) -> None:
        """'*' is accepted."""
        assert validate_token("*") == "*"

    def test_incremental_token(self) -> None:
        """Any other non-blank string is an incremental cursor."""
        assert validate_token("abc123") == "abc123"

    @pytest.mark.parametrize("token", ["", "   "])
    def test_blank_rejected(self, token: str) -> None:
        """Blank tokens are not a way to request a full sync."""
        with pytest.raises(ValueError, match="'\\*'"):
            validate_token(token)


class TestEncodeSyncRequest:
    """Tests for encode_sync_request."""

    def test_without_commands(self) -> None:
        """No commands field is sent when commands is None."""
        fields = encode_sync_request("*", ["projects"])

        assert fields == {"sync_token": "*", "resource_types": '["projects"]'}
        assert "commands" not in fields

    def test_empty_commands_sent_as_empty_list(self) -> None:
        """An empty batch is present, unlike no batch at all."""
        fields = encode_sync_request("tok", ["projects"], [])

        assert fields["commands"] == "[]"

    def test_with_commands(self) -> None:
        """Commands are sent as JSON text, in order."""
        add = add_project("Groceries")
        delete = delete_project("42")

        fields = encode_sync_request("tok", ResourceTypes.of("projects"), [add, delete])

        commands = json.loads(fields["commands"])
        assert [c["uuid"] for c in commands] == [add.uuid, delete.uuid]
        assert commands[0] == {
            "type": "project_add",
            "args": {"name": "Groceries"},
            "uuid": add.uuid,
            "temp_id": add.temp_id,
        }
        assert "temp_id" not in commands[1]

    def test_all_values_are_strings(self) -> None:
        """Every field is a scalar string (form encoding)."""
        fields = encode_sync_request("*", ["projects", "items"], [add_project("A")])

        assert all(isinstance(v, str) for v in fields.values())

    def test_invalid_token_rejected(self) -> None:
        """A blank token is rejected before anything is encoded."""
        with pytest.raises(ValueError):
            encode_sync_request("", ["projects"])
