"""Tests for sync response decoding.

Which fields of a sync reply are always present is not documented: the
decoder only requires sync_token, and these tests check that every other
field may be missing.
"""

from __future__ import annotations

from typing import Any

import pytest

from todoistsync.client.sync.commands import ViewStyle
from todoistsync.client.sync.decoder import (
    ProjectDetail,
    SyncProject,
    decode_project_detail,
    decode_sync_result,
)
from todoistsync.client.sync.status import OK, CommandError, CommandUnresolved
from todoistsync.core.errors import DecodeError

PROJECT = {
    "id": "2203306141",
    "name": "Shopping List",
    "color": "charcoal",
    "parent_id": None,
    "child_order": 1,
    "collapsed": False,
    "shared": False,
    "sync_id": None,
    "is_deleted": False,
    "is_archived": False,
    "is_favorite": True,
    "view_style": "list",
}


def make_body(**overrides: Any) -> dict[str, Any]:
    """Create a sync reply body."""
    body: dict[str, Any] = {
        "sync_token": "TnYUZEpuzf2FMA9qzyY3j4xky6dXiYejmSO85S5paZ_a9y1FI85mBbIWZGpW",
        "full_sync": True,
        "temp_id_mapping": {},
        "projects": [PROJECT],
    }
    body.update(overrides)
    return body


class TestSyncProject:
    """Tests for SyncProject.from_dict."""

    def test_from_dict(self) -> None:
        """Should decode every documented field."""
        project = SyncProject.from_dict(PROJECT)

        assert project.id == "2203306141"
        assert project.name == "Shopping List"
        assert project.color == "charcoal"
        assert project.parent_id is None
        assert project.child_order == 1
        assert project.is_favorite is True
        assert project.view_style is ViewStyle.LIST

    def test_only_id_and_name_required(self) -> None:
        """Other fields default to None."""
        project = SyncProject.from_dict({"id": "1", "name": "Inbox", "inbox_project": True})

        assert project.inbox_project is True
        assert project.color is None
        assert project.view_style is None

    def test_integer_ids_are_strings(self) -> None:
        """Integer ids are normalized to strings."""
        project = SyncProject.from_dict({"id": 12, "name": "x", "parent_id": 3})

        assert project.id == "12"
        assert project.parent_id == "3"

    def test_unknown_view_style(self) -> None:
        """An unknown view style is not fatal."""
        assert SyncProject.from_dict({"id": "1", "name": "x", "view_style": "calendar"}).view_style is None

    @pytest.mark.parametrize("data", [{"name": "x"}, {"id": "1"}, {"id": None, "name": "x"}, "p"])
    def test_missing_required(self, data: Any) -> None:
        """Missing id or name is a decode error."""
        with pytest.raises(DecodeError):
            SyncProject.from_dict(data)


class TestDecodeSyncResult:
    """Tests for decode_sync_result."""

    def test_full_sync(self) -> None:
        """Should decode a full sync reply."""
        result = decode_sync_result(make_body(), commands_sent=False)

        assert result.sync_token.startswith("TnYU")
        assert result.full_sync is True
        assert result.temp_id_mapping == {}
        assert result.sync_status is None
        assert result.statuses == {}
        assert result.projects == [SyncProject.from_dict(PROJECT)]
        assert result.resources == {"projects": [PROJECT]}

    def test_only_projects_requested(self) -> None:
        """Collections that were not returned are empty, not errors."""
        body = {"sync_token": "tok", "projects": [PROJECT]}

        result = decode_sync_result(body, commands_sent=False)

        assert result.collection("items") == []
        assert result.collection("labels") == []
        assert result.collection("projects") == [PROJECT]
        assert result.full_sync is None
        assert result.temp_id_mapping == {}

    def test_no_projects(self) -> None:
        """A reply without projects has an empty projects list."""
        result = decode_sync_result({"sync_token": "tok", "items": []})

        assert result.projects == []
        assert result.collection("items") == []

    def test_null_collection(self) -> None:
        """A null collection reads as empty."""
        result = decode_sync_result({"sync_token": "tok", "projects": None, "labels": None})

        assert result.projects == []
        assert result.collection("labels") == []

    def test_non_list_resources_kept(self) -> None:
        """Object resources (user, settings) are kept as sent."""
        result = decode_sync_result({"sync_token": "tok", "user": {"id": "1"}})

        assert result.collection("user") == {"id": "1"}

    def test_sync_status_absent(self) -> None:
        """No sync_status key means no status was reported."""
        result = decode_sync_result({"sync_token": "tok"})

        assert result.sync_status is None
        assert result.statuses == {}

    def test_sync_status_empty(self) -> None:
        """An empty sync_status is different from an absent one."""
        result = decode_sync_result({"sync_token": "tok", "sync_status": {}})

        assert result.sync_status == {}
        assert result.statuses == {}

    def test_sync_status_ignored_without_commands(self) -> None:
        """Without commands, sync_status is treated as absent."""
        result = decode_sync_result(
            {"sync_token": "tok", "sync_status": {}}, commands_sent=False
        )

        assert result.sync_status is None

    def test_statuses_classified(self) -> None:
        """Each status is classified at decode time."""
        result = decode_sync_result(
            make_body(
                sync_status={
                    "u1": "ok",
                    "u2": {"error_code": 21, "error": "Project not found"},
                },
                temp_id_mapping={"t1": "6X7rM8997g3RQmvh"},
            )
        )

        assert result.status_of("u1") == OK
        assert result.status_of("u2") == CommandError(code=21, message="Project not found")
        assert result.status_of("unknown") is None
        assert result.temp_id_mapping == {"t1": "6X7rM8997g3RQmvh"}
        assert list(result.failed) == ["u2"]

    def test_malformed_status_isolated(self) -> None:
        """One malformed status does not spoil the rest of the result."""
        result = decode_sync_result(
            make_body(sync_status={"u1": "ok", "u2": 42, "u3": {"error": "no code"}})
        )

        assert result.status_of("u1") == OK
        assert isinstance(result.status_of("u2"), CommandUnresolved)
        assert isinstance(result.status_of("u3"), CommandUnresolved)
        assert result.projects[0].name == "Shopping List"
        assert result.sync_token.startswith("TnYU")
        assert set(result.failed) == {"u2", "u3"}

    def test_raw_status_kept(self) -> None:
        """The raw sync_status values are kept alongside the classified ones."""
        raw = {"error_code": 22, "error": "Item not found"}

        result = decode_sync_result(make_body(sync_status={"u1": raw}))

        assert result.sync_status == {"u1": raw}

    @pytest.mark.parametrize(
        "body",
        [
            [],
            "not an object",
            None,
            {},
            {"sync_token": ""},
            {"sync_token": 12},
            {"sync_token": "tok", "sync_status": ["ok"]},
            {"sync_token": "tok", "temp_id_mapping": []},
            {"sync_token": "tok", "full_sync": "yes"},
            {"sync_token": "tok", "projects": {"id": "1"}},
            {"sync_token": "tok", "projects": [{"name": "no id"}]},
        ],
    )
    def test_malformed_body(self, body: Any) -> None:
        """A body without the shape of a sync reply is a DecodeError."""
        with pytest.raises(DecodeError):
            decode_sync_result(body)


class TestDecodeProjectDetail:
    """Tests for decode_project_detail."""

    def test_with_notes(self) -> None:
        """Should decode the project and its notes."""
        detail = decode_project_detail(
            {
                "project": PROJECT,
                "notes": [
                    {
                        "id": "2992679862",
                        "posted_uid": 2671355,
                        "project_id": "2203306141",
                        "content": "Need one bottle of milk",
                        "file_attachment": None,
                        "uids_to_notify": [84129],
                        "is_deleted": False,
                        "posted_at": "2016-05-18T16:45:00.000000Z",
                        "reactions": {"❤️": ["2671362"]},
                    }
                ],
            }
        )

        assert isinstance(detail, ProjectDetail)
        assert detail.project.id == "2203306141"
        assert len(detail.notes) == 1
        note = detail.notes[0]
        assert note.content == "Need one bottle of milk"
        assert note.posted_uid == "2671355"
        assert note.uids_to_notify == ["84129"]
        assert note.reactions == {"❤️": ["2671362"]}

    def test_without_notes(self) -> None:
        """Notes are optional."""
        detail = decode_project_detail({"project": PROJECT})

        assert detail.notes == []

    @pytest.mark.parametrize(
        "body",
        [None, {}, {"notes": []}, {"project": PROJECT, "notes": {}}, {"project": {"id": "1"}}],
    )
    def test_malformed(self, body: Any) -> None:
        """Missing project or malformed notes is a DecodeError."""
        with pytest.raises(DecodeError):
            decode_project_detail(body)
