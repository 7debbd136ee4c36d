"""Sync response decoding.

This module provides:
- SyncResult: decoded reply of the sync endpoint
- SyncProject, ProjectNote, ProjectDetail: decoded resources
- decode_sync_result / decode_project_detail

Which fields of a sync reply are always present is not documented. Only
sync_token is required here; every other field is treated as optional and
defaults to an empty value.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from todoistsync.client.sync.commands import ViewStyle
from todoistsync.client.sync.status import (
    CommandStatus,
    CommandUnresolved,
    status_or_unresolved,
)
from todoistsync.core.errors import DecodeError

logger = logging.getLogger(__name__)

# Top level keys of a sync reply which are not resource collections
_META_KEYS = frozenset({"sync_token", "full_sync", "temp_id_mapping", "sync_status"})


def _require_str(data: dict[str, Any], key: str, what: str) -> str:
    value = data.get(key)
    if not isinstance(value, str):
        raise DecodeError(f"{what}: missing or invalid '{key}'")
    return value


def _optional_enum(enum_type: type[Enum], value: Any) -> Any:
    if value is None:
        return None
    try:
        return enum_type(value)
    except ValueError:
        logger.debug(f"Unknown {enum_type.__name__} value: {value!r}")
        return None


def _optional_id(value: Any) -> str | None:
    # Ids are strings in the current API version; older replies used integers
    if value is None:
        return None
    return str(value)


@dataclass(frozen=True)
class SyncProject:
    """Project as returned by the sync endpoint.

    Attributes:
        id: Project id.
        name: Project name.
        color: Color name of the project icon.
        parent_id: Parent project id, None for root projects.
        child_order: Position among projects with the same parent.
        collapsed: Whether sub-projects are collapsed.
        shared: Whether the project is shared.
        is_deleted: Whether the project is marked as deleted.
        is_archived: Whether the project is marked as archived.
        is_favorite: Whether the project is a favorite.
        sync_id: Id shared by all copies of a shared project (None otherwise).
        inbox_project: True for the Inbox (otherwise not sent).
        team_inbox: True for the Team Inbox (otherwise not sent).
        view_style: How the project is displayed.
    """

    id: str
    name: str
    color: str | None = None
    parent_id: str | None = None
    child_order: int | None = None
    collapsed: bool | None = None
    shared: bool | None = None
    is_deleted: bool | None = None
    is_archived: bool | None = None
    is_favorite: bool | None = None
    sync_id: str | None = None
    inbox_project: bool | None = None
    team_inbox: bool | None = None
    view_style: ViewStyle | None = None

    @classmethod
    def from_dict(cls, data: Any) -> SyncProject:
        """Create from API response dictionary."""
        if not isinstance(data, dict):
            raise DecodeError(f"Project entry is not an object: {data!r}")
        project_id = data.get("id")
        if isinstance(project_id, bool) or not isinstance(project_id, (str, int)):
            raise DecodeError("Project: missing or invalid 'id'")
        return cls(
            id=str(project_id),
            name=_require_str(data, "name", "Project"),
            color=data.get("color"),
            parent_id=_optional_id(data.get("parent_id")),
            child_order=data.get("child_order"),
            collapsed=data.get("collapsed"),
            shared=data.get("shared"),
            is_deleted=data.get("is_deleted"),
            is_archived=data.get("is_archived"),
            is_favorite=data.get("is_favorite"),
            sync_id=_optional_id(data.get("sync_id")),
            inbox_project=data.get("inbox_project"),
            team_inbox=data.get("team_inbox"),
            view_style=_optional_enum(ViewStyle, data.get("view_style")),
        )


@dataclass(frozen=True)
class ProjectNote:
    """Comment attached to a project.

    Attributes:
        id: Note id.
        project_id: Project the note belongs to.
        content: Markdown content.
        posted_uid: Id of the user who posted the note.
        posted_at: Posting date (ISO 8601 string, as sent).
        is_deleted: Whether the note is marked as deleted.
        uids_to_notify: User ids to notify.
        file_attachment: Attached file description, left undecoded.
        reactions: Emoji reaction to the ids of the reacting users.
    """

    id: str
    project_id: str | None
    content: str
    posted_uid: str | None = None
    posted_at: str | None = None
    is_deleted: bool | None = None
    uids_to_notify: list[str] = field(default_factory=list)
    file_attachment: Any = None
    reactions: dict[str, list[str]] | None = None

    @classmethod
    def from_dict(cls, data: Any) -> ProjectNote:
        """Create from API response dictionary."""
        if not isinstance(data, dict):
            raise DecodeError(f"Note entry is not an object: {data!r}")
        note_id = data.get("id")
        if note_id is None:
            raise DecodeError("Note: missing 'id'")
        return cls(
            id=str(note_id),
            project_id=_optional_id(data.get("project_id")),
            content=data.get("content") or "",
            posted_uid=_optional_id(data.get("posted_uid")),
            posted_at=data.get("posted_at"),
            is_deleted=data.get("is_deleted"),
            uids_to_notify=[str(uid) for uid in data.get("uids_to_notify") or []],
            file_attachment=data.get("file_attachment"),
            reactions=data.get("reactions"),
        )


@dataclass(frozen=True)
class ProjectDetail:
    """A project with its full note history."""

    project: SyncProject
    notes: list[ProjectNote] = field(default_factory=list)


@dataclass(frozen=True)
class SyncResult:
    """Decoded reply of the sync endpoint.

    Attributes:
        sync_token: New token, to send with the next sync request.
        full_sync: Whether the reply is a full snapshot (None if not sent).
        temp_id_mapping: Temp id to real id, for each successful creating command.
        sync_status: Raw command statuses by uuid. None when absent (no command
            was sent), {} when commands were sent and none was reported.
        statuses: Classified command statuses by uuid.
        projects: Decoded projects collection.
        resources: Every collection of the reply, undecoded, by name.
    """

    sync_token: str
    full_sync: bool | None = None
    temp_id_mapping: dict[str, str] = field(default_factory=dict)
    sync_status: dict[str, Any] | None = None
    statuses: dict[str, CommandStatus] = field(default_factory=dict)
    projects: list[SyncProject] = field(default_factory=list)
    resources: dict[str, Any] = field(default_factory=dict)

    def collection(self, name: str) -> Any:
        """Raw collection by name, or an empty list when absent."""
        value = self.resources.get(name)
        return [] if value is None else value

    def status_of(self, command_uuid: str) -> CommandStatus | None:
        """Classified status of a command, None if not reported."""
        return self.statuses.get(command_uuid)

    @property
    def failed(self) -> dict[str, CommandStatus]:
        """Statuses that are not CommandOk."""
        return {k: v for k, v in self.statuses.items() if not v.ok}


def _decode_temp_id_mapping(value: Any) -> dict[str, str]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise DecodeError("'temp_id_mapping' is not an object")
    return {str(k): str(v) for k, v in value.items()}


def _decode_statuses(sync_status: dict[str, Any]) -> dict[str, CommandStatus]:
    statuses: dict[str, CommandStatus] = {}
    for command_uuid, raw in sync_status.items():
        status = status_or_unresolved(raw)
        if isinstance(status, CommandUnresolved):
            logger.warning(
                f"Unresolved status for command {command_uuid}: {status.reason}"
            )
        statuses[command_uuid] = status
    return statuses


def decode_sync_result(body: Any, commands_sent: bool = True) -> SyncResult:
    """Decode the reply of the sync endpoint.

    Args:
        body: Decoded JSON body.
        commands_sent: Whether the request carried a commands field. When
            False, sync_status is reported as absent whatever the reply holds.

    Returns:
        SyncResult.

    Raises:
        DecodeError: If the body does not have the shape of a sync reply.
            A malformed single command status does not raise; it is
            reported as CommandUnresolved.
    """
    if not isinstance(body, dict):
        raise DecodeError(f"Sync reply is not an object: {type(body).__name__}")

    sync_token = body.get("sync_token")
    if not isinstance(sync_token, str) or not sync_token:
        raise DecodeError("Sync reply: missing or invalid 'sync_token'")

    full_sync = body.get("full_sync")
    if full_sync is not None and not isinstance(full_sync, bool):
        raise DecodeError("Sync reply: 'full_sync' is not a boolean")

    sync_status = body.get("sync_status")
    if sync_status is not None and not isinstance(sync_status, dict):
        raise DecodeError("Sync reply: 'sync_status' is not an object")
    if not commands_sent and sync_status is not None:
        logger.debug("Ignoring sync_status of a request without commands")
        sync_status = None

    raw_projects = body.get("projects") or []
    if not isinstance(raw_projects, list):
        raise DecodeError("Sync reply: 'projects' is not a list")

    resources = {k: v for k, v in body.items() if k not in _META_KEYS}

    return SyncResult(
        sync_token=sync_token,
        full_sync=full_sync,
        temp_id_mapping=_decode_temp_id_mapping(body.get("temp_id_mapping")),
        sync_status=dict(sync_status) if sync_status is not None else None,
        statuses=_decode_statuses(sync_status) if sync_status else {},
        projects=[SyncProject.from_dict(p) for p in raw_projects],
        resources=resources,
    )


def decode_project_detail(body: Any) -> ProjectDetail:
    """Decode the reply of the projects/get endpoint.

    Raises:
        DecodeError: If the project is missing or malformed.
    """
    if not isinstance(body, dict):
        raise DecodeError(f"Project reply is not an object: {type(body).__name__}")
    if "project" not in body:
        raise DecodeError("Project reply: missing 'project'")

    notes = body.get("notes") or []
    if not isinstance(notes, list):
        raise DecodeError("Project reply: 'notes' is not a list")

    return ProjectDetail(
        project=SyncProject.from_dict(body["project"]),
        notes=[ProjectNote.from_dict(n) for n in notes],
    )
