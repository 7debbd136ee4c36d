"""Sync command construction.

A sync command is a write operation sent in a batch to the sync endpoint:

    {"type": "project_add", "uuid": "...", "temp_id": "...",
     "args": {"name": "Groceries"}}

Command UUID:
    Every command gets a fresh uuid. The server reports the outcome of the
    command under that uuid in sync_status, and never executes the same uuid
    twice, so a batch can be re-sent safely after a transport failure.

Temporary resource id:
    Commands that create a resource carry a temp_id. Later commands in the
    same batch may use it in place of the real id; the server resolves it.
    Once the creating command succeeded the response's temp_id_mapping gives
    the real id (see SyncSession for references across batches).

Arguments:
    args only contain the fields the caller supplied. The server treats an
    absent field as "unchanged" and a null field as "set to null".
"""

from __future__ import annotations

import uuid
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any

# Maps an id to the id that must be sent instead
IdRewriter = Callable[[str], str]


class ViewStyle(str, Enum):
    """How a project is displayed in the official clients."""

    LIST = "list"
    BOARD = "board"


class CommandType(str, Enum):
    """Command types built by this module."""

    PROJECT_ADD = "project_add"
    PROJECT_UPDATE = "project_update"
    PROJECT_MOVE = "project_move"
    PROJECT_DELETE = "project_delete"
    PROJECT_ARCHIVE = "project_archive"
    PROJECT_UNARCHIVE = "project_unarchive"
    PROJECT_REORDER = "project_reorder"


def _put(args: dict[str, Any], key: str, value: Any) -> None:
    if value is None:
        return
    args[key] = value.value if isinstance(value, Enum) else value


@dataclass(frozen=True)
class ProjectAddArgs:
    """Arguments of project_add."""

    name: str
    color: str | None = None
    parent_id: str | None = None
    child_order: int | None = None
    is_favorite: bool | None = None
    view_style: ViewStyle | None = None

    def to_dict(self) -> dict[str, Any]:
        args: dict[str, Any] = {"name": self.name}
        _put(args, "color", self.color)
        _put(args, "parent_id", self.parent_id)
        _put(args, "child_order", self.child_order)
        _put(args, "is_favorite", self.is_favorite)
        _put(args, "view_style", self.view_style)
        return args

    def referenced_ids(self) -> list[str]:
        return [self.parent_id] if self.parent_id else []

    def rewrite_ids(self, rewrite: IdRewriter) -> ProjectAddArgs:
        if self.parent_id is None:
            return self
        return replace(self, parent_id=rewrite(self.parent_id))


@dataclass(frozen=True)
class ProjectUpdateArgs:
    """Arguments of project_update."""

    id: str
    name: str | None = None
    color: str | None = None
    collapsed: bool | None = None
    is_favorite: bool | None = None
    view_style: ViewStyle | None = None

    def to_dict(self) -> dict[str, Any]:
        args: dict[str, Any] = {"id": self.id}
        _put(args, "name", self.name)
        _put(args, "color", self.color)
        _put(args, "collapsed", self.collapsed)
        _put(args, "is_favorite", self.is_favorite)
        _put(args, "view_style", self.view_style)
        return args

    def referenced_ids(self) -> list[str]:
        return [self.id]

    def rewrite_ids(self, rewrite: IdRewriter) -> ProjectUpdateArgs:
        return replace(self, id=rewrite(self.id))


@dataclass(frozen=True)
class ProjectMoveArgs:
    """Arguments of project_move.

    parent_id is always sent: None moves the project to the root.
    """

    id: str
    parent_id: str | None

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "parent_id": self.parent_id}

    def referenced_ids(self) -> list[str]:
        ids = [self.id]
        if self.parent_id is not None:
            ids.append(self.parent_id)
        return ids

    def rewrite_ids(self, rewrite: IdRewriter) -> ProjectMoveArgs:
        parent_id = rewrite(self.parent_id) if self.parent_id is not None else None
        return ProjectMoveArgs(id=rewrite(self.id), parent_id=parent_id)


@dataclass(frozen=True)
class ProjectRefArgs:
    """Arguments of commands that only reference a project by id."""

    id: str

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id}

    def referenced_ids(self) -> list[str]:
        return [self.id]

    def rewrite_ids(self, rewrite: IdRewriter) -> ProjectRefArgs:
        return ProjectRefArgs(id=rewrite(self.id))


@dataclass(frozen=True)
class ProjectOrder:
    """New child_order of one project, used by project_reorder."""

    id: str
    child_order: int

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "child_order": self.child_order}


@dataclass(frozen=True)
class ProjectReorderArgs:
    """Arguments of project_reorder. Entry order is kept as given."""

    projects: tuple[ProjectOrder, ...]

    def to_dict(self) -> dict[str, Any]:
        return {"projects": [p.to_dict() for p in self.projects]}

    def referenced_ids(self) -> list[str]:
        return [p.id for p in self.projects]

    def rewrite_ids(self, rewrite: IdRewriter) -> ProjectReorderArgs:
        return ProjectReorderArgs(
            projects=tuple(
                ProjectOrder(id=rewrite(p.id), child_order=p.child_order)
                for p in self.projects
            )
        )


def _is_id_key(key: str) -> bool:
    return key == "id" or key.endswith("_id")


def _is_ids_key(key: str) -> bool:
    return key == "ids" or key.endswith("_ids")


def _is_id_keyed_mapping(key: str) -> bool:
    # e.g. item_update_day_orders {"ids_to_orders": {id: order}}
    return key.startswith("ids_to_") or (key.startswith("id_") and key.endswith("_mapping"))


def _walk_ids(value: Any, rewrite: IdRewriter, key: str | None = None) -> Any:
    """Rebuild a JSON-like value, passing every resource reference through rewrite.

    References are string values of "id" / "*_id" keys, string items of
    "ids" / "*_ids" lists, and the keys of id-keyed mappings, at any depth.
    """
    if isinstance(value, Mapping):
        if key is not None and _is_id_keyed_mapping(key):
            return {
                (rewrite(k) if isinstance(k, str) else k): _walk_ids(v, rewrite)
                for k, v in value.items()
            }
        return {k: _walk_ids(v, rewrite, k) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        if key is not None and _is_ids_key(key):
            return [rewrite(v) if isinstance(v, str) else _walk_ids(v, rewrite) for v in value]
        return [_walk_ids(v, rewrite) for v in value]
    if isinstance(value, str) and key is not None and _is_id_key(key):
        return rewrite(value)
    return value


@dataclass(frozen=True)
class RawArgs:
    """Opaque arguments for command types without a dedicated shape.

    Resource references are found at any depth: "id" and "*_id" string
    values, items of "ids" and "*_ids" lists, and the keys of id-keyed
    mappings such as "ids_to_orders".
    """

    values: Mapping[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return dict(self.values)

    def referenced_ids(self) -> list[str]:
        found: list[str] = []

        def collect(ref: str) -> str:
            found.append(ref)
            return ref

        _walk_ids(self.values, collect)
        return found

    def rewrite_ids(self, rewrite: IdRewriter) -> RawArgs:
        return RawArgs(values=_walk_ids(self.values, rewrite))


CommandArgs = (
    ProjectAddArgs
    | ProjectUpdateArgs
    | ProjectMoveArgs
    | ProjectRefArgs
    | ProjectReorderArgs
    | RawArgs
)


@dataclass(frozen=True)
class SyncCommand:
    """A command to send in a sync batch.

    Attributes:
        type: Command type (e.g. "project_add").
        args: Typed command arguments.
        uuid: Unique command id, used for idempotency and status lookup.
        temp_id: Placeholder id of the created resource (creating commands only).
    """

    type: str
    args: CommandArgs
    uuid: str
    temp_id: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Wire representation of the command."""
        data: dict[str, Any] = {
            "type": self.type,
            "args": self.args.to_dict(),
            "uuid": self.uuid,
        }
        if self.temp_id is not None:
            data["temp_id"] = self.temp_id
        return data

    def referenced_ids(self) -> list[str]:
        """Resource ids (real or temporary) this command refers to."""
        return self.args.referenced_ids()

    def rewrite_ids(self, rewrite: IdRewriter) -> SyncCommand:
        """Return a copy whose referenced ids went through rewrite.

        uuid and temp_id are kept so retries stay idempotent.
        """
        return replace(self, args=self.args.rewrite_ids(rewrite))


def new_uuid() -> str:
    """Generate a fresh command uuid or temp id."""
    return str(uuid.uuid4())


def _command(
    command_type: CommandType | str,
    args: CommandArgs,
    creates: bool = False,
) -> SyncCommand:
    type_name = command_type.value if isinstance(command_type, CommandType) else command_type
    return SyncCommand(
        type=type_name,
        args=args,
        uuid=new_uuid(),
        temp_id=new_uuid() if creates else None,
    )


def add_project(
    name: str,
    color: str | None = None,
    parent_id: str | None = None,
    child_order: int | None = None,
    is_favorite: bool | None = None,
    view_style: ViewStyle | None = None,
) -> SyncCommand:
    """Add a new project.

    Args:
        name: Name of the project.
        color: Color name of the project icon (e.g. "berry_red").
        parent_id: Parent project id (may be a temp id). Omit for a root project.
        child_order: Position among the projects sharing the same parent.
        is_favorite: Whether the project is a favorite.
        view_style: How the project is displayed.

    Returns:
        A project_add command carrying a fresh temp_id.
    """
    return _command(
        CommandType.PROJECT_ADD,
        ProjectAddArgs(
            name=name,
            color=color,
            parent_id=parent_id,
            child_order=child_order,
            is_favorite=is_favorite,
            view_style=view_style,
        ),
        creates=True,
    )


def update_project(
    project_id: str,
    name: str | None = None,
    color: str | None = None,
    collapsed: bool | None = None,
    is_favorite: bool | None = None,
    view_style: ViewStyle | None = None,
) -> SyncCommand:
    """Update an existing project (project_id may be a temp id).

    Only the supplied fields are changed.
    """
    return _command(
        CommandType.PROJECT_UPDATE,
        ProjectUpdateArgs(
            id=project_id,
            name=name,
            color=color,
            collapsed=collapsed,
            is_favorite=is_favorite,
            view_style=view_style,
        ),
    )


def move_project(project_id: str, parent_id: str | None = None) -> SyncCommand:
    """Change the parent of a project.

    Args:
        project_id: Project to move (may be a temp id).
        parent_id: New parent project (may be a temp id). None moves the
            project to the root; it is sent as an explicit null.
    """
    return _command(
        CommandType.PROJECT_MOVE,
        ProjectMoveArgs(id=project_id, parent_id=parent_id),
    )


def delete_project(project_id: str) -> SyncCommand:
    """Delete a project and all its descendants."""
    return _command(CommandType.PROJECT_DELETE, ProjectRefArgs(id=project_id))


def archive_project(project_id: str) -> SyncCommand:
    """Archive a project and its descendants."""
    return _command(CommandType.PROJECT_ARCHIVE, ProjectRefArgs(id=project_id))


def unarchive_project(project_id: str) -> SyncCommand:
    """Unarchive a project.

    Ancestors stay archived; the project becomes a root project placed after
    the other root projects.
    """
    return _command(CommandType.PROJECT_UNARCHIVE, ProjectRefArgs(id=project_id))


def reorder_projects(projects: Iterable[ProjectOrder]) -> SyncCommand:
    """Update child_order of several projects at once.

    The entries are sent in the order given.
    """
    return _command(
        CommandType.PROJECT_REORDER,
        ProjectReorderArgs(projects=tuple(projects)),
    )


def raw_command(
    command_type: str,
    args: Mapping[str, Any],
    creates: bool = False,
) -> SyncCommand:
    """Build a command of a type without a dedicated factory.

    Args:
        command_type: Command type (e.g. "item_add").
        args: Arguments, sent as given.
        creates: Whether the command creates a resource (adds a temp_id).
    """
    return _command(command_type, RawArgs(values=dict(args)), creates=creates)
