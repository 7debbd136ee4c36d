"""Sync request encoding.

The sync endpoint takes form fields:

    sync_token=*
    resource_types=["projects", "items"]
    commands=[{"type": "project_add", ...}]

resource_types is one scalar field holding JSON-array shaped text, not a
repeated field. commands is omitted entirely when no command batch is sent;
an empty batch is sent as "[]".
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable, Iterator, Sequence

from todoistsync.client.sync.commands import SyncCommand
from todoistsync.core.types import FULL_SYNC_TOKEN

logger = logging.getLogger(__name__)

ALL_RESOURCES = "all"

KNOWN_RESOURCE_TYPES = frozenset(
    {
        "labels",
        "projects",
        "items",
        "notes",
        "sections",
        "filters",
        "reminders",
        "reminders_location",
        "locations",
        "user",
        "live_notifications",
        "collaborators",
        "user_settings",
        "notification_settings",
        "user_plan_limits",
        "completed_info",
        "stats",
        ALL_RESOURCES,
    }
)


class ResourceTypes:
    """Set of resource collections to fetch.

    Entries prefixed with "-" exclude a collection (e.g. "all", "-notes").
    Duplicates collapse; the first occurrence order is kept so encoding is
    deterministic.
    """

    def __init__(self, types: Iterable[str]) -> None:
        if isinstance(types, str):
            types = [types]
        ordered: dict[str, None] = {}
        for resource_type in types:
            if not resource_type or resource_type == "-":
                raise ValueError("Resource type cannot be empty")
            if resource_type.removeprefix("-") not in KNOWN_RESOURCE_TYPES:
                logger.warning(f"Unknown resource type: {resource_type}")
            ordered[resource_type] = None
        self._types = tuple(ordered)

    @classmethod
    def of(cls, *types: str) -> ResourceTypes:
        return cls(types)

    def __iter__(self) -> Iterator[str]:
        return iter(self._types)

    def __len__(self) -> int:
        return len(self._types)

    def __contains__(self, item: object) -> bool:
        return item in self._types

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ResourceTypes):
            return NotImplemented
        return set(self._types) == set(other._types)

    def __hash__(self) -> int:
        return hash(frozenset(self._types))

    def __repr__(self) -> str:
        return f"ResourceTypes({list(self._types)!r})"

    def includes(self, resource_type: str) -> bool:
        """Whether a collection is requested by this set."""
        if f"-{resource_type}" in self._types:
            return False
        return resource_type in self._types or ALL_RESOURCES in self._types

    def encode(self) -> str:
        """Encode as the JSON-array shaped text of the resource_types field."""
        return json.dumps(list(self._types))


def validate_token(token: str) -> str:
    """Check a sync token before it is sent.

    Raises:
        ValueError: If the token is empty or blank. Only FULL_SYNC_TOKEN
            requests a full sync.
    """
    if not isinstance(token, str) or not token.strip():
        raise ValueError(f"Invalid sync token {token!r}, use {FULL_SYNC_TOKEN!r} for a full sync")
    return token


def encode_commands(commands: Sequence[SyncCommand]) -> str:
    """Encode a command batch as the JSON text of the commands field."""
    return json.dumps([command.to_dict() for command in commands])


def encode_sync_request(
    token: str,
    resource_types: ResourceTypes | Iterable[str],
    commands: Sequence[SyncCommand] | None = None,
) -> dict[str, str]:
    """Encode a sync request as form fields.

    Args:
        token: Sync token, FULL_SYNC_TOKEN for a full sync.
        resource_types: Collections to fetch.
        commands: Command batch, or None to send no commands field at all.

    Returns:
        Form fields, every value being a string.
    """
    if not isinstance(resource_types, ResourceTypes):
        resource_types = ResourceTypes(resource_types)

    fields = {
        "sync_token": validate_token(token),
        "resource_types": resource_types.encode(),
    }
    if commands is not None:
        fields["commands"] = encode_commands(commands)
    return fields
