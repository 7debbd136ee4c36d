"""Sync protocol client.

Architecture:
    commands → SyncSession → encoder → Transport → decoder → status

Components:
- **commands**: Builds typed sync commands (uuid, temp_id, args)
- **encoder**: Encodes token, resource types and command batch as form fields
- **decoder**: Decodes the reply into a SyncResult
- **status**: Classifies each command status (ok / error / unresolved)
- **SyncSession**: Owns the sync token and the temp id table
- **retry**: Caller-side retry of failed HTTP exchanges

All public symbols are re-exported here.
"""

from todoistsync.client.sync.commands import (
    CommandArgs,
    CommandType,
    ProjectAddArgs,
    ProjectMoveArgs,
    ProjectOrder,
    ProjectRefArgs,
    ProjectReorderArgs,
    ProjectUpdateArgs,
    RawArgs,
    SyncCommand,
    ViewStyle,
    add_project,
    archive_project,
    delete_project,
    move_project,
    raw_command,
    reorder_projects,
    unarchive_project,
    update_project,
)
from todoistsync.client.sync.decoder import (
    ProjectDetail,
    ProjectNote,
    SyncProject,
    SyncResult,
    decode_project_detail,
    decode_sync_result,
)
from todoistsync.client.sync.encoder import (
    KNOWN_RESOURCE_TYPES,
    ResourceTypes,
    encode_sync_request,
)
from todoistsync.client.sync.retry import (
    DEFAULT_BACKOFF_MULTIPLIER,
    DEFAULT_INITIAL_BACKOFF,
    DEFAULT_MAX_BACKOFF,
    DEFAULT_MAX_RETRIES,
    retry_with_backoff,
)
from todoistsync.client.sync.session import SyncSession
from todoistsync.client.sync.status import (
    OK,
    CommandError,
    CommandOk,
    CommandStatus,
    CommandUnresolved,
    ErrorCode,
    classify_status,
    status_or_unresolved,
)

__all__ = [
    # Commands
    "CommandArgs",
    "CommandType",
    "ProjectAddArgs",
    "ProjectMoveArgs",
    "ProjectOrder",
    "ProjectRefArgs",
    "ProjectReorderArgs",
    "ProjectUpdateArgs",
    "RawArgs",
    "SyncCommand",
    "ViewStyle",
    "add_project",
    "archive_project",
    "delete_project",
    "move_project",
    "raw_command",
    "reorder_projects",
    "unarchive_project",
    "update_project",
    # Decoding
    "ProjectDetail",
    "ProjectNote",
    "SyncProject",
    "SyncResult",
    "decode_project_detail",
    "decode_sync_result",
    # Encoding
    "KNOWN_RESOURCE_TYPES",
    "ResourceTypes",
    "encode_sync_request",
    # Retry
    "DEFAULT_BACKOFF_MULTIPLIER",
    "DEFAULT_INITIAL_BACKOFF",
    "DEFAULT_MAX_BACKOFF",
    "DEFAULT_MAX_RETRIES",
    "retry_with_backoff",
    # Session
    "SyncSession",
    # Status
    "OK",
    "CommandError",
    "CommandOk",
    "CommandStatus",
    "CommandUnresolved",
    "ErrorCode",
    "classify_status",
    "status_or_unresolved",
]
