"""Sync session: the single owner of a sync cursor.

A SyncSession holds the current sync token and the temp id table, and is
the only place where either changes:

    session = SyncSession(HTTPClient(config))
    result = session.perform_sync(["projects"])          # full sync
    add = add_project("Groceries")
    result = session.perform_sync(["projects"], [add])   # incremental
    session.perform_sync([], [update_project(add.temp_id, color="red")])

Token order must match request order, so perform_sync calls are serialized
by a lock: concurrent callers wait for the batch in flight to complete.
The token only moves on a well-formed reply that was persisted, whatever
the outcome of the individual commands. A transport, decode or persistence
failure (or an interruption) leaves it untouched, so the same batch can be
sent again.

Temp ids created in an earlier batch are replaced by their real ids before
a later batch is encoded. A reference to a temp id whose creating command
failed, or whose batch did not complete, raises DanglingTempIdError
before anything is sent.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Iterable, Sequence

from todoistsync.client.api import Transport
from todoistsync.client.state import LocalSyncState
from todoistsync.client.sync.commands import SyncCommand
from todoistsync.client.sync.decoder import (
    ProjectDetail,
    SyncResult,
    decode_project_detail,
    decode_sync_result,
)
from todoistsync.client.sync.encoder import (
    ResourceTypes,
    encode_sync_request,
    validate_token,
)
from todoistsync.core.errors import DanglingTempIdError
from todoistsync.core.types import FULL_SYNC_TOKEN, SessionState

logger = logging.getLogger(__name__)

SYNC_ENDPOINT = "sync"
PROJECT_DETAIL_ENDPOINT = "projects/get"

# Stored temp ids older than this are dropped when a session opens
DEFAULT_TEMP_ID_MAX_AGE = 7 * 24 * 3600.0  # seconds

# Why a temp id has no real id yet
_PENDING = "pending"
_FAILED = "failed"


class SyncSession:
    """Drives sync requests against one sync cursor."""

    def __init__(
        self,
        transport: Transport,
        token: str = FULL_SYNC_TOKEN,
        state: LocalSyncState | None = None,
        temp_id_max_age: float | None = DEFAULT_TEMP_ID_MAX_AGE,
    ) -> None:
        """Initialize the session.

        Args:
            transport: Transport used to reach the API.
            token: Initial sync token (FULL_SYNC_TOKEN for a first sync).
            state: Optional local state. When given, the stored token and
                temp ids seed the session (unless token is set explicitly)
                and every reply is persisted.
            temp_id_max_age: Stored temp ids resolved longer ago than this
                many seconds are pruned from state on open. None keeps all.
        """
        self._transport = transport
        self._local_state = state
        self._lock = threading.Lock()

        self._resolved: dict[str, str] = {}
        # temp_id -> _PENDING or _FAILED
        self._unresolved: dict[str, str] = {}
        # temp_id -> uuid of the creating command, while pending
        self._temp_owners: dict[str, str] = {}

        if state is not None:
            if temp_id_max_age is not None:
                pruned = state.prune_temp_ids(older_than=time.time() - temp_id_max_age)
                if pruned:
                    logger.debug(f"Pruned {pruned} stored temp ids")
            self._resolved.update(state.get_temp_ids())
            if token == FULL_SYNC_TOKEN:
                token = state.get_sync_token()

        self._token = validate_token(token)
        self._state = (
            SessionState.UNINITIALIZED
            if self._token == FULL_SYNC_TOKEN
            else SessionState.SYNCED
        )

    @property
    def token(self) -> str:
        """Most recent sync token."""
        return self._token

    @property
    def state(self) -> SessionState:
        """Cursor state."""
        return self._state

    def resolve_temp_id(self, temp_id: str) -> str | None:
        """Real id of a temp id, None if it is not resolved."""
        return self._resolved.get(temp_id)

    def forget_unresolved(self) -> None:
        """Drop pending and failed temp ids.

        Use after abandoning a batch: later references to its temp ids are
        then sent as given instead of raising DanglingTempIdError.
        """
        with self._lock:
            self._discard_unresolved()

    def reset(self) -> None:
        """Go back to the full sync token.

        Resolved temp ids are kept; pending and failed ones are dropped.
        """
        with self._lock:
            self._token = FULL_SYNC_TOKEN
            self._state = SessionState.UNINITIALIZED
            self._discard_unresolved()
        logger.info("Sync session reset, next sync is a full sync")

    # === Temp id resolution ===

    def _discard_unresolved(self) -> None:
        if self._unresolved:
            logger.debug(f"Dropping {len(self._unresolved)} unresolved temp ids")
        self._unresolved.clear()
        self._temp_owners.clear()

    def _check_temp_ids(self, commands: Sequence[SyncCommand]) -> set[str]:
        """Check uuids and temp_ids of a batch.

        Returns:
            Temp ids created by the batch.

        Raises:
            ValueError: If a uuid or temp_id is used twice.
        """
        uuids: set[str] = set()
        batch_temp_ids: set[str] = set()
        for command in commands:
            if command.uuid in uuids:
                raise ValueError(f"Duplicate command uuid in batch: {command.uuid}")
            uuids.add(command.uuid)
            temp_id = command.temp_id
            if temp_id is None:
                continue
            if temp_id in batch_temp_ids:
                raise ValueError(f"Duplicate temp_id in batch: {temp_id}")
            if temp_id in self._resolved:
                raise ValueError(
                    f"temp_id {temp_id} is already resolved to {self._resolved[temp_id]}"
                )
            owner = self._temp_owners.get(temp_id)
            if owner is not None and owner != command.uuid:
                raise ValueError(f"temp_id {temp_id} already used by command {owner}")
            batch_temp_ids.add(temp_id)
        return batch_temp_ids

    def _prepare(self, commands: Sequence[SyncCommand]) -> list[SyncCommand]:
        """Check a batch and replace resolved temp ids by real ids.

        Raises:
            ValueError: If a uuid or temp_id is used twice.
            DanglingTempIdError: If a command references an unresolved temp id.
        """
        batch_temp_ids = self._check_temp_ids(commands)

        for command in commands:
            for ref in command.referenced_ids():
                # Temp ids created in the same batch are resolved by the server
                if ref in batch_temp_ids or ref not in self._unresolved:
                    continue
                logger.warning(
                    f"Command {command.uuid} references {self._unresolved[ref]} "
                    f"temp id {ref}"
                )
                raise DanglingTempIdError(ref, command.uuid)

        def rewrite(ref: str) -> str:
            if ref in batch_temp_ids:
                return ref
            return self._resolved.get(ref, ref)

        return [command.rewrite_ids(rewrite) for command in commands]

    def _mark_pending(self, commands: Sequence[SyncCommand]) -> None:
        for command in commands:
            if command.temp_id is None:
                continue
            self._temp_owners[command.temp_id] = command.uuid
            self._unresolved[command.temp_id] = _PENDING

    def _record_temp_ids(
        self, commands: Sequence[SyncCommand], result: SyncResult
    ) -> None:
        self._resolved.update(result.temp_id_mapping)
        for command in commands:
            temp_id = command.temp_id
            if temp_id is None:
                continue
            self._temp_owners.pop(temp_id, None)
            if temp_id in self._resolved:
                self._unresolved.pop(temp_id, None)
            else:
                self._unresolved[temp_id] = _FAILED
                logger.debug(f"Temp id {temp_id} of command {command.uuid} not resolved")

    # === Requests ===

    def perform_sync(
        self,
        resource_types: ResourceTypes | Iterable[str],
        commands: Sequence[SyncCommand] | None = None,
    ) -> SyncResult:
        """Send a sync request with the current token.

        Args:
            resource_types: Collections to fetch (may be empty).
            commands: Command batch, or None to send no commands.

        Returns:
            Decoded reply. Per-command outcomes are in result.statuses.

        Raises:
            DanglingTempIdError: If a command references an unresolved temp id.
            TransportError: If the HTTP exchange failed (token unchanged).
            DecodeError: If the reply is malformed (token unchanged).
            StateError: If the reply could not be persisted (token unchanged).
        """
        if not isinstance(resource_types, ResourceTypes):
            resource_types = ResourceTypes(resource_types)

        with self._lock:
            prepared = self._prepare(commands) if commands is not None else None
            fields = encode_sync_request(self._token, resource_types, prepared)

            batch_size = len(prepared) if prepared is not None else 0
            logger.debug(
                f"Sync request: token={'*' if self._token == FULL_SYNC_TOKEN else '...'} "
                f"resources={list(resource_types)} commands={batch_size}"
            )
            if prepared:
                self._mark_pending(prepared)

            body = self._transport.send(SYNC_ENDPOINT, fields)
            result = decode_sync_result(body, commands_sent=prepared is not None)

            if self._local_state is not None:
                self._local_state.save_sync(result.sync_token, result.temp_id_mapping)

            self._token = result.sync_token
            self._state = SessionState.SYNCED
            if prepared:
                self._record_temp_ids(prepared, result)

        failed = result.failed
        if failed:
            logger.warning(f"Sync completed, {len(failed)}/{batch_size} commands failed")
        else:
            logger.info(
                f"Sync completed (full_sync={result.full_sync}, commands={batch_size})"
            )
        return result

    def get_project_detail(
        self, project_id: str, include_notes: bool = True
    ) -> ProjectDetail:
        """Fetch a project with its full note history.

        A full sync returns at most 10 notes per project; this returns them all.

        Args:
            project_id: Project id (a resolved temp id is accepted).
            include_notes: Whether to fetch the notes.

        Raises:
            DanglingTempIdError: If project_id is an unresolved temp id.
            TransportError: If the HTTP exchange failed.
            DecodeError: If the reply is malformed.
        """
        with self._lock:
            if project_id in self._unresolved:
                raise DanglingTempIdError(project_id)
            real_id = self._resolved.get(project_id, project_id)
            body = self._transport.send(
                PROJECT_DETAIL_ENDPOINT,
                {
                    "project_id": real_id,
                    "all_data": "true" if include_notes else "false",
                },
            )
        return decode_project_detail(body)
