"""Sync commands for the todoistsync CLI.

Commands:
- sync: Fetch resources incrementally from the API
- status: Show the local sync state
"""

from __future__ import annotations

import sys
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime
from typing import TYPE_CHECKING, NoReturn

import click

from todoistsync.client.cli.config import (
    build_api_config,
    get_api_token,
    get_state_db_path,
    get_temp_id_max_age,
)
from todoistsync.client.sync.status import (
    CommandError,
    CommandStatus,
    CommandUnresolved,
)
from todoistsync.core.errors import TodoistSyncError

if TYPE_CHECKING:
    from todoistsync.client.sync.session import SyncSession


def format_status(status: CommandStatus | None) -> str:
    """Render a command status for display."""
    if status is None:
        return "not reported"
    if isinstance(status, CommandError):
        text = f"error {status.code}: {status.message}"
        if status.tag:
            text += f" [{status.tag}]"
        return text
    if isinstance(status, CommandUnresolved):
        return f"unresolved ({status.reason})"
    return "ok"


@contextmanager
def open_session() -> Iterator[SyncSession]:
    """Open a sync session backed by the local state database.

    Exits with an error if no API token is configured.
    """
    from todoistsync.client.api import HTTPClient
    from todoistsync.client.state import LocalSyncState
    from todoistsync.client.sync.session import SyncSession

    token = get_api_token()
    if not token:
        click.echo("Error: No API token. Run 'todoistsync login' first.", err=True)
        sys.exit(1)

    with (
        HTTPClient(build_api_config(token)) as client,
        LocalSyncState(get_state_db_path()) as state,
    ):
        yield SyncSession(
            client, state=state, temp_id_max_age=get_temp_id_max_age()
        )


def fail(error: Exception) -> NoReturn:
    """Report a library error and exit."""
    click.echo(f"Error: {error}", err=True)
    sys.exit(1)


@click.command()
@click.option(
    "--resource-type",
    "-r",
    "resource_types",
    multiple=True,
    default=("all",),
    show_default=True,
    help="Resource type to fetch (repeatable, prefix with '-' to exclude).",
)
@click.option("--full", is_flag=True, help="Ignore the stored token and fetch everything.")
@click.option(
    "--retries",
    type=int,
    default=3,
    show_default=True,
    help="Retries on network errors and server errors.",
)
def sync(resource_types: tuple[str, ...], full: bool, retries: int) -> None:
    """Fetch resources from the API.

    The first run (or --full) fetches everything; later runs only fetch
    what changed since the previous run.
    """
    from todoistsync.client.sync.retry import retry_with_backoff

    with open_session() as session:
        if full:
            session.reset()
        try:
            result = retry_with_backoff(
                lambda: session.perform_sync(list(resource_types)),
                max_retries=retries,
            )
        except (TodoistSyncError, ValueError) as e:
            fail(e)

    kind = "Full" if result.full_sync else "Incremental"
    click.echo(f"{kind} sync completed.")
    for name, collection in sorted(result.resources.items()):
        if isinstance(collection, list):
            click.echo(f"  {name}: {len(collection)}")


@click.command()
def status() -> None:
    """Show the local sync state."""
    from todoistsync.client.state import LocalSyncState
    from todoistsync.core.types import FULL_SYNC_TOKEN

    db_path = get_state_db_path()
    if not db_path.exists():
        click.echo("Never synced.")
        return

    with LocalSyncState(db_path) as state:
        token = state.get_sync_token()
        synced_at = state.get_last_synced_at()
        temp_ids = state.get_temp_ids()

    if token == FULL_SYNC_TOKEN or synced_at is None:
        click.echo("Never synced.")
        return

    click.echo(f"Last sync: {datetime.fromtimestamp(synced_at).isoformat(timespec='seconds')}")
    click.echo(f"Resolved temp ids: {len(temp_ids)}")


@click.command()
@click.confirmation_option(prompt="Forget the stored sync token and temp ids?")
def reset() -> None:
    """Forget the local sync state; the next sync is a full sync."""
    from todoistsync.client.state import LocalSyncState

    db_path = get_state_db_path()
    if not db_path.exists():
        click.echo("Nothing to reset.")
        return

    with LocalSyncState(db_path) as state:
        state.clear()
    click.echo("Local sync state cleared.")
