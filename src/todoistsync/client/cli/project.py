"""Project commands for the todoistsync CLI.

Each command sends a single-command batch through the sync session and
prints the outcome reported by the server.

Commands:
- project add / update / move / delete / archive / unarchive / reorder
- project info: Show a project with all its notes
"""

from __future__ import annotations

import sys

import click

from todoistsync.client.cli.sync import fail, format_status, open_session
from todoistsync.client.sync.commands import (
    ProjectOrder,
    SyncCommand,
    ViewStyle,
    add_project,
    archive_project,
    delete_project,
    move_project,
    reorder_projects,
    unarchive_project,
    update_project,
)
from todoistsync.core.errors import TodoistSyncError

VIEW_STYLES = click.Choice([v.value for v in ViewStyle])


def run_command(command: SyncCommand) -> str | None:
    """Send one command and print its status.

    Returns:
        Real id of the created resource for creating commands, else None.
        Exits with status 1 if the command failed.
    """
    from todoistsync.client.sync.retry import retry_with_backoff

    with open_session() as session:
        try:
            result = retry_with_backoff(
                lambda: session.perform_sync(["projects"], [command])
            )
        except TodoistSyncError as e:
            fail(e)

    status = result.status_of(command.uuid)
    click.echo(f"{command.type}: {format_status(status)}")
    if status is None or not status.ok:
        sys.exit(1)

    if command.temp_id is not None:
        return result.temp_id_mapping.get(command.temp_id)
    return None


def _view_style(value: str | None) -> ViewStyle | None:
    return ViewStyle(value) if value else None


@click.group()
def project() -> None:
    """Project commands."""


@project.command("add")
@click.argument("name")
@click.option("--color", default=None, help="Color name (e.g. berry_red).")
@click.option("--parent", "parent_id", default=None, help="Parent project id.")
@click.option("--order", "child_order", type=int, default=None, help="Position among siblings.")
@click.option("--favorite/--no-favorite", default=None, help="Mark as favorite.")
@click.option("--view-style", type=VIEW_STYLES, default=None, help="Display style.")
def add_cmd(
    name: str,
    color: str | None,
    parent_id: str | None,
    child_order: int | None,
    favorite: bool | None,
    view_style: str | None,
) -> None:
    """Create a project."""
    real_id = run_command(
        add_project(
            name,
            color=color,
            parent_id=parent_id,
            child_order=child_order,
            is_favorite=favorite,
            view_style=_view_style(view_style),
        )
    )
    if real_id:
        click.echo(f"Project id: {real_id}")


@project.command("update")
@click.argument("project_id")
@click.option("--name", default=None, help="New name.")
@click.option("--color", default=None, help="New color name.")
@click.option("--collapsed/--expanded", default=None, help="Collapse sub-projects.")
@click.option("--favorite/--no-favorite", default=None, help="Mark as favorite.")
@click.option("--view-style", type=VIEW_STYLES, default=None, help="Display style.")
def update_cmd(
    project_id: str,
    name: str | None,
    color: str | None,
    collapsed: bool | None,
    favorite: bool | None,
    view_style: str | None,
) -> None:
    """Update a project. Only the given options are changed."""
    run_command(
        update_project(
            project_id,
            name=name,
            color=color,
            collapsed=collapsed,
            is_favorite=favorite,
            view_style=_view_style(view_style),
        )
    )


@project.command("move")
@click.argument("project_id")
@click.option("--parent", "parent_id", default=None, help="New parent (root when omitted).")
def move_cmd(project_id: str, parent_id: str | None) -> None:
    """Move a project under another project, or to the root."""
    run_command(move_project(project_id, parent_id=parent_id))


@project.command("delete")
@click.argument("project_id")
@click.confirmation_option(prompt="Delete this project and all its sub-projects?")
def delete_cmd(project_id: str) -> None:
    """Delete a project and its descendants."""
    run_command(delete_project(project_id))


@project.command("archive")
@click.argument("project_id")
def archive_cmd(project_id: str) -> None:
    """Archive a project and its descendants."""
    run_command(archive_project(project_id))


@project.command("unarchive")
@click.argument("project_id")
def unarchive_cmd(project_id: str) -> None:
    """Unarchive a project (it becomes a root project)."""
    run_command(unarchive_project(project_id))


@project.command("reorder")
@click.argument("orders", nargs=-1, required=True)
def reorder_cmd(orders: tuple[str, ...]) -> None:
    """Set child_order of projects, given as ID=ORDER pairs."""
    entries = []
    for order in orders:
        project_id, sep, value = order.partition("=")
        if not sep or not project_id or not value.lstrip("-").isdigit():
            raise click.BadParameter(f"Expected ID=ORDER, got {order!r}", param_hint="ORDERS")
        entries.append(ProjectOrder(id=project_id, child_order=int(value)))
    run_command(reorder_projects(entries))


@project.command("info")
@click.argument("project_id")
@click.option("--no-notes", is_flag=True, help="Do not fetch the notes.")
def info_cmd(project_id: str, no_notes: bool) -> None:
    """Show a project with all its notes."""
    with open_session() as session:
        try:
            detail = session.get_project_detail(project_id, include_notes=not no_notes)
        except TodoistSyncError as e:
            fail(e)

    p = detail.project
    click.echo(f"{p.name} ({p.id})")
    if p.color:
        click.echo(f"  color: {p.color}")
    if p.parent_id:
        click.echo(f"  parent: {p.parent_id}")
    if p.is_archived:
        click.echo("  archived")
    for note in detail.notes:
        click.echo(f"  - [{note.posted_at or '?'}] {note.content}")
