"""Command-line interface for todoistsync.

This module provides the main CLI entry point and assembles all commands.

Commands:
- login: Store the API token in the OS keyring
- logout: Remove the API token
- sync: Fetch resources (incremental after the first run)
- status: Show the local sync state
- reset: Forget the local sync state
- project: Send project commands (add, update, move, ...)
"""

from __future__ import annotations

import logging

import click

from todoistsync.client.cli.auth import login, logout
from todoistsync.client.cli.config import (
    get_api_token,
    get_config_dir,
    get_config_file,
    get_state_db_path,
    load_config,
    save_config,
)
from todoistsync.client.cli.project import project
from todoistsync.client.cli.sync import reset, status, sync


@click.group()
@click.version_option(package_name="todoistsync")
@click.option("--verbose", "-v", count=True, help="Increase log verbosity (-v, -vv).")
def cli(verbose: int) -> None:
    """todoistsync - Sync API client for Todoist."""
    level = logging.WARNING
    if verbose == 1:
        level = logging.INFO
    elif verbose >= 2:
        level = logging.DEBUG
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


# Auth commands
cli.add_command(login)
cli.add_command(logout)

# Sync commands
cli.add_command(sync)
cli.add_command(status)
cli.add_command(reset)

# Project commands
cli.add_command(project)


def main() -> None:
    """Entry point for the CLI."""
    cli()


__all__ = [
    # Main entry points
    "cli",
    "main",
    # Config utilities
    "get_api_token",
    "get_config_dir",
    "get_config_file",
    "get_state_db_path",
    "load_config",
    "save_config",
]
