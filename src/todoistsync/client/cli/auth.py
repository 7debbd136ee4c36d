"""Authentication commands for the todoistsync CLI.

Commands:
- login: Store the API token in the OS keyring
- logout: Remove the API token from the OS keyring
"""

from __future__ import annotations

import sys

import click

from todoistsync.client.cli.config import (
    build_api_config,
    delete_api_token,
    store_api_token,
)


@click.command()
@click.option(
    "--token",
    default=None,
    help="API token (prompted for when omitted).",
)
@click.option(
    "--no-verify",
    is_flag=True,
    help="Store the token without checking it against the API.",
)
def login(token: str | None, no_verify: bool) -> None:
    """Store the API token in the OS keyring.

    The token can be found in the integrations settings of the web app.
    The TODOIST_API_TOKEN environment variable, when set, takes precedence.
    """
    from todoistsync.client.api import HTTPClient

    if not token:
        token = click.prompt("API token", hide_input=True)

    if not no_verify:
        with HTTPClient(build_api_config(token)) as client:
            if not client.health_check():
                click.echo("Error: The API rejected this token.", err=True)
                sys.exit(1)

    store_api_token(token)
    click.echo("Token stored.")


@click.command()
def logout() -> None:
    """Remove the API token from the OS keyring."""
    if delete_api_token():
        click.echo("Token removed.")
    else:
        click.echo("No token stored.")
