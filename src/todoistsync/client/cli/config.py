"""Configuration utilities for the todoistsync CLI.

This module provides shared configuration functions used across CLI commands.

The API token is looked up in the TODOIST_API_TOKEN environment variable,
then in the OS keyring (stored there by 'todoistsync login').
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any

import keyring
from keyring.errors import PasswordDeleteError

from todoistsync.core.config import DEFAULT_BASE_URL, ApiConfig

KEYRING_SERVICE = "todoistsync"
KEYRING_USERNAME = "api_token"
TOKEN_ENV_VAR = "TODOIST_API_TOKEN"
STATE_DB_NAME = "state.db"


def get_config_dir() -> Path:
    """Get the configuration directory for todoistsync.

    Returns:
        Path to ~/.todoistsync or equivalent.
    """
    return Path.home() / ".todoistsync"


def get_config_file() -> Path:
    """Get the path to the config file."""
    return get_config_dir() / "config.json"


def get_state_db_path() -> Path:
    """Get the path to the local sync state database."""
    return get_config_dir() / STATE_DB_NAME


def load_config() -> dict[str, Any]:
    """Load configuration from config file."""
    config_file = get_config_file()
    if config_file.exists():
        return dict(json.loads(config_file.read_text()))
    return {}


def save_config(config: dict[str, Any]) -> None:
    """Save configuration to config file."""
    config_file = get_config_file()
    config_file.parent.mkdir(parents=True, exist_ok=True)
    config_file.write_text(json.dumps(config, indent=2))


def get_api_token() -> str | None:
    """Get the API token from the environment or the keyring.

    Returns:
        The token, or None if none is configured.
    """
    token = os.environ.get(TOKEN_ENV_VAR)
    if token:
        return token
    return keyring.get_password(KEYRING_SERVICE, KEYRING_USERNAME)


def store_api_token(token: str) -> None:
    """Store the API token in the keyring."""
    keyring.set_password(KEYRING_SERVICE, KEYRING_USERNAME, token)


def delete_api_token() -> bool:
    """Remove the API token from the keyring.

    Returns:
        True if a token was removed.
    """
    try:
        keyring.delete_password(KEYRING_SERVICE, KEYRING_USERNAME)
    except PasswordDeleteError:
        return False
    return True


def build_api_config(token: str) -> ApiConfig:
    """Build the API configuration from config.json and a token.

    Recognised config.json keys: base_url, timeout, verify_ssl.
    """
    config = load_config()
    return ApiConfig(
        token=token,
        base_url=config.get("base_url") or DEFAULT_BASE_URL,
        timeout=float(config.get("timeout", 30.0)),
        verify_ssl=bool(config.get("verify_ssl", True)),
    )


def get_temp_id_max_age() -> float | None:
    """Age in seconds after which stored temp ids are pruned.

    Read from the temp_id_max_age key of config.json; null keeps them forever.
    """
    from todoistsync.client.sync.session import DEFAULT_TEMP_ID_MAX_AGE

    config = load_config()
    if "temp_id_max_age" not in config:
        return DEFAULT_TEMP_ID_MAX_AGE
    value = config["temp_id_max_age"]
    return None if value is None else float(value)
