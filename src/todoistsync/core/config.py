"""Shared configuration classes for todoistsync.

This module defines configuration classes used by the transport and the CLI.
"""

from __future__ import annotations

from dataclasses import dataclass

DEFAULT_BASE_URL = "https://api.todoist.com/sync/v9"


@dataclass
class ApiConfig:
    """Configuration for connecting to the sync API.

    Attributes:
        token: API token (personal token or OAuth access token).
        base_url: Base URL of the sync API, without trailing slash.
        timeout: Request timeout in seconds.
        verify_ssl: Whether to verify SSL certificates (default True).
    """

    token: str
    base_url: str = DEFAULT_BASE_URL
    timeout: float = 30.0
    verify_ssl: bool = True

    def __post_init__(self) -> None:
        """Normalize base URL."""
        self.base_url = self.base_url.rstrip("/")

    def endpoint_url(self, endpoint: str) -> str:
        """Build the absolute URL of an endpoint relative to base_url."""
        return f"{self.base_url}/{endpoint.lstrip('/')}"
