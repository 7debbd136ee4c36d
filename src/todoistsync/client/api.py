"""HTTP transport for the sync API.

This module provides:
- Transport: the interface the sync core sends requests through
- HTTPClient: httpx-based Transport posting form-encoded requests
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Protocol

import httpx

from todoistsync.core.config import ApiConfig
from todoistsync.core.errors import (
    AuthenticationError,
    DecodeError,
    NotFoundError,
    RateLimitError,
    TransportError,
)

logger = logging.getLogger(__name__)


class Transport(Protocol):
    """Sends one request to an API endpoint and returns the decoded JSON body."""

    def send(self, endpoint: str, fields: Mapping[str, str]) -> Any:
        """Post form fields to an endpoint.

        Raises:
            TransportError: On network failure or non-success status.
            DecodeError: If the body is not valid JSON.
        """
        ...


def _error_detail(response: httpx.Response, default: str) -> str:
    """Extract a readable error message from an error response."""
    try:
        data = response.json()
    except ValueError:
        text = response.text.strip()
        return text or default
    if isinstance(data, dict):
        return str(data.get("error") or data.get("detail") or default)
    return default


def _parse_retry_after(value: str | None) -> float | None:
    if not value:
        return None
    try:
        return float(value)
    except ValueError:
        return None


class HTTPClient:
    """HTTP client for the sync API."""

    def __init__(
        self,
        config: ApiConfig,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """Initialize the HTTP client.

        Args:
            config: API configuration (base URL, token, timeout, SSL).
            transport: Optional httpx transport (used by tests).
        """
        self._config = config
        self._client = httpx.Client(
            base_url=config.base_url,
            timeout=config.timeout,
            verify=config.verify_ssl,
            headers={"Authorization": f"Bearer {config.token}"},
            transport=transport,
        )

    @property
    def config(self) -> ApiConfig:
        """Configuration this client was built with."""
        return self._config

    def close(self) -> None:
        """Close the HTTP client."""
        self._client.close()

    def __enter__(self) -> HTTPClient:
        """Context manager entry."""
        return self

    def __exit__(self, *args: object) -> None:
        """Context manager exit."""
        self.close()

    def _handle_response(self, response: httpx.Response) -> httpx.Response:
        """Handle API response and raise appropriate exceptions."""
        status = response.status_code
        if status in (401, 403):
            raise AuthenticationError(
                _error_detail(response, "Invalid or expired token"), status
            )
        if status == 404:
            raise NotFoundError(_error_detail(response, "Resource not found"), 404)
        if status == 429:
            raise RateLimitError(
                _error_detail(response, "Too many requests"),
                429,
                retry_after=_parse_retry_after(response.headers.get("Retry-After")),
            )
        if status >= 400:
            raise TransportError(_error_detail(response, "Unknown error"), status)
        return response

    def send(self, endpoint: str, fields: Mapping[str, str]) -> Any:
        """Post form-encoded fields to an endpoint.

        Args:
            endpoint: Endpoint path relative to the base URL (e.g. "sync").
            fields: Form fields, all already encoded as strings.

        Returns:
            Decoded JSON body.

        Raises:
            TransportError: On network failure or non-success status.
            DecodeError: If the body is not valid JSON.
        """
        logger.debug(f"POST {endpoint} fields={sorted(fields)}")
        try:
            response = self._client.post(
                self._config.endpoint_url(endpoint), data=dict(fields)
            )
        except httpx.RequestError as e:
            raise TransportError(f"Request to {endpoint} failed: {e}") from e

        self._handle_response(response)

        try:
            return response.json()
        except ValueError as e:
            raise DecodeError(f"Response from {endpoint} is not valid JSON") from e

    def health_check(self) -> bool:
        """Check whether the API accepts the configured token.

        Performs a minimal sync request (user resource only).

        Returns:
            True if the API answered with a success status.
        """
        try:
            response = self._client.post(
                self._config.endpoint_url("sync"),
                data={"sync_token": "*", "resource_types": '["user"]'},
            )
            return response.status_code == 200
        except httpx.RequestError:
            return False
