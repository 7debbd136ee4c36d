"""Shared types for todoistsync."""

from __future__ import annotations

from enum import Enum

FULL_SYNC_TOKEN = "*"


class SessionState(str, Enum):
    """State of a sync session's cursor.

    A session starts UNINITIALIZED (holding the full sync token) and moves
    to SYNCED on its first well-formed response. There are no other states.
    """

    UNINITIALIZED = "uninitialized"
    SYNCED = "synced"
