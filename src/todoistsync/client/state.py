"""Local state persistence for sync sessions.

This module provides:
- LocalSyncState: SQLite-based storage of the sync token and of resolved
  temp ids, so an incremental sync can resume across processes.

The token and the temp ids of one sync reply are written in a single
transaction: a crash never leaves a token whose temp ids are missing.
"""

from __future__ import annotations

import logging
import sqlite3
import threading
import time
from collections.abc import Mapping
from pathlib import Path

from todoistsync.core.errors import StateError
from todoistsync.core.types import FULL_SYNC_TOKEN

logger = logging.getLogger(__name__)

_TOKEN_KEY = "sync_token"
_SYNCED_AT_KEY = "last_synced_at"


class LocalSyncState:
    """SQLite-based local state for a sync session."""

    def __init__(self, db_path: Path) -> None:
        """Initialize local state database.

        Args:
            db_path: Path to SQLite database file.
        """
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)

        # Lock for thread-safe database access
        self._lock = threading.RLock()

        self._conn = sqlite3.connect(
            str(self._db_path),
            check_same_thread=False,
            isolation_level=None,  # Autocommit mode
        )
        self._conn.row_factory = sqlite3.Row

        self._conn.execute("PRAGMA journal_mode=WAL")

        self._create_tables()

    def _create_tables(self) -> None:
        """Create database tables if they don't exist."""
        self._conn.executescript("""
            -- Key-value sync state (token, last sync time)
            CREATE TABLE IF NOT EXISTS sync_meta (
                key TEXT PRIMARY KEY,
                value TEXT
            );

            -- Temp ids resolved by the server
            CREATE TABLE IF NOT EXISTS temp_ids (
                temp_id TEXT PRIMARY KEY,
                real_id TEXT NOT NULL,
                created_at REAL NOT NULL
            );
        """)

    def close(self) -> None:
        """Close the database connection."""
        self._conn.close()

    def __enter__(self) -> LocalSyncState:
        """Context manager entry."""
        return self

    def __exit__(self, *args: object) -> None:
        """Context manager exit."""
        self.close()

    def _get_meta(self, key: str) -> str | None:
        with self._lock:
            row = self._conn.execute(
                "SELECT value FROM sync_meta WHERE key = ?", (key,)
            ).fetchone()
        return None if row is None else row["value"]

    # === Sync token ===

    def get_sync_token(self) -> str:
        """Get the stored sync token.

        Returns:
            The last stored token, or FULL_SYNC_TOKEN if none.
        """
        return self._get_meta(_TOKEN_KEY) or FULL_SYNC_TOKEN

    def get_last_synced_at(self) -> float | None:
        """Get the time of the last stored sync (epoch seconds)."""
        value = self._get_meta(_SYNCED_AT_KEY)
        return float(value) if value is not None else None

    def save_sync(self, sync_token: str, temp_id_mapping: Mapping[str, str]) -> None:
        """Store the outcome of a sync reply.

        Args:
            sync_token: New sync token.
            temp_id_mapping: Temp ids resolved by the reply.

        Raises:
            StateError: If the database could not be written. Nothing is
                stored in that case.
        """
        now = time.time()
        with self._lock:
            try:
                self._conn.execute("BEGIN")
                try:
                    self._conn.executemany(
                        "INSERT OR REPLACE INTO sync_meta (key, value) VALUES (?, ?)",
                        [(_TOKEN_KEY, sync_token), (_SYNCED_AT_KEY, str(now))],
                    )
                    self._conn.executemany(
                        """
                        INSERT OR REPLACE INTO temp_ids (temp_id, real_id, created_at)
                        VALUES (?, ?, ?)
                        """,
                        [(temp, real, now) for temp, real in temp_id_mapping.items()],
                    )
                except sqlite3.Error:
                    self._conn.execute("ROLLBACK")
                    raise
                self._conn.execute("COMMIT")
            except sqlite3.Error as e:
                logger.error(f"Failed to store sync state in {self._db_path}: {e}")
                raise StateError(f"Could not store sync state: {e}") from e
        logger.debug(
            f"Stored sync token ({len(temp_id_mapping)} temp ids resolved)"
        )

    # === Temp ids ===

    def get_temp_ids(self) -> dict[str, str]:
        """Get every resolved temp id."""
        with self._lock:
            rows = self._conn.execute(
                "SELECT temp_id, real_id FROM temp_ids"
            ).fetchall()
        return {row["temp_id"]: row["real_id"] for row in rows}

    def prune_temp_ids(self, older_than: float) -> int:
        """Delete temp ids resolved before a given time.

        Args:
            older_than: Epoch seconds.

        Returns:
            Number of deleted entries.
        """
        with self._lock:
            cursor = self._conn.execute(
                "DELETE FROM temp_ids WHERE created_at < ?", (older_than,)
            )
        return cursor.rowcount

    def clear(self) -> None:
        """Forget the token and temp ids (next sync is a full sync)."""
        with self._lock:
            self._conn.execute("DELETE FROM sync_meta")
            self._conn.execute("DELETE FROM temp_ids")
        logger.info("Local sync state cleared")
