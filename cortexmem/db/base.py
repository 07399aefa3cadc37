"""Connection handling and general queries for the memory database."""

from __future__ import annotations

import os
import sqlite3
from typing import Self

from cortexmem.db.schema import migrate


class DatabaseBase:
    """Owns the SQLite connection and the queries not tied to one table family."""

    def __init__(self, conn: sqlite3.Connection) -> None:
        self.conn = conn
        self._configure_pragmas()
        migrate(self.conn)

    @classmethod
    def open(cls, path: str | os.PathLike[str]) -> Self:
        """Open (creating if needed) the database file at *path*."""
        return cls(sqlite3.connect(os.fspath(path), isolation_level=None, check_same_thread=False))

    @classmethod
    def open_in_memory(cls) -> Self:
        """Open a fresh in-memory database."""
        return cls(sqlite3.connect(":memory:", isolation_level=None, check_same_thread=False))

    def close(self) -> None:
        self.conn.close()

    def __enter__(self) -> Self:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _configure_pragmas(self) -> None:
        self.conn.execute("PRAGMA journal_mode = wal").fetchone()
        self.conn.execute("PRAGMA foreign_keys = ON")
        self.conn.execute("PRAGMA busy_timeout = 5000")

    def schema_version(self) -> int:
        """Return the stored schema version; LookupError if it is missing."""
        row = self.conn.execute(
            "SELECT value FROM meta WHERE key = 'schema_version'"
        ).fetchone()
        if row is None:
            raise LookupError("schema_version is not recorded in meta")
        return int(row[0])

    def journal_mode(self) -> str:
        return self.conn.execute("PRAGMA journal_mode").fetchone()[0]

    def get_meta(self, key: str) -> str | None:
        """Read a value from the meta table, or None if absent."""
        row = self.conn.execute("SELECT value FROM meta WHERE key = ?", (key,)).fetchone()
        return None if row is None else row[0]

    def set_meta(self, key: str, value: str) -> None:
        self.conn.execute(
            "INSERT OR REPLACE INTO meta (key, value) VALUES (?, ?)", (key, value)
        )

    def delete_all_vectors(self) -> None:
        """Remove every stored embedding."""
        self.conn.execute("DELETE FROM vec_observations")

    def list_all_observation_ids(self) -> list[int]:
        """IDs of all non-deleted observations, ascending."""
        rows = self.conn.execute(
            "SELECT id FROM observations WHERE deleted_at IS NULL ORDER BY id"
        )
        return [row[0] for row in rows]

    def count_fts_entries(self) -> int:
        return self.conn.execute("SELECT COUNT(*) FROM observations_fts").fetchone()[0]

    def count_vector_entries(self) -> int:
        return self.conn.execute("SELECT COUNT(*) FROM vec_observations").fetchone()[0]