"""Agent session records."""

from __future__ import annotations

import sqlite3
from dataclasses import dataclass

_COLUMNS = "id, project, directory, summary, started_at, ended_at"


@dataclass
class Session:
    id: int
    project: str
    directory: str
    summary: str | None
    started_at: str
    ended_at: str | None


class SessionsMixin:
    """Session queries; expects a ``conn`` attribute."""

    conn: sqlite3.Connection

    def create_session(self, project: str, directory: str) -> int:
        cur = self.conn.execute(
            "INSERT INTO sessions (project, directory) VALUES (?, ?)", (project, directory)
        )
        return cur.lastrowid

    def end_session(self, id: int, summary: str | None) -> None:
        """Mark a session ended, keeping the old summary when none is given."""
        self.conn.execute(
            "UPDATE sessions SET ended_at = datetime('now'), "
            "summary = COALESCE(?, summary) WHERE id = ?",
            (summary, id),
        )

    def get_session(self, id: int) -> Session | None:
        row = self.conn.execute(
            f"SELECT {_COLUMNS} FROM sessions WHERE id = ?", (id,)
        ).fetchone()
        return None if row is None else Session(*row)

    def get_latest_session(self, project: str) -> Session | None:
        row = self.conn.execute(
            f"SELECT {_COLUMNS} FROM sessions WHERE project = ? ORDER BY id DESC LIMIT 1",
            (project,),
        ).fetchone()
        return None if row is None else Session(*row)

    def set_session_summary(self, id: int, summary: str) -> None:
        self.conn.execute("UPDATE sessions SET summary = ? WHERE id = ?", (summary, id))

    def list_all_sessions_for_export(self, project: str | None) -> list[Session]:
        if project is None:
            rows = self.conn.execute(f"SELECT {_COLUMNS} FROM sessions ORDER BY id")
        else:
            rows = self.conn.execute(
                f"SELECT {_COLUMNS} FROM sessions WHERE project = ? ORDER BY id", (project,)
            )
        return [Session(*row) for row in rows]