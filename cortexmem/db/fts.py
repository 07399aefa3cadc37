"""Full-text index over observations."""

from __future__ import annotations

import sqlite3
from dataclasses import dataclass


@dataclass
class FtsResult:
    rowid: int
    rank: float


class FtsMixin:
    """FTS5 index maintenance and queries; expects a ``conn`` attribute."""

    conn: sqlite3.Connection

    def sync_observation_to_fts(self, id: int) -> None:
        """Index the current contents of an observation."""
        self.conn.execute(
            "INSERT INTO observations_fts(rowid, title, content, concepts, facts, type, project) "
            "SELECT id, title, content, COALESCE(concepts, ''), COALESCE(facts, ''), type, project "
            "FROM observations WHERE id = ?",
            (id,),
        )

    def remove_from_fts(self, id: int) -> None:
        """Drop an observation from the index using its current stored values."""
        self.conn.execute(
            "INSERT INTO observations_fts(observations_fts, rowid, title, content, concepts, "
            "facts, type, project) "
            "SELECT 'delete', id, title, content, COALESCE(concepts, ''), COALESCE(facts, ''), "
            "type, project FROM observations WHERE id = ?",
            (id,),
        )

    def search_fts(self, query: str, project: str | None, limit: int) -> list[FtsResult]:
        """Match *query* against title, content, concepts and facts, best first."""
        if project is None:
            fts_query = f"{{title content concepts facts}}: {query}"
        else:
            fts_query = f'({{title content concepts facts}}: {query}) AND project:"{project}"'
        rows = self.conn.execute(
            "SELECT rowid, rank FROM observations_fts WHERE observations_fts MATCH ? "
            "ORDER BY rank LIMIT ?",
            (fts_query, limit),
        )
        return [FtsResult(rowid=row[0], rank=row[1]) for row in rows]