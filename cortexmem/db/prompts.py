"""User prompt log with full-text search."""

from __future__ import annotations

import sqlite3
from dataclasses import dataclass


@dataclass
class Prompt:
    id: int
    session_id: int | None
    content: str
    project: str | None
    created_at: str


class PromptsMixin:
    """Prompt log queries; expects a ``conn`` attribute."""

    conn: sqlite3.Connection

    def insert_prompt(self, session_id: int | None, content: str, project: str | None) -> int:
        cur = self.conn.execute(
            "INSERT INTO user_prompts (session_id, content, project) VALUES (?, ?, ?)",
            (session_id, content, project),
        )
        prompt_id = cur.lastrowid
        self._sync_prompt_to_fts(prompt_id)
        return prompt_id

    def _sync_prompt_to_fts(self, prompt_id: int) -> None:
        self.conn.execute(
            "INSERT INTO prompts_fts(rowid, content, project) "
            "SELECT id, content, COALESCE(project, '') FROM user_prompts WHERE id = ?",
            (prompt_id,),
        )

    def get_recent_prompts(self, project: str | None, limit: int) -> list[Prompt]:
        """Newest prompts first, optionally restricted to one project."""
        if project is None:
            rows = self.conn.execute(
                "SELECT id, session_id, content, project, created_at FROM user_prompts "
                "ORDER BY created_at DESC, id DESC LIMIT ?",
                (limit,),
            )
        else:
            rows = self.conn.execute(
                "SELECT id, session_id, content, project, created_at FROM user_prompts "
                "WHERE project = ? ORDER BY created_at DESC, id DESC LIMIT ?",
                (project, limit),
            )
        return [Prompt(*row) for row in rows]

    def search_prompts(self, query: str, project: str | None, limit: int) -> list[Prompt]:
        """Full-text phrase search over prompt content, best match first."""
        fts_query = f'content:"{query}"'
        if project is not None:
            fts_query += f' AND project:"{project}"'
        rows = self.conn.execute(
            "SELECT p.id, p.session_id, p.content, p.project, p.created_at "
            "FROM prompts_fts f JOIN user_prompts p ON f.rowid = p.id "
            "WHERE prompts_fts MATCH ? ORDER BY rank LIMIT ?",
            (fts_query, limit),
        )
        return [Prompt(*row) for row in rows]