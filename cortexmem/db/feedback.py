"""Records of which observations were opened after a search."""

from __future__ import annotations

import sqlite3


class FeedbackMixin:
    """Search feedback queries; expects a ``conn`` attribute."""

    conn: sqlite3.Connection

    def record_search_feedback(
        self, query_text: str, observation_id: int, session_id: int | None
    ) -> None:
        """Record that an observation was accessed after *query_text* was searched."""
        self.conn.execute(
            "INSERT INTO search_feedback (query_text, observation_id, session_id) "
            "VALUES (?, ?, ?)",
            (query_text, observation_id, session_id),
        )

    def get_feedback_count(self, observation_id: int) -> int:
        return self.conn.execute(
            "SELECT COUNT(*) FROM search_feedback WHERE observation_id = ?",
            (observation_id,),
        ).fetchone()[0]