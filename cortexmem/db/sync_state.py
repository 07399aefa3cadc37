"""Local journal of mutations to sync, and per-target sync progress."""

from __future__ import annotations

import sqlite3
from dataclasses import dataclass

_MUTATION_COLUMNS = "seq, entity, entity_key, op, payload, project, occurred_at, acked_at"
_STATE_COLUMNS = "target_key, last_pushed_seq, last_pulled_seq, last_error, updated_at"


@dataclass
class SyncMutation:
    seq: int
    entity: str
    entity_key: str
    op: str
    payload: str
    project: str
    occurred_at: str
    acked_at: str | None


@dataclass
class SyncState:
    target_key: str
    last_pushed_seq: int
    last_pulled_seq: int
    last_error: str | None
    updated_at: str


class SyncMixin:
    """Sync journal queries; expects a ``conn`` attribute."""

    conn: sqlite3.Connection

    def insert_sync_mutation(
        self, entity: str, entity_key: str, op: str, payload: str, project: str
    ) -> int:
        """Append a mutation to the journal and return its sequence number."""
        cur = self.conn.execute(
            "INSERT INTO sync_mutations (entity, entity_key, op, payload, project) "
            "VALUES (?, ?, ?, ?, ?)",
            (entity, entity_key, op, payload, project),
        )
        return cur.lastrowid

    def list_unacked_mutations(self, limit: int) -> list[SyncMutation]:
        """Unacknowledged mutations in sequence order."""
        rows = self.conn.execute(
            f"SELECT {_MUTATION_COLUMNS} FROM sync_mutations "
            "WHERE acked_at IS NULL ORDER BY seq ASC LIMIT ?",
            (limit,),
        )
        return [SyncMutation(*row) for row in rows]

    def ack_mutations(self, up_to_seq: int) -> None:
        """Mark every pending mutation up to and including *up_to_seq* as acknowledged."""
        self.conn.execute(
            "UPDATE sync_mutations SET acked_at = datetime('now') "
            "WHERE seq <= ? AND acked_at IS NULL",
            (up_to_seq,),
        )

    def update_sync_state(
        self,
        target_key: str,
        last_pushed_seq: int,
        last_pulled_seq: int,
        last_error: str | None,
    ) -> None:
        """Create or replace the progress record for a sync target."""
        self.conn.execute(
            "INSERT INTO sync_state "
            "(target_key, last_pushed_seq, last_pulled_seq, last_error, updated_at) "
            "VALUES (?, ?, ?, ?, datetime('now')) "
            "ON CONFLICT(target_key) DO UPDATE SET "
            "last_pushed_seq = excluded.last_pushed_seq, "
            "last_pulled_seq = excluded.last_pulled_seq, "
            "last_error = excluded.last_error, "
            "updated_at = excluded.updated_at",
            (target_key, last_pushed_seq, last_pulled_seq, last_error),
        )

    def get_sync_state(self, target_key: str) -> SyncState | None:
        row = self.conn.execute(
            f"SELECT {_STATE_COLUMNS} FROM sync_state WHERE target_key = ?", (target_key,)
        ).fetchone()
        return None if row is None else SyncState(*row)

    def record_sync_chunk(self, chunk_id: str) -> bool:
        """Remember an imported chunk; False if it was already recorded."""
        cur = self.conn.execute(
            "INSERT OR IGNORE INTO sync_chunks (chunk_id) VALUES (?)", (chunk_id,)
        )
        return cur.rowcount > 0