"""Schema creation and versioned migrations for the memory database."""

from __future__ import annotations

import sqlite3

CURRENT_VERSION = 4

_REQUIRED = "TEXT NOT NULL"
_STAMP = "TEXT DEFAULT (datetime('now'))"
_AUTO_ID = "INTEGER PRIMARY KEY AUTOINCREMENT"
_TOKENIZER = "porter unicode61"


def _references(table: str) -> str:
    return f"INTEGER REFERENCES {table}(id)"


def _table(name: str, **columns: str) -> str:
    body = ", ".join(f"{column} {definition}" for column, definition in columns.items())
    return f"CREATE TABLE IF NOT EXISTS {name} ({body})"


def _index(name: str, table: str, *columns: str, where: str | None = None) -> str:
    statement = f"CREATE INDEX IF NOT EXISTS {name} ON {table}({', '.join(columns)})"
    if where:
        statement += f" WHERE {where}"
    return statement


def _fts(name: str, columns: list[str], **options: str) -> str:
    parts = [*columns, *(f"{key}={value}" for key, value in options.items())]
    parts.append(f"tokenize='{_TOKENIZER}'")
    return f"CREATE VIRTUAL TABLE IF NOT EXISTS {name} USING fts5({', '.join(parts)})"


_MIGRATIONS: tuple[tuple[int, tuple[str, ...]], ...] = (
    (
        1,
        (
            _table("meta", key="TEXT PRIMARY KEY", value=_REQUIRED),
            _table(
                "sessions",
                id=_AUTO_ID,
                project=_REQUIRED,
                directory=_REQUIRED,
                summary="TEXT",
                started_at=_STAMP,
                ended_at="TEXT",
            ),
            _table(
                "observations",
                id=_AUTO_ID,
                session_id=_references("sessions"),
                project=_REQUIRED,
                topic_key="TEXT",
                type=_REQUIRED,
                title=_REQUIRED,
                content=_REQUIRED,
                concepts="TEXT",
                facts="TEXT",
                files="TEXT",
                scope="TEXT DEFAULT 'project'",
                tier="TEXT DEFAULT 'buffer'",
                access_count="INTEGER DEFAULT 0",
                revision_count="INTEGER DEFAULT 1",
                content_hash=_REQUIRED,
                embedding="BLOB",
                created_at=_STAMP,
                updated_at=_STAMP,
                deleted_at="TEXT",
            ),
            _index("idx_observations_project", "observations", "project"),
            _index("idx_observations_topic_key", "observations", "project", "topic_key"),
            _index("idx_observations_content_hash", "observations", "content_hash"),
            _index("idx_observations_type", "observations", "type"),
            _index("idx_observations_tier", "observations", "tier"),
            _fts(
                "observations_fts",
                ["title", "content", "concepts", "facts", "type", "project"],
                content="observations",
                content_rowid="id",
            ),
            # Embeddings are little-endian float32 blobs compared in Python.
            _table("vec_observations", id="INTEGER PRIMARY KEY", embedding="BLOB NOT NULL"),
        ),
    ),
    (
        2,
        (
            _table(
                "user_prompts",
                id=_AUTO_ID,
                session_id=_references("sessions"),
                content=_REQUIRED,
                project="TEXT",
                created_at=_STAMP,
            ),
            _fts("prompts_fts", ["content", "project"]),
        ),
    ),
    (
        3,
        (
            _table(
                "sync_mutations",
                seq=_AUTO_ID,
                entity=_REQUIRED,
                entity_key=_REQUIRED,
                op=_REQUIRED,
                payload=_REQUIRED,
                project=_REQUIRED,
                occurred_at=f"{_REQUIRED} DEFAULT (datetime('now'))",
                acked_at="TEXT",
            ),
            _table(
                "sync_state",
                target_key="TEXT PRIMARY KEY",
                last_pushed_seq="INTEGER DEFAULT 0",
                last_pulled_seq="INTEGER DEFAULT 0",
                last_error="TEXT",
                updated_at=_STAMP,
            ),
            _table("sync_chunks", chunk_id="TEXT PRIMARY KEY", imported_at=_STAMP),
            _index(
                "idx_sync_mutations_unacked", "sync_mutations", "seq", where="acked_at IS NULL"
            ),
        ),
    ),
    (
        4,
        (
            _table(
                "search_feedback",
                id=_AUTO_ID,
                query_text=_REQUIRED,
                observation_id=_references("observations"),
                session_id=_references("sessions"),
                created_at=_STAMP,
            ),
            _index("idx_search_feedback_observation", "search_feedback", "observation_id"),
        ),
    ),
)


def _stored_version(conn: sqlite3.Connection) -> int:
    try:
        row = conn.execute(
            "SELECT value FROM meta WHERE key = 'schema_version'"
        ).fetchone()
    except sqlite3.Error:
        return 0
    if row is None:
        return 0
    try:
        return int(row[0])
    except (TypeError, ValueError):
        return 0


def migrate(conn: sqlite3.Connection) -> None:
    """Bring the database schema up to CURRENT_VERSION."""
    version = _stored_version(conn)
    if version >= CURRENT_VERSION:
        return
    for target, statements in _MIGRATIONS:
        if version < target:
            conn.executescript(";\n".join(statements) + ";")
            conn.execute(
                "INSERT OR REPLACE INTO meta (key, value) VALUES ('schema_version', ?)",
                (str(target),),
            )
    if conn.in_transaction:
        conn.commit()