import sqlite3

import pytest

from cortexmem.db.schema import CURRENT_VERSION, migrate


@pytest.fixture
def conn():
    connection = sqlite3.connect(":memory:", isolation_level=None)
    yield connection
    connection.close()


def _tables(conn):
    rows = conn.execute("SELECT name FROM sqlite_master WHERE type IN ('table')").fetchall()
    return {name for (name,) in rows}


def _version(conn):
    return conn.execute("SELECT value FROM meta WHERE key = 'schema_version'").fetchone()[0]


def test_fresh_database_reaches_current_version(conn):
    migrate(conn)
    assert _version(conn) == str(CURRENT_VERSION)


def test_fresh_database_has_all_tables(conn):
    migrate(conn)
    tables = _tables(conn)
    for name in (
        "meta",
        "sessions",
        "observations",
        "observations_fts",
        "vec_observations",
        "user_prompts",
        "prompts_fts",
        "sync_mutations",
        "sync_state",
        "sync_chunks",
        "search_feedback",
    ):
        assert name in tables


def test_migrate_is_idempotent(conn):
    migrate(conn)
    conn.execute("INSERT INTO sessions (project, directory) VALUES ('p', '/d')")
    migrate(conn)
    assert _version(conn) == str(CURRENT_VERSION)
    assert conn.execute("SELECT COUNT(*) FROM sessions").fetchone()[0] == 1


def test_upgrade_from_version_one(conn):
    migrate(conn)
    conn.executescript("DROP TABLE search_feedback; DROP TABLE sync_state;")
    conn.execute("UPDATE meta SET value = '1' WHERE key = 'schema_version'")
    migrate(conn)
    tables = _tables(conn)
    assert "search_feedback" in tables
    assert "sync_state" in tables
    assert _version(conn) == str(CURRENT_VERSION)


def test_unparseable_version_is_treated_as_zero(conn):
    migrate(conn)
    conn.execute("UPDATE meta SET value = 'garbage' WHERE key = 'schema_version'")
    migrate(conn)
    assert _version(conn) == str(CURRENT_VERSION)


def test_observation_defaults(conn):
    migrate(conn)
    conn.execute(
        "INSERT INTO observations (project, type, title, content, content_hash) "
        "VALUES ('p', 'discovery', 't', 'c', 'h')"
    )
    scope, tier, access, revisions = conn.execute(
        "SELECT scope, tier, access_count, revision_count FROM observations"
    ).fetchone()
    assert (scope, tier, access, revisions) == ("project", "buffer", 0, 1)