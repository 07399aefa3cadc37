import sqlite3

import pytest

from cortexmem.db.base import DatabaseBase
from cortexmem.db.fts import FtsMixin, FtsResult
from cortexmem.db.observations import NewObservation, ObservationsMixin


class _Db(FtsMixin, ObservationsMixin, DatabaseBase):
    pass


@pytest.fixture
def db():
    database = _Db.open_in_memory()
    yield database
    database.close()


def _add(db, title, content, project="proj", concepts=None):
    oid = db.insert_observation(
        NewObservation(project=project, title=title, content=content,
                       obs_type="discovery", concepts=concepts)
    )
    db.sync_observation_to_fts(oid)
    return oid


def test_search_finds_indexed_observation(db):
    oid = _add(db, "Database choice", "We picked sqlite for storage")
    _add(db, "Unrelated", "Nothing to see here")
    results = db.search_fts("sqlite", None, 10)
    assert [r.rowid for r in results] == [oid]
    assert isinstance(results[0], FtsResult)


def test_search_matches_concepts(db):
    oid = _add(db, "Title", "body", concepts=["caching"])
    assert [r.rowid for r in db.search_fts("caching", None, 10)] == [oid]


def test_search_filters_by_hyphenated_project(db):
    wanted = _add(db, "Cache layer", "redis cache", project="my-proj")
    _add(db, "Cache layer", "redis cache too", project="other-proj")
    results = db.search_fts("redis", "my-proj", 10)
    assert [r.rowid for r in results] == [wanted]


def test_results_ordered_by_rank_and_limited(db):
    for i in range(5):
        _add(db, f"Note {i}", "token " * (i + 1))
    results = db.search_fts("token", None, 3)
    assert len(results) == 3
    ranks = [r.rank for r in results]
    assert ranks == sorted(ranks)


def test_remove_from_fts(db):
    oid = _add(db, "Vector search", "embeddings everywhere")
    assert len(db.search_fts("embeddings", None, 10)) == 1
    db.remove_from_fts(oid)
    assert db.search_fts("embeddings", None, 10) == []
    assert db.get_observation(oid) is not None


def test_unindexed_observation_not_found(db):
    db.insert_observation(
        NewObservation(project="proj", title="Hidden", content="invisible", obs_type="x")
    )
    assert db.search_fts("invisible", None, 10) == []


def test_malformed_query_raises(db):
    _add(db, "t", "c")
    with pytest.raises(sqlite3.OperationalError):
        db.search_fts('"unterminated', None, 10)