import struct

import pytest

from cortexmem.db.database import Database
from cortexmem.db.vector import EMBEDDING_DIMENSIONS, embedding_to_blob


def _vec(*head):
    values = list(head) + [0.0] * (EMBEDDING_DIMENSIONS - len(head))
    return values


@pytest.fixture
def db():
    database = Database.open_in_memory()
    yield database
    database.close()


def test_embedding_to_blob_is_little_endian_float32():
    assert embedding_to_blob([1.0]) == b"\x00\x00\x80\x3f"


def test_embedding_to_blob_round_trip():
    values = [0.5, -2.25, 3.0]
    blob = embedding_to_blob(values)
    assert len(blob) == 4 * len(values)
    assert list(struct.unpack("<3f", blob)) == values


def test_search_orders_by_distance(db):
    db.insert_vector(1, _vec(1.0, 0.0))
    db.insert_vector(2, _vec(0.0, 1.0))
    db.insert_vector(3, _vec(0.9, 0.1))
    results = db.search_vector(_vec(1.0, 0.0), 10)
    assert [r.rowid for r in results] == [1, 3, 2]
    assert results[0].distance == 0.0
    assert results[1].distance < results[2].distance


def test_search_respects_limit(db):
    for rowid in range(1, 6):
        db.insert_vector(rowid, _vec(float(rowid)))
    results = db.search_vector(_vec(0.0), 2)
    assert [r.rowid for r in results] == [1, 2]


def test_delete_vector_removes_it_from_search(db):
    db.insert_vector(1, _vec(1.0))
    db.insert_vector(2, _vec(2.0))
    db.delete_vector(1)
    assert [r.rowid for r in db.search_vector(_vec(1.0), 10)] == [2]


def test_duplicate_rowid_is_rejected(db):
    db.insert_vector(1, _vec(1.0))
    with pytest.raises(Exception):
        db.insert_vector(1, _vec(2.0))
    assert db.count_vector_entries() == 1


def test_wrong_dimensions_rejected(db):
    with pytest.raises(ValueError):
        db.insert_vector(1, [1.0, 2.0])
    with pytest.raises(ValueError):
        db.search_vector([1.0], 5)