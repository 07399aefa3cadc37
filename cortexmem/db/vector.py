"""Embedding storage and nearest-neighbour search."""

from __future__ import annotations

import math
import sqlite3
import struct
from collections.abc import Sequence
from dataclasses import dataclass

EMBEDDING_DIMENSIONS = 384


@dataclass
class VecResult:
    rowid: int
    distance: float


def embedding_to_blob(embedding: Sequence[float]) -> bytes:
    """Pack floats as consecutive little-endian float32 values."""
    return struct.pack(f"<{len(embedding)}f", *embedding)


def _blob_to_embedding(blob: bytes) -> tuple[float, ...]:
    return struct.unpack(f"<{len(blob) // 4}f", blob)


def _check_dimensions(embedding: Sequence[float]) -> None:
    if len(embedding) != EMBEDDING_DIMENSIONS:
        raise ValueError(
            f"embedding has {len(embedding)} dimensions, expected {EMBEDDING_DIMENSIONS}"
        )


class VectorMixin:
    """Vector index queries; expects a ``conn`` attribute."""

    conn: sqlite3.Connection

    def insert_vector(self, rowid: int, embedding: Sequence[float]) -> None:
        """Store the embedding of an observation; the row must not exist yet."""
        _check_dimensions(embedding)
        self.conn.execute(
            "INSERT INTO vec_observations (id, embedding) VALUES (?, ?)",
            (rowid, embedding_to_blob(embedding)),
        )

    def delete_vector(self, rowid: int) -> None:
        self.conn.execute("DELETE FROM vec_observations WHERE id = ?", (rowid,))

    def search_vector(self, query_embedding: Sequence[float], limit: int) -> list[VecResult]:
        """Stored embeddings nearest to the query by Euclidean distance, closest first."""
        _check_dimensions(query_embedding)
        # Round-trip through float32 so distances match what is stored.
        query = _blob_to_embedding(embedding_to_blob(query_embedding))
        results = [
            VecResult(rowid=rowid, distance=math.dist(query, _blob_to_embedding(blob)))
            for rowid, blob in self.conn.execute("SELECT id, embedding FROM vec_observations")
        ]
        results.sort(key=lambda r: (r.distance, r.rowid))
        return results[: max(limit, 0)]