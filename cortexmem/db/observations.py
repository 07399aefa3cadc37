"""Observation storage: insert, upsert, lookup, listing and bookkeeping."""

from __future__ import annotations

import hashlib
import json
import sqlite3
from dataclasses import dataclass, field
from typing import Any, Self

_COLUMNS = (
    "id, session_id, project, topic_key, type, title, content, "
    "concepts, facts, files, scope, tier, access_count, "
    "revision_count, content_hash, created_at, updated_at, deleted_at"
)


def compute_content_hash(content: str) -> str:
    """Hex SHA-256 of the observation content."""
    return hashlib.sha256(content.encode("utf-8")).hexdigest()


def _list_to_json(items: list[str] | None) -> str | None:
    if items is None:
        return None
    return json.dumps(list(items), ensure_ascii=False, separators=(",", ":"))


def _json_to_list(text: str | None) -> list[str] | None:
    if text is None:
        return None
    try:
        value = json.loads(text)
    except (TypeError, ValueError):
        return None
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        return None
    return value


@dataclass
class NewObservation:
    """An observation that has not been stored yet."""

    project: str
    title: str
    content: str
    obs_type: str
    concepts: list[str] | None = None
    facts: list[str] | None = None
    files: list[str] | None = None
    topic_key: str | None = None
    scope: str = "project"
    session_id: int | None = None


@dataclass
class Observation:
    """A stored observation with all of its bookkeeping columns."""

    id: int
    session_id: int | None
    project: str
    topic_key: str | None
    obs_type: str
    title: str
    content: str
    concepts: list[str] | None
    facts: list[str] | None
    files: list[str] | None
    scope: str
    tier: str
    access_count: int
    revision_count: int
    content_hash: str
    created_at: str
    updated_at: str
    deleted_at: str | None = field(default=None)

    _REQUIRED = (
        "id", "project", "type", "title", "content", "scope", "tier",
        "access_count", "revision_count", "content_hash", "created_at", "updated_at",
    )

    def to_dict(self) -> dict[str, Any]:
        """Serialisable form; the observation type is stored under ``type``."""
        return {
            "id": self.id,
            "session_id": self.session_id,
            "project": self.project,
            "topic_key": self.topic_key,
            "type": self.obs_type,
            "title": self.title,
            "content": self.content,
            "concepts": self.concepts,
            "facts": self.facts,
            "files": self.files,
            "scope": self.scope,
            "tier": self.tier,
            "access_count": self.access_count,
            "revision_count": self.revision_count,
            "content_hash": self.content_hash,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
            "deleted_at": self.deleted_at,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        """Build from the form produced by :meth:`to_dict`; ValueError if fields are missing."""
        missing = [key for key in cls._REQUIRED if key not in data]
        if missing:
            raise ValueError(f"observation is missing fields: {', '.join(missing)}")
        return cls(
            id=data["id"],
            session_id=data.get("session_id"),
            project=data["project"],
            topic_key=data.get("topic_key"),
            obs_type=data["type"],
            title=data["title"],
            content=data["content"],
            concepts=data.get("concepts"),
            facts=data.get("facts"),
            files=data.get("files"),
            scope=data["scope"],
            tier=data["tier"],
            access_count=data["access_count"],
            revision_count=data["revision_count"],
            content_hash=data["content_hash"],
            created_at=data["created_at"],
            updated_at=data["updated_at"],
            deleted_at=data.get("deleted_at"),
        )


def _row_to_observation(row: tuple[Any, ...]) -> Observation:
    return Observation(
        id=row[0],
        session_id=row[1],
        project=row[2],
        topic_key=row[3],
        obs_type=row[4],
        title=row[5],
        content=row[6],
        concepts=_json_to_list(row[7]),
        facts=_json_to_list(row[8]),
        files=_json_to_list(row[9]),
        scope=row[10],
        tier=row[11],
        access_count=row[12],
        revision_count=row[13],
        content_hash=row[14],
        created_at=row[15],
        updated_at=row[16],
        deleted_at=row[17],
    )


class ObservationsMixin:
    """Observation queries; expects a ``conn`` attribute."""

    conn: sqlite3.Connection

    def _select(self, where: str, params: tuple[Any, ...] = ()) -> list[Observation]:
        rows = self.conn.execute(f"SELECT {_COLUMNS} FROM observations {where}", params)
        return [_row_to_observation(row) for row in rows]

    def insert_observation(self, obs: NewObservation) -> int:
        cur = self.conn.execute(
            "INSERT INTO observations (session_id, project, topic_key, type, title, content, "
            "concepts, facts, files, scope, content_hash) "
            "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
            (
                obs.session_id,
                obs.project,
                obs.topic_key,
                obs.obs_type,
                obs.title,
                obs.content,
                _list_to_json(obs.concepts),
                _list_to_json(obs.facts),
                _list_to_json(obs.files),
                obs.scope,
                compute_content_hash(obs.content),
            ),
        )
        return cur.lastrowid

    def get_observation(self, id: int) -> Observation | None:
        found = self._select("WHERE id = ?", (id,))
        return found[0] if found else None

    def find_by_topic_key(self, project: str, topic_key: str) -> Observation | None:
        """Most recently updated live observation with this topic key."""
        found = self._select(
            "WHERE project = ? AND topic_key = ? AND deleted_at IS NULL "
            "ORDER BY updated_at DESC LIMIT 1",
            (project, topic_key),
        )
        return found[0] if found else None

    def find_by_content_hash(self, hash: str, within_minutes: int) -> Observation | None:
        """Newest live observation with this hash created in the last *within_minutes*."""
        found = self._select(
            "WHERE content_hash = ? AND deleted_at IS NULL "
            "AND datetime(created_at) >= datetime('now', ?) "
            "ORDER BY created_at DESC LIMIT 1",
            (hash, f"-{within_minutes} minutes"),
        )
        return found[0] if found else None

    def upsert_observation(self, obs: NewObservation) -> int:
        """Update the observation sharing *obs*'s topic key, or insert a new one."""
        if obs.topic_key is not None:
            existing = self.find_by_topic_key(obs.project, obs.topic_key)
            if existing is not None:
                self.conn.execute(
                    "UPDATE observations SET title = ?, content = ?, concepts = ?, facts = ?, "
                    "files = ?, content_hash = ?, revision_count = revision_count + 1, "
                    "updated_at = datetime('now') WHERE id = ?",
                    (
                        obs.title,
                        obs.content,
                        _list_to_json(obs.concepts),
                        _list_to_json(obs.facts),
                        _list_to_json(obs.files),
                        compute_content_hash(obs.content),
                        existing.id,
                    ),
                )
                return existing.id
        return self.insert_observation(obs)

    def soft_delete(self, id: int) -> None:
        self.conn.execute(
            "UPDATE observations SET deleted_at = datetime('now') WHERE id = ?", (id,)
        )

    def hard_delete(self, id: int) -> None:
        self.conn.execute("DELETE FROM observations WHERE id = ?", (id,))

    def increment_access_count(self, id: int) -> None:
        self.conn.execute(
            "UPDATE observations SET access_count = access_count + 1, "
            "updated_at = datetime('now') WHERE id = ?",
            (id,),
        )

    def list_observations(self, project: str, limit: int) -> list[Observation]:
        """Live observations of a project, most recently updated first."""
        return self._select(
            "WHERE project = ? AND deleted_at IS NULL ORDER BY updated_at DESC LIMIT ?",
            (project, limit),
        )

    def list_all_active_observations(self) -> list[Observation]:
        return self._select("WHERE deleted_at IS NULL ORDER BY updated_at DESC")

    def update_observation_fields(
        self,
        id: int,
        title: str | None,
        content: str | None,
        concepts: list[str] | None,
        facts: list[str] | None,
        files: list[str] | None,
    ) -> None:
        """Change the given fields; does nothing when every field is None."""
        sets: list[str] = []
        params: list[Any] = []
        if title is not None:
            sets.append("title = ?")
            params.append(title)
        if content is not None:
            sets += ["content = ?", "content_hash = ?"]
            params += [content, compute_content_hash(content)]
        for column, values in (("concepts", concepts), ("facts", facts), ("files", files)):
            if values is not None:
                sets.append(f"{column} = ?")
                params.append(_list_to_json(values))
        if not sets:
            return
        sets += ["revision_count = revision_count + 1", "updated_at = datetime('now')"]
        params.append(id)
        self.conn.execute(f"UPDATE observations SET {', '.join(sets)} WHERE id = ?", params)

    def get_timeline(self, project: str, target_id: int, window: int) -> list[Observation]:
        """Up to *window* observations on each side of the target, oldest first."""
        if window < 0:
            raise ValueError("window must not be negative")
        ids = [
            row[0]
            for row in self.conn.execute(
                "SELECT id FROM observations WHERE project = ? AND deleted_at IS NULL "
                "ORDER BY created_at ASC, id ASC",
                (project,),
            )
        ]
        try:
            pos = ids.index(target_id)
        except ValueError:
            return []
        window_ids = ids[max(0, pos - window): pos + window + 1]
        return [obs for obs in map(self.get_observation, window_ids) if obs is not None]

    def list_topic_keys(self, project: str) -> list[str]:
        rows = self.conn.execute(
            "SELECT DISTINCT topic_key FROM observations "
            "WHERE project = ? AND topic_key IS NOT NULL AND deleted_at IS NULL "
            "ORDER BY topic_key",
            (project,),
        )
        return [row[0] for row in rows]

    def update_tier(self, id: int, tier: str) -> None:
        self.conn.execute("UPDATE observations SET tier = ? WHERE id = ?", (tier, id))

    def _count_grouped(self, column: str, project: str | None) -> list[tuple[str, int]]:
        if project is None:
            rows = self.conn.execute(
                f"SELECT {column}, COUNT(*) FROM observations WHERE deleted_at IS NULL "
                f"GROUP BY {column} ORDER BY {column}"
            )
        else:
            rows = self.conn.execute(
                f"SELECT {column}, COUNT(*) FROM observations WHERE deleted_at IS NULL "
                f"AND project = ? GROUP BY {column} ORDER BY {column}",
                (project,),
            )
        return [(row[0], row[1]) for row in rows]

    def count_by_tier(self, project: str | None) -> list[tuple[str, int]]:
        return self._count_grouped("tier", project)

    def count_by_type(self, project: str | None) -> list[tuple[str, int]]:
        return self._count_grouped("type", project)

    def count_active(self, project: str | None) -> int:
        if project is None:
            row = self.conn.execute(
                "SELECT COUNT(*) FROM observations WHERE deleted_at IS NULL"
            ).fetchone()
        else:
            row = self.conn.execute(
                "SELECT COUNT(*) FROM observations WHERE deleted_at IS NULL AND project = ?",
                (project,),
            ).fetchone()
        return row[0]

    def list_all_observations_for_export(self, project: str | None) -> list[Observation]:
        """Every observation, deleted ones included, by ascending id."""
        if project is None:
            return self._select("ORDER BY id")
        return self._select("WHERE project = ? ORDER BY id", (project,))

    def import_observation(self, obs: Observation) -> bool:
        """Store an exported observation unless its content hash already exists."""
        exists = self.conn.execute(
            "SELECT COUNT(*) > 0 FROM observations WHERE content_hash = ?",
            (obs.content_hash,),
        ).fetchone()[0]
        if exists:
            return False
        concepts_json = _list_to_json(obs.concepts)
        facts_json = _list_to_json(obs.facts)
        cur = self.conn.execute(
            "INSERT INTO observations (project, topic_key, type, title, content, concepts, "
            "facts, files, scope, tier, access_count, revision_count, content_hash, "
            "created_at, updated_at, deleted_at) "
            "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
            (
                obs.project,
                obs.topic_key,
                obs.obs_type,
                obs.title,
                obs.content,
                concepts_json,
                facts_json,
                _list_to_json(obs.files),
                obs.scope,
                obs.tier,
                obs.access_count,
                obs.revision_count,
                obs.content_hash,
                obs.created_at,
                obs.updated_at,
                obs.deleted_at,
            ),
        )
        self.conn.execute(
            "INSERT INTO observations_fts(rowid, title, content, concepts, facts, type, project) "
            "VALUES (?, ?, ?, ?, ?, ?, ?)",
            (
                cur.lastrowid,
                obs.title,
                obs.content,
                concepts_json,
                facts_json,
                obs.obs_type,
                obs.project,
            ),
        )
        return True

    def list_observations_without_concepts(self) -> list[int]:
        rows = self.conn.execute(
            "SELECT id FROM observations WHERE deleted_at IS NULL "
            "AND (concepts IS NULL OR concepts = '[]')"
        )
        return [row[0] for row in rows]

    def backdate_observation(self, id: int, days_ago: int) -> None:
        """Move both timestamps *days_ago* days into the past."""
        offset = f"-{days_ago} days"
        self.conn.execute(
            "UPDATE observations SET created_at = datetime('now', ?), "
            "updated_at = datetime('now', ?) WHERE id = ?",
            (offset, offset, id),
        )