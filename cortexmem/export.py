"""Export memories to a JSON file and import them back."""

from __future__ import annotations

import json
import os
from collections.abc import Callable
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Self

from cortexmem.db.database import Database
from cortexmem.db.observations import Observation
from cortexmem.db.sessions import Session
from cortexmem.paths import open_database

PACKAGE_VERSION = "1.4.0"
DEFAULT_EXPORT_FILE = "cortexmem-export.json"
REPLACE_PROMPT = "Replace mode will DELETE all existing data. Continue?"


def _session_from_dict(data: dict[str, Any]) -> Session:
    return Session(
        id=data["id"],
        project=data["project"],
        directory=data["directory"],
        summary=data.get("summary"),
        started_at=data["started_at"],
        ended_at=data.get("ended_at"),
    )


@dataclass
class ExportData:
    """Everything written to, or read from, an export file."""

    version: str
    exported_at: str
    project_filter: str | None = None
    sessions: list[Session] = field(default_factory=list)
    observations: list[Observation] = field(default_factory=list)

    def to_json(self) -> str:
        """Pretty-printed JSON with two-space indentation."""
        payload = {
            "version": self.version,
            "exported_at": self.exported_at,
            "project_filter": self.project_filter,
            "sessions": [asdict(s) for s in self.sessions],
            "observations": [o.to_dict() for o in self.observations],
        }
        return json.dumps(payload, indent=2, ensure_ascii=False)

    @classmethod
    def from_json(cls, text: str) -> Self:
        """Parse an export file; ValueError if it is not in the expected format."""
        try:
            raw = json.loads(text)
            if not isinstance(raw, dict):
                raise ValueError("export is not a JSON object")
            return cls(
                version=raw["version"],
                exported_at=raw["exported_at"],
                project_filter=raw.get("project_filter"),
                sessions=[_session_from_dict(s) for s in raw["sessions"]],
                observations=[Observation.from_dict(o) for o in raw["observations"]],
            )
        except (ValueError, KeyError, TypeError, AttributeError) as exc:
            raise ValueError("Invalid export file format") from exc


def export_data(db: Database, project: str | None) -> ExportData:
    """Collect sessions and observations, optionally for one project only."""
    exported_at = db.conn.execute("SELECT datetime('now')").fetchone()[0]
    return ExportData(
        version=PACKAGE_VERSION,
        exported_at=exported_at,
        project_filter=project,
        sessions=db.list_all_sessions_for_export(project),
        observations=db.list_all_observations_for_export(project),
    )


def import_data(db: Database, data: ExportData, replace: bool) -> tuple[int, int]:
    """Import observations, skipping duplicate content; returns (imported, skipped).

    With *replace*, all existing observations and sessions are removed first.
    """
    if replace:
        db.conn.executescript(
            "INSERT INTO observations_fts(observations_fts) VALUES ('delete-all');"
            "DELETE FROM observations;"
            "DELETE FROM sessions;"
        )
    imported = 0
    skipped = 0
    for obs in data.observations:
        if db.import_observation(obs):
            imported += 1
        else:
            skipped += 1
    return imported, skipped


def _ask_yes_no(prompt: str) -> bool:
    answer = input(f"{prompt} [y/N] ").strip().lower()
    return answer in {"y", "yes"}


def run_export(output: str | os.PathLike[str] | None, project: str | None) -> Path:
    """Write an export of the database to *output* and return the path written."""
    with open_database() as db:
        data = export_data(db, project)
    path = Path(output) if output is not None else Path(DEFAULT_EXPORT_FILE)
    path.write_text(data.to_json(), encoding="utf-8")
    print(
        f"Exported {len(data.sessions)} sessions and "
        f"{len(data.observations)} observations to {path}"
    )
    return path


def run_import(
    file: str | os.PathLike[str],
    replace: bool,
    confirm: Callable[[str], bool] | None = None,
) -> tuple[int, int] | None:
    """Import an export file; returns (imported, skipped), or None if replace was declined."""
    path = Path(file)
    try:
        contents = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise OSError(f"Could not read {path}") from exc
    data = ExportData.from_json(contents)
    ask = confirm if confirm is not None else _ask_yes_no

    with open_database() as db:
        if replace:
            if not ask(REPLACE_PROMPT):
                print("Aborted.")
                return None
        imported, skipped = import_data(db, data, replace)
        if replace:
            print("Existing data cleared.")

    print(
        f"Import complete: {imported} imported, {skipped} skipped (duplicates) from {path}"
    )
    return imported, skipped