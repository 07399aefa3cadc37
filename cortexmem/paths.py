"""Where the database lives and which project the caller is in."""

from __future__ import annotations

import os
from pathlib import Path

import platformdirs

from cortexmem.db.database import Database


def db_path() -> Path:
    """Database path: ``CORTEXMEM_DB`` if set, else the platform data directory."""
    override = os.environ.get("CORTEXMEM_DB")
    if override is not None:
        return Path(override)
    return platformdirs.user_data_path("cortexmem", appauthor=False) / "cortexmem.db"


def detect_project() -> str:
    """Name of the current working directory, or ``default`` when it has none."""
    try:
        name = Path.cwd().name
    except OSError:
        return "default"
    return name or "default"


def open_database() -> Database:
    """Open the database at :func:`db_path`, creating its directory if needed."""
    path = db_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    return Database.open(path)