"""The memory database with all of its query families."""

from __future__ import annotations

from cortexmem.db.base import DatabaseBase
from cortexmem.db.feedback import FeedbackMixin
from cortexmem.db.fts import FtsMixin
from cortexmem.db.observations import ObservationsMixin
from cortexmem.db.prompts import PromptsMixin
from cortexmem.db.sessions import SessionsMixin
from cortexmem.db.sync_state import SyncMixin
from cortexmem.db.vector import VectorMixin


class Database(
    ObservationsMixin,
    FtsMixin,
    SessionsMixin,
    PromptsMixin,
    FeedbackMixin,
    SyncMixin,
    VectorMixin,
    DatabaseBase,
):
    """SQLite-backed store for observations, sessions, prompts, vectors and sync state."""