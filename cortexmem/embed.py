"""Embedding model names and the text that gets embedded."""

from __future__ import annotations

from collections.abc import Sequence
from enum import Enum

DEFAULT_MODEL = "AllMiniLML6V2"
KNOWN_MODELS = frozenset({"AllMiniLML6V2", "BGESmallENV15", "AllMiniLML12V2"})


class ModelStatus(Enum):
    NOT_DOWNLOADED = "NotDownloaded"
    READY = "Ready"


def parse_model_name(name: str) -> str | None:
    """Return *name* if it is a supported embedding model, else None."""
    return name if name in KNOWN_MODELS else None


def build_search_text(
    title: str, content: str, concepts: Sequence[str], facts: Sequence[str]
) -> str:
    """Join title, content and optional concept/fact lines into one text to embed."""
    parts = [title, content]
    if concepts:
        parts.append(f"Concepts: {', '.join(concepts)}")
    if facts:
        parts.append(f"Facts: {', '.join(facts)}")
    return "\n".join(parts)