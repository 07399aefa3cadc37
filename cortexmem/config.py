"""User configuration read from a TOML file."""

from __future__ import annotations

import logging
import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Self

import platformdirs

from cortexmem.embed import DEFAULT_MODEL, parse_model_name

log = logging.getLogger(__name__)


@dataclass
class EmbeddingConfig:
    model: str = DEFAULT_MODEL


@dataclass
class Config:
    embedding: EmbeddingConfig = field(default_factory=EmbeddingConfig)

    @classmethod
    def _from_toml(cls, data: dict[str, Any]) -> Self:
        section = data.get("embedding", {})
        if not isinstance(section, dict):
            raise ValueError("[embedding] must be a table")
        model = section.get("model", DEFAULT_MODEL)
        if not isinstance(model, str):
            raise ValueError("embedding.model must be a string")
        return cls(embedding=EmbeddingConfig(model=model))

    @classmethod
    def load_from_path(cls, path: str | os.PathLike[str] | None) -> Self:
        """Load config from *path*; defaults when absent, unreadable, invalid or naming an unknown model."""
        if path is None:
            return cls()
        path = Path(path)
        try:
            contents = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError):
            return cls()
        try:
            config = cls._from_toml(tomllib.loads(contents))
        except (tomllib.TOMLDecodeError, ValueError) as exc:
            log.warning("Failed to parse config at %s: %s", path, exc)
            return cls()
        if parse_model_name(config.embedding.model) is None:
            log.warning(
                "Unknown embedding model '%s' in config, falling back to default",
                config.embedding.model,
            )
            return cls()
        return config

    @classmethod
    def load(cls) -> Self:
        """Load config from the platform's standard location."""
        return cls.load_from_path(cls.default_path())

    @classmethod
    def default_path(cls) -> Path:
        return platformdirs.user_config_path("cortexmem", appauthor=False) / "config.toml"