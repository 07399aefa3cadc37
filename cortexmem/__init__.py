"""Persistent memory store for AI coding agents, backed by SQLite."""

__version__ = "1.4.0"
__all__ = ["__version__"]