"""Dedupe stores guaranteeing each commit is posted at most once.

This package provides:
- base: DedupeStore interface
- local: LocalFileStore (append-only file for the CLI / git hook)
- sql: SQLDedupeStore (SQLAlchemy, atomic claim for the webhook server)
"""

from commitpost.dedupe.base import DedupeStore
from commitpost.dedupe.local import LocalFileStore, get_dedupe_file
from commitpost.dedupe.sql import SQLDedupeStore, create_dedupe_engine


__all__ = [
    "DedupeStore",
    "LocalFileStore",
    "get_dedupe_file",
    "SQLDedupeStore",
    "create_dedupe_engine",
]
