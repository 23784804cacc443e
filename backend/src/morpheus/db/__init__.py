"""Database layer for Morpheus."""

from morpheus.db.connection import Database
from morpheus.db.migrations import run_migrations

__all__ = ["Database", "run_migrations"]
