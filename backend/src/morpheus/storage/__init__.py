"""Storage collaborators for knowledge items."""

from morpheus.storage.base import (
    DuplicateTagError,
    KnowledgeReader,
    KnowledgeStore,
    StorageError,
    UnknownTagError,
)
from morpheus.storage.factory import create_store, seed_default_tags
from morpheus.storage.memory import MemoryStore
from morpheus.storage.sqlite import SQLiteStore

__all__ = [
    "DuplicateTagError",
    "KnowledgeReader",
    "KnowledgeStore",
    "MemoryStore",
    "SQLiteStore",
    "StorageError",
    "UnknownTagError",
    "create_store",
    "seed_default_tags",
]
