"""Build the configured store at startup."""

import logging

from morpheus.config import Config
from morpheus.constants.tagging import DEFAULT_TAGS
from morpheus.db.connection import Database
from morpheus.db.migrations import run_migrations
from morpheus.storage.base import KnowledgeStore
from morpheus.storage.memory import MemoryStore
from morpheus.storage.sqlite import SQLiteStore

logger = logging.getLogger(__name__)


def seed_default_tags(store: KnowledgeStore) -> int:
    """Create the default tags in a store that has none.

    Returns:
        Number of tags created.
    """
    if store.get_tags():
        return 0
    for name, color in DEFAULT_TAGS:
        store.create_tag(name, color)
    return len(DEFAULT_TAGS)


def create_store(settings: Config) -> KnowledgeStore:
    """Create the store selected by ``[storage] backend``.

    Args:
        settings: Loaded application settings.

    Returns:
        A ready-to-use store (migrated and optionally seeded).
    """
    backend = settings.storage.backend
    store: KnowledgeStore
    if backend == "sqlite":
        db = Database(settings.db_path)
        run_migrations(db)
        store = SQLiteStore(db)
        logger.info(f"Using SQLite store at {settings.db_path}")
    else:
        store = MemoryStore()
        logger.info("Using in-memory store")

    if settings.storage.seed_default_tags:
        created = seed_default_tags(store)
        if created:
            logger.info(f"Seeded {created} default tag(s)")
    return store
