"""Shared pytest fixtures for all tests.

These fixtures properly clean up resources to prevent file descriptor leaks.
"""

import gc

import pytest
from httpx import ASGITransport, AsyncClient

from morpheus.config import Config
from morpheus.db.connection import Database
from morpheus.db.migrations import run_migrations
from morpheus.storage.memory import MemoryStore
from morpheus.storage.sqlite import SQLiteStore

# Demo knowledge base used by the command-line client's mock server
SAMPLE_NOTES = [
    (
        "UI Design Preferences",
        "User prefers clean, minimalist interfaces with plenty of white space. "
        "Navigation should be intuitive with clear visual hierarchy.",
        ["ui", "design", "preferences"],
    ),
    (
        "Color Theme Preferences",
        "User likes blue color schemes, particularly navy and sky blue combinations. "
        "Prefers dark mode for better readability.",
        ["colors", "theme", "preferences"],
    ),
    (
        "Travel App Features",
        "User wants to include flight booking, hotel reservations, and local attraction "
        "recommendations. Should have offline mode for basic features.",
        ["features", "travel", "app"],
    ),
]

SAMPLE_LINKS = [
    (
        "https://dribbble.com/tags/travel_app",
        "Travel App Design Inspiration",
        "Collection of modern travel app designs with blue color schemes",
        ["design", "inspiration", "travel"],
    ),
    (
        "https://www.color-hex.com/color-palette/12345",
        "Blue Color Palette",
        "Professional blue color combinations for travel apps",
        ["colors", "palette", "design"],
    ),
]


def populate(store) -> None:
    """Load the sample notes and links (and their tags) into a store."""
    tag_ids: dict[str, int] = {}

    def ids_for(names: list[str]) -> list[int]:
        for name in names:
            if name not in tag_ids:
                tag_ids[name] = store.create_tag(name, "#3182CE").id
        return [tag_ids[name] for name in names]

    for title, content, tags in SAMPLE_NOTES:
        note = store.create_note(title, content)
        store.set_note_tags(note.id, ids_for(tags))

    for url, title, description, tags in SAMPLE_LINKS:
        link = store.create_link(url=url, title=title, description=description)
        store.set_link_tags(link.id, ids_for(tags))


@pytest.fixture(autouse=True)
def cleanup_after_test():
    """Clean up resources after each test to prevent file descriptor leaks.

    This runs automatically after every test to help garbage collect
    any lingering SQLite connections.
    """
    yield
    # Force garbage collection to release file handles
    gc.collect()


@pytest.fixture
def memory_store():
    """Empty in-memory store."""
    return MemoryStore()


@pytest.fixture
def sample_store():
    """In-memory store holding the sample notes and links."""
    store = MemoryStore()
    populate(store)
    return store


@pytest.fixture
def temp_db(tmp_path):
    """Create a temporary migrated database that cleans up properly."""
    db = Database(tmp_path / "test.db")
    run_migrations(db)
    yield db
    # Clean up to release file handles
    db.close()
    gc.collect()


@pytest.fixture
def sqlite_store(temp_db):
    """SQLite-backed store on a temporary database."""
    return SQLiteStore(temp_db)


@pytest.fixture
def test_settings(tmp_path):
    """Settings rooted in a temporary data directory, all sections at defaults."""
    return Config(data_dir=tmp_path / "morpheus", active_provider="openai", active_model="gpt-4o")


@pytest.fixture
async def client(sample_store, test_settings):
    """HTTP client for the app, wired to the sample store."""
    from morpheus.api.deps import _reset_llm_instance, get_settings, get_store
    from morpheus.main import app

    app.dependency_overrides[get_store] = lambda: sample_store
    app.dependency_overrides[get_settings] = lambda: test_settings
    try:
        async with AsyncClient(
            transport=ASGITransport(app=app),
            base_url="http://test",
        ) as ac:
            yield ac
    finally:
        app.dependency_overrides.clear()
        _reset_llm_instance()
