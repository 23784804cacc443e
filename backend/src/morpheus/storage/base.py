"""Storage interfaces shared by every store implementation.

The search engine depends only on :class:`KnowledgeReader`. The REST layer
uses the full :class:`KnowledgeStore` surface. Which implementation backs
both is decided once at startup (see :func:`morpheus.storage.create_store`).
"""

from typing import Any, Optional, Protocol, runtime_checkable

from morpheus.knowledge.schemas import Connection, ItemType, Link, Note, Tag


class StorageError(Exception):
    """Raised when the storage backend fails to read or write."""

    pass


class DuplicateTagError(StorageError):
    """Raised when a tag name is already taken."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Tag with name {name!r} already exists")
        self.name = name


class UnknownTagError(StorageError):
    """Raised when attaching tag ids that do not exist."""

    def __init__(self, tag_ids: list[int]) -> None:
        super().__init__(f"Unknown tag id(s): {', '.join(str(i) for i in tag_ids)}")
        self.tag_ids = tag_ids


NOTE_FIELDS = frozenset({"title", "content"})
LINK_FIELDS = frozenset({"url", "title", "description", "summary", "thumbnail_url"})
TAG_FIELDS = frozenset({"name", "color"})


def check_fields(changes: dict[str, Any], allowed: frozenset[str]) -> None:
    """Reject update keys that are not columns of the item."""
    unknown = set(changes) - allowed
    if unknown:
        raise ValueError(f"Unknown field(s): {', '.join(sorted(unknown))}")


@runtime_checkable
class KnowledgeReader(Protocol):
    """Read operations needed by the search engine.

    Notes and links come back most recently updated first (equal timestamps
    keep ascending id order); tags come back in id order.
    """

    def get_notes(self) -> list[Note]: ...

    def get_links(self) -> list[Link]: ...

    def get_tags(self) -> list[Tag]: ...

    def get_note_tags(self, note_id: int) -> list[Tag]: ...

    def get_link_tags(self, link_id: int) -> list[Tag]: ...


@runtime_checkable
class KnowledgeStore(KnowledgeReader, Protocol):
    """Full CRUD surface over notes, links, tags and connections."""

    # Notes
    def get_note(self, note_id: int) -> Optional[Note]: ...

    def create_note(self, title: str, content: str) -> Note: ...

    def update_note(self, note_id: int, **changes: Any) -> Optional[Note]: ...

    def delete_note(self, note_id: int) -> bool: ...

    def set_note_tags(self, note_id: int, tag_ids: list[int]) -> None: ...

    def get_notes_by_tag(self, tag_id: int) -> list[Note]: ...

    # Links
    def get_link(self, link_id: int) -> Optional[Link]: ...

    def get_link_by_url(self, url: str) -> Optional[Link]: ...

    def create_link(
        self,
        url: str,
        title: str,
        description: Optional[str] = None,
        summary: Optional[str] = None,
        thumbnail_url: Optional[str] = None,
    ) -> Link: ...

    def update_link(self, link_id: int, **changes: Any) -> Optional[Link]: ...

    def delete_link(self, link_id: int) -> bool: ...

    def set_link_tags(self, link_id: int, tag_ids: list[int]) -> None: ...

    def get_links_by_tag(self, tag_id: int) -> list[Link]: ...

    # Tags
    def get_tag(self, tag_id: int) -> Optional[Tag]: ...

    def get_tag_by_name(self, name: str) -> Optional[Tag]: ...

    def create_tag(self, name: str, color: str = ...) -> Tag: ...

    def update_tag(self, tag_id: int, **changes: Any) -> Optional[Tag]: ...

    def delete_tag(self, tag_id: int) -> bool: ...

    # Connections
    def get_connections(self) -> list[Connection]: ...

    def create_connection(
        self,
        source_id: int,
        source_type: ItemType,
        target_id: int,
        target_type: ItemType,
        strength: int = 1,
    ) -> Connection: ...

    def delete_connection(self, connection_id: int) -> bool: ...

    def close(self) -> None: ...
