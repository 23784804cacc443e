"""Knowledge items: notes, links, tags and the connections between them."""

from morpheus.knowledge.schemas import (
    Connection,
    ConnectionCreate,
    ItemType,
    Link,
    LinkCreate,
    LinkUpdate,
    LinkWithTags,
    Note,
    NoteCreate,
    NoteUpdate,
    NoteWithTags,
    Tag,
    TagCreate,
    TagUpdate,
)

__all__ = [
    "Connection",
    "ConnectionCreate",
    "ItemType",
    "Link",
    "LinkCreate",
    "LinkUpdate",
    "LinkWithTags",
    "Note",
    "NoteCreate",
    "NoteUpdate",
    "NoteWithTags",
    "Tag",
    "TagCreate",
    "TagUpdate",
]
