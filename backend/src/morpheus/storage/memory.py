"""Dict-backed store kept entirely in process memory."""

import itertools
import threading
from datetime import datetime, UTC
from typing import Any, Optional

from morpheus.constants.tagging import DEFAULT_TAG_COLOR
from morpheus.knowledge.schemas import Connection, ItemType, Link, Note, Tag
from morpheus.storage.base import (
    LINK_FIELDS,
    NOTE_FIELDS,
    TAG_FIELDS,
    DuplicateTagError,
    UnknownTagError,
    check_fields,
)


class MemoryStore:
    """In-memory implementation of :class:`~morpheus.storage.base.KnowledgeStore`.

    Tag assignments are kept as ordered id lists per item. Writes are
    serialized with a lock; reads return snapshots.
    """

    def __init__(self) -> None:
        self._notes: dict[int, Note] = {}
        self._links: dict[int, Link] = {}
        self._tags: dict[int, Tag] = {}
        self._note_tags: dict[int, list[int]] = {}
        self._link_tags: dict[int, list[int]] = {}
        self._connections: dict[int, Connection] = {}

        self._note_ids = itertools.count(1)
        self._link_ids = itertools.count(1)
        self._tag_ids = itertools.count(1)
        self._connection_ids = itertools.count(1)

        self._lock = threading.Lock()

    # -- notes -------------------------------------------------------------

    def get_notes(self) -> list[Note]:
        # sorted() is stable with reverse=True, so equal timestamps keep id order
        return sorted(self._notes.values(), key=lambda n: n.updated_at, reverse=True)

    def get_note(self, note_id: int) -> Optional[Note]:
        return self._notes.get(note_id)

    def create_note(self, title: str, content: str) -> Note:
        with self._lock:
            now = datetime.now(UTC)
            note = Note(
                id=next(self._note_ids),
                title=title,
                content=content,
                created_at=now,
                updated_at=now,
            )
            self._notes[note.id] = note
            self._note_tags[note.id] = []
            return note

    def update_note(self, note_id: int, **changes: Any) -> Optional[Note]:
        check_fields(changes, NOTE_FIELDS)
        with self._lock:
            existing = self._notes.get(note_id)
            if existing is None:
                return None
            updated = existing.model_copy(update={**changes, "updated_at": datetime.now(UTC)})
            self._notes[note_id] = updated
            return updated

    def delete_note(self, note_id: int) -> bool:
        with self._lock:
            if self._notes.pop(note_id, None) is None:
                return False
            self._note_tags.pop(note_id, None)
            self._drop_connections(ItemType.NOTE, note_id)
            return True

    def get_note_tags(self, note_id: int) -> list[Tag]:
        return self._resolve_tags(self._note_tags.get(note_id, []))

    def set_note_tags(self, note_id: int, tag_ids: list[int]) -> None:
        with self._lock:
            self._check_tag_ids(tag_ids)
            self._note_tags[note_id] = list(dict.fromkeys(tag_ids))

    def get_notes_by_tag(self, tag_id: int) -> list[Note]:
        return [n for n in self.get_notes() if tag_id in self._note_tags.get(n.id, [])]

    # -- links -------------------------------------------------------------

    def get_links(self) -> list[Link]:
        return sorted(self._links.values(), key=lambda link: link.updated_at, reverse=True)

    def get_link(self, link_id: int) -> Optional[Link]:
        return self._links.get(link_id)

    def get_link_by_url(self, url: str) -> Optional[Link]:
        return next((link for link in self._links.values() if link.url == url), None)

    def create_link(
        self,
        url: str,
        title: str,
        description: Optional[str] = None,
        summary: Optional[str] = None,
        thumbnail_url: Optional[str] = None,
    ) -> Link:
        with self._lock:
            now = datetime.now(UTC)
            link = Link(
                id=next(self._link_ids),
                url=url,
                title=title,
                description=description,
                summary=summary,
                thumbnail_url=thumbnail_url,
                created_at=now,
                updated_at=now,
            )
            self._links[link.id] = link
            self._link_tags[link.id] = []
            return link

    def update_link(self, link_id: int, **changes: Any) -> Optional[Link]:
        check_fields(changes, LINK_FIELDS)
        with self._lock:
            existing = self._links.get(link_id)
            if existing is None:
                return None
            updated = existing.model_copy(update={**changes, "updated_at": datetime.now(UTC)})
            self._links[link_id] = updated
            return updated

    def delete_link(self, link_id: int) -> bool:
        with self._lock:
            if self._links.pop(link_id, None) is None:
                return False
            self._link_tags.pop(link_id, None)
            self._drop_connections(ItemType.LINK, link_id)
            return True

    def get_link_tags(self, link_id: int) -> list[Tag]:
        return self._resolve_tags(self._link_tags.get(link_id, []))

    def set_link_tags(self, link_id: int, tag_ids: list[int]) -> None:
        with self._lock:
            self._check_tag_ids(tag_ids)
            self._link_tags[link_id] = list(dict.fromkeys(tag_ids))

    def get_links_by_tag(self, tag_id: int) -> list[Link]:
        return [link for link in self.get_links() if tag_id in self._link_tags.get(link.id, [])]

    # -- tags --------------------------------------------------------------

    def get_tags(self) -> list[Tag]:
        return list(self._tags.values())

    def get_tag(self, tag_id: int) -> Optional[Tag]:
        return self._tags.get(tag_id)

    def get_tag_by_name(self, name: str) -> Optional[Tag]:
        return next((t for t in self._tags.values() if t.name == name), None)

    def create_tag(self, name: str, color: str = DEFAULT_TAG_COLOR) -> Tag:
        with self._lock:
            if self.get_tag_by_name(name) is not None:
                raise DuplicateTagError(name)
            tag = Tag(id=next(self._tag_ids), name=name, color=color)
            self._tags[tag.id] = tag
            return tag

    def update_tag(self, tag_id: int, **changes: Any) -> Optional[Tag]:
        check_fields(changes, TAG_FIELDS)
        with self._lock:
            existing = self._tags.get(tag_id)
            if existing is None:
                return None
            new_name = changes.get("name")
            if new_name is not None:
                clash = self.get_tag_by_name(new_name)
                if clash is not None and clash.id != tag_id:
                    raise DuplicateTagError(new_name)
            updated = existing.model_copy(update=changes)
            self._tags[tag_id] = updated
            return updated

    def delete_tag(self, tag_id: int) -> bool:
        with self._lock:
            if self._tags.pop(tag_id, None) is None:
                return False
            for assignments in (self._note_tags, self._link_tags):
                for item_id, tag_ids in assignments.items():
                    if tag_id in tag_ids:
                        assignments[item_id] = [t for t in tag_ids if t != tag_id]
            return True

    # -- connections -------------------------------------------------------

    def get_connections(self) -> list[Connection]:
        return list(self._connections.values())

    def create_connection(
        self,
        source_id: int,
        source_type: ItemType,
        target_id: int,
        target_type: ItemType,
        strength: int = 1,
    ) -> Connection:
        with self._lock:
            connection = Connection(
                id=next(self._connection_ids),
                source_id=source_id,
                source_type=source_type,
                target_id=target_id,
                target_type=target_type,
                strength=strength,
                created_at=datetime.now(UTC),
            )
            self._connections[connection.id] = connection
            return connection

    def delete_connection(self, connection_id: int) -> bool:
        with self._lock:
            return self._connections.pop(connection_id, None) is not None

    def close(self) -> None:
        """Nothing to release."""

    # -- helpers -----------------------------------------------------------

    def _resolve_tags(self, tag_ids: list[int]) -> list[Tag]:
        wanted = set(tag_ids)
        return [tag for tag_id, tag in self._tags.items() if tag_id in wanted]

    def _check_tag_ids(self, tag_ids: list[int]) -> None:
        missing = [t for t in tag_ids if t not in self._tags]
        if missing:
            raise UnknownTagError(missing)

    def _drop_connections(self, item_type: ItemType, item_id: int) -> None:
        stale = [
            c.id
            for c in self._connections.values()
            if (c.source_type == item_type and c.source_id == item_id)
            or (c.target_type == item_type and c.target_id == item_id)
        ]
        for connection_id in stale:
            del self._connections[connection_id]
