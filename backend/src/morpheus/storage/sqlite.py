"""SQLite-backed store for persistent deployments."""

import logging
import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime, UTC
from typing import Any, Optional

from morpheus.constants.tagging import DEFAULT_TAG_COLOR
from morpheus.db.connection import Database
from morpheus.knowledge.schemas import Connection, ItemType, Link, Note, Tag
from morpheus.storage.base import (
    LINK_FIELDS,
    NOTE_FIELDS,
    TAG_FIELDS,
    DuplicateTagError,
    StorageError,
    UnknownTagError,
    check_fields,
)

logger = logging.getLogger(__name__)

NOTE_COLUMNS = "id, title, content, created_at, updated_at"
LINK_COLUMNS = "id, url, title, description, summary, thumbnail_url, created_at, updated_at"


def _now() -> str:
    return datetime.now(UTC).isoformat(timespec="microseconds")


@contextmanager
def _translate_errors(action: str) -> Iterator[None]:
    """Re-raise sqlite3 failures as StorageError."""
    try:
        yield
    except sqlite3.Error as e:
        logger.error(f"SQLite error while trying to {action}: {e}")
        raise StorageError(f"Failed to {action}: {e}") from e


def _row_to_note(row: sqlite3.Row) -> Note:
    return Note(
        id=row["id"],
        title=row["title"],
        content=row["content"],
        created_at=datetime.fromisoformat(row["created_at"]),
        updated_at=datetime.fromisoformat(row["updated_at"]),
    )


def _row_to_link(row: sqlite3.Row) -> Link:
    return Link(
        id=row["id"],
        url=row["url"],
        title=row["title"],
        description=row["description"],
        summary=row["summary"],
        thumbnail_url=row["thumbnail_url"],
        created_at=datetime.fromisoformat(row["created_at"]),
        updated_at=datetime.fromisoformat(row["updated_at"]),
    )


def _row_to_tag(row: sqlite3.Row) -> Tag:
    return Tag(id=row["id"], name=row["name"], color=row["color"])


def _row_to_connection(row: sqlite3.Row) -> Connection:
    return Connection(
        id=row["id"],
        source_id=row["source_id"],
        source_type=ItemType(row["source_type"]),
        target_id=row["target_id"],
        target_type=ItemType(row["target_type"]),
        strength=row["strength"],
        created_at=datetime.fromisoformat(row["created_at"]),
    )


class SQLiteStore:
    """:class:`~morpheus.storage.base.KnowledgeStore` over a migrated Database.

    The caller owns schema setup (``run_migrations``); the store only issues
    queries. Timestamps are stored as ISO-8601 UTC strings so that text
    ordering matches chronological ordering.
    """

    def __init__(self, db: Database) -> None:
        self._db = db

    # -- notes -------------------------------------------------------------

    def get_notes(self) -> list[Note]:
        with _translate_errors("list notes"):
            rows = self._db.execute(
                f"SELECT {NOTE_COLUMNS} FROM notes ORDER BY updated_at DESC, id ASC"
            ).fetchall()
        return [_row_to_note(row) for row in rows]

    def get_note(self, note_id: int) -> Optional[Note]:
        with _translate_errors("get note"):
            row = self._db.execute(
                f"SELECT {NOTE_COLUMNS} FROM notes WHERE id = ?", (note_id,)
            ).fetchone()
        return _row_to_note(row) if row else None

    def create_note(self, title: str, content: str) -> Note:
        now = _now()
        with _translate_errors("create note"), self._db.transaction():
            cursor = self._db.execute(
                "INSERT INTO notes (title, content, created_at, updated_at) VALUES (?, ?, ?, ?)",
                (title, content, now, now),
            )
            note_id = cursor.lastrowid
        note = self.get_note(note_id)
        assert note is not None
        return note

    def update_note(self, note_id: int, **changes: Any) -> Optional[Note]:
        check_fields(changes, NOTE_FIELDS)
        if not self._update_row("notes", note_id, changes):
            return None
        return self.get_note(note_id)

    def delete_note(self, note_id: int) -> bool:
        return self._delete_item("notes", ItemType.NOTE, note_id)

    def get_note_tags(self, note_id: int) -> list[Tag]:
        return self._item_tags("note_tags", "note_id", note_id)

    def set_note_tags(self, note_id: int, tag_ids: list[int]) -> None:
        self._replace_tags("note_tags", "note_id", note_id, tag_ids)

    def get_notes_by_tag(self, tag_id: int) -> list[Note]:
        with _translate_errors("list notes by tag"):
            rows = self._db.execute(
                f"""
                SELECT {NOTE_COLUMNS} FROM notes
                WHERE id IN (SELECT note_id FROM note_tags WHERE tag_id = ?)
                ORDER BY updated_at DESC, id ASC
                """,
                (tag_id,),
            ).fetchall()
        return [_row_to_note(row) for row in rows]

    # -- links -------------------------------------------------------------

    def get_links(self) -> list[Link]:
        with _translate_errors("list links"):
            rows = self._db.execute(
                f"SELECT {LINK_COLUMNS} FROM links ORDER BY updated_at DESC, id ASC"
            ).fetchall()
        return [_row_to_link(row) for row in rows]

    def get_link(self, link_id: int) -> Optional[Link]:
        with _translate_errors("get link"):
            row = self._db.execute(
                f"SELECT {LINK_COLUMNS} FROM links WHERE id = ?", (link_id,)
            ).fetchone()
        return _row_to_link(row) if row else None

    def get_link_by_url(self, url: str) -> Optional[Link]:
        with _translate_errors("get link by url"):
            row = self._db.execute(
                f"SELECT {LINK_COLUMNS} FROM links WHERE url = ? ORDER BY id LIMIT 1", (url,)
            ).fetchone()
        return _row_to_link(row) if row else None

    def create_link(
        self,
        url: str,
        title: str,
        description: Optional[str] = None,
        summary: Optional[str] = None,
        thumbnail_url: Optional[str] = None,
    ) -> Link:
        now = _now()
        with _translate_errors("create link"), self._db.transaction():
            cursor = self._db.execute(
                """
                INSERT INTO links
                    (url, title, description, summary, thumbnail_url, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (url, title, description, summary, thumbnail_url, now, now),
            )
            link_id = cursor.lastrowid
        link = self.get_link(link_id)
        assert link is not None
        return link

    def update_link(self, link_id: int, **changes: Any) -> Optional[Link]:
        check_fields(changes, LINK_FIELDS)
        if not self._update_row("links", link_id, changes):
            return None
        return self.get_link(link_id)

    def delete_link(self, link_id: int) -> bool:
        return self._delete_item("links", ItemType.LINK, link_id)

    def get_link_tags(self, link_id: int) -> list[Tag]:
        return self._item_tags("link_tags", "link_id", link_id)

    def set_link_tags(self, link_id: int, tag_ids: list[int]) -> None:
        self._replace_tags("link_tags", "link_id", link_id, tag_ids)

    def get_links_by_tag(self, tag_id: int) -> list[Link]:
        with _translate_errors("list links by tag"):
            rows = self._db.execute(
                f"""
                SELECT {LINK_COLUMNS} FROM links
                WHERE id IN (SELECT link_id FROM link_tags WHERE tag_id = ?)
                ORDER BY updated_at DESC, id ASC
                """,
                (tag_id,),
            ).fetchall()
        return [_row_to_link(row) for row in rows]

    # -- tags --------------------------------------------------------------

    def get_tags(self) -> list[Tag]:
        with _translate_errors("list tags"):
            rows = self._db.execute("SELECT id, name, color FROM tags ORDER BY id").fetchall()
        return [_row_to_tag(row) for row in rows]

    def get_tag(self, tag_id: int) -> Optional[Tag]:
        with _translate_errors("get tag"):
            row = self._db.execute(
                "SELECT id, name, color FROM tags WHERE id = ?", (tag_id,)
            ).fetchone()
        return _row_to_tag(row) if row else None

    def get_tag_by_name(self, name: str) -> Optional[Tag]:
        with _translate_errors("get tag by name"):
            row = self._db.execute(
                "SELECT id, name, color FROM tags WHERE name = ?", (name,)
            ).fetchone()
        return _row_to_tag(row) if row else None

    def create_tag(self, name: str, color: str = DEFAULT_TAG_COLOR) -> Tag:
        try:
            with self._db.transaction():
                cursor = self._db.execute(
                    "INSERT INTO tags (name, color) VALUES (?, ?)", (name, color)
                )
        except sqlite3.IntegrityError as e:
            raise DuplicateTagError(name) from e
        except sqlite3.Error as e:
            raise StorageError(f"Failed to create tag: {e}") from e
        return Tag(id=cursor.lastrowid, name=name, color=color)

    def update_tag(self, tag_id: int, **changes: Any) -> Optional[Tag]:
        check_fields(changes, TAG_FIELDS)
        try:
            found = self._update_row("tags", tag_id, changes, touch=False)
        except StorageError as e:
            if isinstance(e.__cause__, sqlite3.IntegrityError):
                raise DuplicateTagError(changes.get("name", "")) from e.__cause__
            raise
        return self.get_tag(tag_id) if found else None

    def delete_tag(self, tag_id: int) -> bool:
        with _translate_errors("delete tag"), self._db.transaction():
            cursor = self._db.execute("DELETE FROM tags WHERE id = ?", (tag_id,))
        return cursor.rowcount > 0

    # -- connections -------------------------------------------------------

    def get_connections(self) -> list[Connection]:
        with _translate_errors("list connections"):
            rows = self._db.execute("SELECT * FROM connections ORDER BY id").fetchall()
        return [_row_to_connection(row) for row in rows]

    def create_connection(
        self,
        source_id: int,
        source_type: ItemType,
        target_id: int,
        target_type: ItemType,
        strength: int = 1,
    ) -> Connection:
        now = _now()
        with _translate_errors("create connection"), self._db.transaction():
            cursor = self._db.execute(
                """
                INSERT INTO connections
                    (source_id, source_type, target_id, target_type, strength, created_at)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (
                    source_id,
                    ItemType(source_type).value,
                    target_id,
                    ItemType(target_type).value,
                    strength,
                    now,
                ),
            )
        return Connection(
            id=cursor.lastrowid,
            source_id=source_id,
            source_type=source_type,
            target_id=target_id,
            target_type=target_type,
            strength=strength,
            created_at=datetime.fromisoformat(now),
        )

    def delete_connection(self, connection_id: int) -> bool:
        with _translate_errors("delete connection"), self._db.transaction():
            cursor = self._db.execute("DELETE FROM connections WHERE id = ?", (connection_id,))
        return cursor.rowcount > 0

    def close(self) -> None:
        self._db.close()

    # -- helpers -----------------------------------------------------------

    def _update_row(
        self, table: str, row_id: int, changes: dict[str, Any], touch: bool = True
    ) -> bool:
        """Apply column changes to one row; returns False if the row is missing."""
        values = dict(changes)
        if touch:
            values["updated_at"] = _now()
        with _translate_errors(f"update {table}"), self._db.transaction():
            if not values:
                row = self._db.execute(f"SELECT 1 FROM {table} WHERE id = ?", (row_id,)).fetchone()
                return row is not None
            assignments = ", ".join(f"{column} = ?" for column in values)
            cursor = self._db.execute(
                f"UPDATE {table} SET {assignments} WHERE id = ?",
                (*values.values(), row_id),
            )
        return cursor.rowcount > 0

    def _delete_item(self, table: str, item_type: ItemType, item_id: int) -> bool:
        with _translate_errors(f"delete from {table}"), self._db.transaction():
            cursor = self._db.execute(f"DELETE FROM {table} WHERE id = ?", (item_id,))
            if cursor.rowcount == 0:
                return False
            self._db.execute(
                """
                DELETE FROM connections
                WHERE (source_type = ? AND source_id = ?) OR (target_type = ? AND target_id = ?)
                """,
                (item_type.value, item_id, item_type.value, item_id),
            )
        return True

    def _item_tags(self, junction: str, item_column: str, item_id: int) -> list[Tag]:
        with _translate_errors(f"read {junction}"):
            rows = self._db.execute(
                f"""
                SELECT t.id, t.name, t.color FROM tags t
                JOIN {junction} j ON j.tag_id = t.id
                WHERE j.{item_column} = ?
                ORDER BY t.id
                """,
                (item_id,),
            ).fetchall()
        return [_row_to_tag(row) for row in rows]

    def _replace_tags(
        self, junction: str, item_column: str, item_id: int, tag_ids: list[int]
    ) -> None:
        unique_ids = list(dict.fromkeys(tag_ids))
        if unique_ids:
            placeholders = ", ".join("?" for _ in unique_ids)
            with _translate_errors("check tag ids"):
                rows = self._db.execute(
                    f"SELECT id FROM tags WHERE id IN ({placeholders})", tuple(unique_ids)
                ).fetchall()
            known = {row["id"] for row in rows}
            missing = [t for t in unique_ids if t not in known]
            if missing:
                raise UnknownTagError(missing)

        with _translate_errors(f"write {junction}"), self._db.transaction():
            self._db.execute(f"DELETE FROM {junction} WHERE {item_column} = ?", (item_id,))
            self._db.executemany(
                f"INSERT INTO {junction} ({item_column}, tag_id) VALUES (?, ?)",
                [(item_id, tag_id) for tag_id in unique_ids],
            )
