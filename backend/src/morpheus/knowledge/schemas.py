"""Pydantic schemas for knowledge items.

Attributes are snake_case in Python and camelCase on the wire
(``created_at`` is serialized as ``createdAt``). Both spellings are
accepted on input.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from morpheus.constants.tagging import DEFAULT_TAG_COLOR


class ApiModel(BaseModel):
    """Base model with camelCase aliases."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class ItemType(str, Enum):
    """Kind of knowledge item an edge endpoint refers to."""

    NOTE = "note"
    LINK = "link"


class Tag(ApiModel):
    """A named, colored label shared by notes and links."""

    id: int
    name: str
    color: str = DEFAULT_TAG_COLOR


class TagCreate(ApiModel):
    """Request to create a tag."""

    name: str = Field(..., min_length=1)
    color: str = DEFAULT_TAG_COLOR


class TagUpdate(ApiModel):
    """Partial tag update."""

    name: Optional[str] = Field(None, min_length=1)
    color: Optional[str] = None


class Note(ApiModel):
    """A user note. Content is HTML produced by the editor."""

    id: int
    title: str
    content: str
    created_at: datetime
    updated_at: datetime


class NoteWithTags(Note):
    tags: list[Tag] = Field(default_factory=list)


class NoteCreate(ApiModel):
    """Request to create a note, optionally tagged by tag id."""

    title: str = Field(..., min_length=1)
    content: str
    tags: list[int] = Field(default_factory=list, description="Tag ids to attach")


class NoteUpdate(ApiModel):
    """Partial note update. ``tags`` replaces the whole tag set when given."""

    title: Optional[str] = Field(None, min_length=1)
    content: Optional[str] = None
    tags: Optional[list[int]] = None


class Link(ApiModel):
    """A saved web link."""

    id: int
    url: str
    title: str
    description: Optional[str] = None
    summary: Optional[str] = None
    thumbnail_url: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class LinkWithTags(Link):
    tags: list[Tag] = Field(default_factory=list)


class LinkCreate(ApiModel):
    """Request to save a link."""

    url: str = Field(..., min_length=1)
    title: str = Field(..., min_length=1)
    description: Optional[str] = None
    summary: Optional[str] = None
    thumbnail_url: Optional[str] = None
    tags: list[int] = Field(default_factory=list, description="Tag ids to attach")


class LinkUpdate(ApiModel):
    """Partial link update. ``tags`` replaces the whole tag set when given."""

    url: Optional[str] = Field(None, min_length=1)
    title: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    summary: Optional[str] = None
    thumbnail_url: Optional[str] = None
    tags: Optional[list[int]] = None


class Connection(ApiModel):
    """A directed, weighted edge between two knowledge items."""

    id: int
    source_id: int
    source_type: ItemType
    target_id: int
    target_type: ItemType
    strength: int = 1
    created_at: datetime


class ConnectionCreate(ApiModel):
    """Request to connect two knowledge items."""

    source_id: int
    source_type: ItemType
    target_id: int
    target_type: ItemType
    strength: int = Field(1, ge=1)
