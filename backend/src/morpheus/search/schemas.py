"""Result and response schemas for search and context retrieval."""

from typing import Literal, Union

from pydantic import Field

from morpheus.knowledge.schemas import ApiModel, LinkWithTags, NoteWithTags, Tag


class ScoredNote(NoteWithTags):
    """A note with its tags and per-request relevance score."""

    relevance_score: float = Field(..., ge=0.0, le=1.0)


class ScoredLink(LinkWithTags):
    """A link with its tags and per-request relevance score."""

    relevance_score: float = Field(..., ge=0.0, le=1.0)


class SearchMetadata(ApiModel):
    total_notes: int = Field(..., description="Matching notes before the limit was applied")
    total_links: int = Field(..., description="Matching links before the limit was applied")
    used_tags: list[str] = Field(..., description="Tag names found on the returned items")


class SearchResponse(ApiModel):
    """Response of the query endpoint."""

    notes: list[ScoredNote]
    links: list[ScoredLink]
    suggested_tags: list[Tag] = Field(default_factory=list)
    metadata: SearchMetadata


class ContextItemMetadata(ApiModel):
    id: int
    tags: list[str]


class ContextItem(ApiModel):
    """A note or link flattened to text for injection into another tool."""

    content: str
    relevance: float
    metadata: ContextItemMetadata


class ContextPayload(ApiModel):
    notes: list[ContextItem]
    links: list[ContextItem]


class ContextResponse(ApiModel):
    context: ContextPayload


class ContextRequest(ApiModel):
    query: str = Field(..., min_length=1)


class SearchData(ApiModel):
    notes: list[ScoredNote]
    links: list[ScoredLink]


class SearchSuccess(ApiModel):
    status: Literal["success"] = "success"
    data: SearchData


class SearchFailure(ApiModel):
    status: Literal["error"] = "error"
    error: str


SearchOutcome = Union[SearchSuccess, SearchFailure]
