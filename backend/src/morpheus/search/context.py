"""Context retrieval for tools that inject knowledge into a prompt."""

import logging
from typing import Optional

from morpheus.constants.search import (
    CONTEXT_MAX_RESULTS,
    CONTEXT_SEARCH_LIMIT,
    CONTEXT_TAG_LIMIT,
)
from morpheus.knowledge.schemas import Tag
from morpheus.search.engine import KnowledgeSearchEngine
from morpheus.search.prioritizer import prioritize
from morpheus.search.schemas import (
    ContextItem,
    ContextItemMetadata,
    ContextPayload,
    ContextResponse,
    ScoredLink,
    ScoredNote,
)
from morpheus.search.tags import find_relevant_tags
from morpheus.search.validation import SearchQuery
from morpheus.storage.base import KnowledgeReader

logger = logging.getLogger(__name__)


def _note_item(note: ScoredNote) -> ContextItem:
    return ContextItem(
        content=f"Title: {note.title}\n\n{note.content}",
        relevance=note.relevance_score,
        metadata=ContextItemMetadata(id=note.id, tags=[t.name for t in note.tags]),
    )


def _link_item(link: ScoredLink) -> ContextItem:
    return ContextItem(
        content=f"{link.title}\n{link.url}\n{link.description or ''}\n{link.summary or ''}",
        relevance=link.relevance_score,
        metadata=ContextItemMetadata(id=link.id, tags=[t.name for t in link.tags]),
    )


class ContextService:
    """Tag-prioritized, tightly capped retrieval.

    Derives tag filters from the query, runs the regular search with them,
    re-ranks by tag matches and keeps only a few items per list. Trades
    recall for precision on topical queries such as "travel".
    """

    def __init__(
        self,
        store: KnowledgeReader,
        engine: Optional[KnowledgeSearchEngine] = None,
        tag_limit: int = CONTEXT_TAG_LIMIT,
        search_limit: int = CONTEXT_SEARCH_LIMIT,
        max_results: int = CONTEXT_MAX_RESULTS,
    ) -> None:
        self._store = store
        self._engine = engine or KnowledgeSearchEngine(store)
        self._tag_limit = tag_limit
        self._search_limit = search_limit
        self._max_results = max_results

    def get_related_tags(self, query: str) -> list[Tag]:
        """Tags whose names relate to the query text."""
        return find_relevant_tags(query, self._store.get_tags(), self._tag_limit)

    def get_context(self, query: str) -> ContextResponse:
        """Retrieve prioritized context for a query.

        Args:
            query: Non-empty free-text query.

        Returns:
            At most ``max_results`` notes and links, flattened to text.
        """
        tag_names = [tag.name for tag in self.get_related_tags(query)]
        results = self._engine.search(
            SearchQuery(query=query, tags=tag_names, limit=self._search_limit)
        )

        notes = prioritize(results.notes, tag_names)[: self._max_results]
        links = prioritize(results.links, tag_names)[: self._max_results]

        logger.info(
            f"Context for {query!r}: tags={tag_names}, "
            f"{len(notes)} note(s), {len(links)} link(s)"
        )

        return ContextResponse(
            context=ContextPayload(
                notes=[_note_item(note) for note in notes],
                links=[_link_item(link) for link in links],
            )
        )
