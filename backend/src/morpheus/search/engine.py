"""Knowledge search over every note and link in the store."""

import logging
from dataclasses import dataclass, field

from morpheus.search.schemas import ScoredLink, ScoredNote
from morpheus.search.scoring import html_to_text, score_relevance
from morpheus.search.tags import matches_tags
from morpheus.search.validation import SearchQuery
from morpheus.storage.base import KnowledgeReader

logger = logging.getLogger(__name__)


@dataclass
class SearchResults:
    """Ranked notes and links for one query.

    ``total_notes``/``total_links`` count every candidate that passed the
    filter, before truncation to the query limit.
    """

    notes: list[ScoredNote] = field(default_factory=list)
    links: list[ScoredLink] = field(default_factory=list)
    total_notes: int = 0
    total_links: int = 0

    @property
    def used_tags(self) -> list[str]:
        """Distinct tag names across the returned items, first seen first."""
        names: dict[str, None] = {}
        for item in [*self.notes, *self.links]:
            for tag in item.tags:
                names.setdefault(tag.name, None)
        return list(names)


class KnowledgeSearchEngine:
    """Scores, filters, sorts and truncates notes and links for a query.

    Notes and links are ranked as two independent lists. The engine only
    reads from the store; any store exception propagates to the caller.
    """

    def __init__(self, store: KnowledgeReader) -> None:
        self._store = store

    def search(self, query: SearchQuery) -> SearchResults:
        """Run a search.

        An item is a candidate when its relevance is above zero or it passes
        the tag filter. Candidates are sorted by descending relevance; the
        sort is stable, so ties keep store order.

        Args:
            query: A validated query.

        Returns:
            Up to ``query.limit`` notes and up to ``query.limit`` links.
        """
        notes = self._store.get_notes()
        links = self._store.get_links()

        note_candidates: list[ScoredNote] = []
        for note in notes:
            tags = self._store.get_note_tags(note.id)
            score = score_relevance(query.query, f"{note.title} {html_to_text(note.content)}")
            if score > 0 or matches_tags(tags, query.tags):
                note_candidates.append(
                    ScoredNote(**note.model_dump(), tags=tags, relevance_score=score)
                )

        link_candidates: list[ScoredLink] = []
        for link in links:
            tags = self._store.get_link_tags(link.id)
            score = score_relevance(query.query, f"{link.title} {link.description or ''}")
            if score > 0 or matches_tags(tags, query.tags):
                link_candidates.append(
                    ScoredLink(**link.model_dump(), tags=tags, relevance_score=score)
                )

        note_candidates.sort(key=lambda item: item.relevance_score, reverse=True)
        link_candidates.sort(key=lambda item: item.relevance_score, reverse=True)

        logger.debug(
            f"Search {query.query!r} tags={query.tags}: "
            f"{len(note_candidates)}/{len(notes)} notes, "
            f"{len(link_candidates)}/{len(links)} links matched"
        )

        return SearchResults(
            notes=note_candidates[: query.limit],
            links=link_candidates[: query.limit],
            total_notes=len(note_candidates),
            total_links=len(link_candidates),
        )
