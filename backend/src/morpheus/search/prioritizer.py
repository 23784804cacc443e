"""Tag-weighted re-ranking for small, high-precision result sets."""

from collections.abc import Sequence
from typing import TypeVar

from morpheus.search.schemas import ScoredLink, ScoredNote
from morpheus.search.tags import count_tag_matches

Scored = TypeVar("Scored", ScoredNote, ScoredLink)


def prioritize(items: Sequence[Scored], priority_tag_names: Sequence[str]) -> list[Scored]:
    """Re-rank items by how many priority tags they carry.

    Sorts by tag-match count descending, then by relevance score
    descending. Full ties keep their input order. The input is not modified.
    """
    priority = list(priority_tag_names)
    return sorted(
        items,
        key=lambda item: (count_tag_matches(item.tags, priority), item.relevance_score),
        reverse=True,
    )
