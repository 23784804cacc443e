"""Tag filters and tag relevance."""

from collections.abc import Iterable, Sequence

from morpheus.constants.search import CONTEXT_TAG_LIMIT
from morpheus.knowledge.schemas import Tag


def matches_tags(item_tags: Iterable[Tag], requested_names: Sequence[str]) -> bool:
    """Check whether an item passes a tag filter.

    An empty filter lets everything through. Otherwise at least one of the
    item's tag names must be requested (exact, case-sensitive).
    """
    if not requested_names:
        return True
    requested = set(requested_names)
    return any(tag.name in requested for tag in item_tags)


def count_tag_matches(item_tags: Iterable[Tag], requested_names: Sequence[str]) -> int:
    """Count the item's tags whose name is requested."""
    requested = set(requested_names)
    return sum(1 for tag in item_tags if tag.name in requested)


def find_relevant_tags(
    query: str, all_tags: Sequence[Tag], limit: int = CONTEXT_TAG_LIMIT
) -> list[Tag]:
    """Pick tags related to a free-text query.

    A tag is related when its name occurs in the query or the query occurs
    in its name, ignoring case. Related tags keep their input order and at
    most ``limit`` are returned.
    """
    needle = query.lower().strip()
    if not needle:
        return []

    related = []
    for tag in all_tags:
        name = tag.name.lower()
        if name and (name in needle or needle in name):
            related.append(tag)
            if len(related) == limit:
                break
    return related
