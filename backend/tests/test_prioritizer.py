"""Tag-weighted re-ranking tests."""

from datetime import datetime, UTC

from hypothesis import given, strategies as st

from morpheus.knowledge.schemas import Tag
from morpheus.search.prioritizer import prioritize
from morpheus.search.schemas import ScoredNote

NOW = datetime(2024, 5, 1, tzinfo=UTC)


def scored(note_id: int, score: float, *tag_names: str) -> ScoredNote:
    return ScoredNote(
        id=note_id,
        title=f"Note {note_id}",
        content="",
        created_at=NOW,
        updated_at=NOW,
        tags=[Tag(id=i, name=name) for i, name in enumerate(tag_names, start=1)],
        relevance_score=score,
    )


def test_more_priority_tags_rank_first_regardless_of_score():
    design_only = scored(1, 0.9, "design")
    design_and_color = scored(2, 0.1, "design", "color")

    ranked = prioritize([design_only, design_and_color], ["design", "color"])

    assert [n.id for n in ranked] == [2, 1]


def test_equal_match_counts_fall_back_to_relevance():
    low = scored(1, 0.2, "design")
    high = scored(2, 0.8, "design")

    assert [n.id for n in prioritize([low, high], ["design"])] == [2, 1]


def test_full_ties_keep_input_order():
    items = [scored(i, 0.5, "design") for i in range(1, 5)]

    assert [n.id for n in prioritize(items, ["design"])] == [1, 2, 3, 4]


def test_input_is_not_modified():
    items = [scored(1, 0.1), scored(2, 0.9, "design")]
    original = list(items)

    prioritize(items, ["design"])

    assert items == original


@given(
    counts=st.lists(st.integers(min_value=0, max_value=3), min_size=1, max_size=6, unique=True),
    scores=st.lists(st.floats(min_value=0.0, max_value=1.0), min_size=6, max_size=6),
)
def test_distinct_match_counts_decide_order_alone(counts, scores):
    priority = ["a", "b", "c"]
    items = [
        scored(i, scores[i], *priority[:count]) for i, count in enumerate(counts)
    ]

    ranked = prioritize(items, priority)

    assert [len(n.tags) for n in ranked] == sorted(counts, reverse=True)
