"""Tag filter and tag relevance tests."""

from hypothesis import given, strategies as st

from morpheus.knowledge.schemas import Tag
from morpheus.search.tags import count_tag_matches, find_relevant_tags, matches_tags


def make_tags(*names: str) -> list[Tag]:
    return [Tag(id=i, name=name) for i, name in enumerate(names, start=1)]


class TestMatchesTags:
    def test_empty_filter_matches_everything(self):
        assert matches_tags(make_tags("travel"), [])
        assert matches_tags([], [])

    def test_one_shared_name_is_enough(self):
        assert matches_tags(make_tags("travel", "features"), ["design", "travel"])

    def test_no_shared_name(self):
        assert not matches_tags(make_tags("travel"), ["design"])

    def test_untagged_item_fails_a_non_empty_filter(self):
        assert not matches_tags([], ["travel"])

    def test_comparison_is_case_sensitive(self):
        assert not matches_tags(make_tags("travel"), ["Travel"])

    @given(names=st.lists(st.text(min_size=1, max_size=5), max_size=5))
    def test_vacuous_filter_for_any_tag_set(self, names):
        assert matches_tags(make_tags(*names), [])


class TestCountTagMatches:
    def test_counts_each_matching_tag(self):
        tags = make_tags("design", "color", "ui")
        assert count_tag_matches(tags, ["design", "color"]) == 2

    def test_zero_without_priority_tags(self):
        assert count_tag_matches(make_tags("design"), []) == 0


class TestFindRelevantTags:
    def test_tag_name_contained_in_query(self):
        tags = make_tags("travel", "design", "colors")
        result = find_relevant_tags("Planning a TRAVEL app", tags)
        assert [t.name for t in result] == ["travel"]

    def test_query_contained_in_tag_name(self):
        tags = make_tags("colors", "palette")
        assert [t.name for t in find_relevant_tags("color", tags)] == ["colors"]

    def test_unrelated_tags_are_dropped(self):
        assert find_relevant_tags("travel", make_tags("ui", "theme")) == []

    def test_keeps_input_order_and_caps_at_limit(self):
        tags = make_tags("a", "b", "c", "d", "e", "f", "g")
        result = find_relevant_tags("a b c d e f g", tags, limit=5)
        assert [t.name for t in result] == ["a", "b", "c", "d", "e"]

    def test_blank_query_relates_to_nothing(self):
        assert find_relevant_tags("  ", make_tags("travel")) == []
