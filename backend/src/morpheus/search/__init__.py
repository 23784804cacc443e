"""Relevance search and ranking over notes and links."""

from morpheus.search.context import ContextService
from morpheus.search.engine import KnowledgeSearchEngine, SearchResults
from morpheus.search.outcome import run_search
from morpheus.search.prioritizer import prioritize
from morpheus.search.scoring import html_to_text, score_relevance, tokenize
from morpheus.search.tags import count_tag_matches, find_relevant_tags, matches_tags
from morpheus.search.validation import (
    FieldError,
    QueryValidationError,
    SearchQuery,
    validate_query,
)

__all__ = [
    "ContextService",
    "FieldError",
    "KnowledgeSearchEngine",
    "QueryValidationError",
    "SearchQuery",
    "SearchResults",
    "count_tag_matches",
    "find_relevant_tags",
    "html_to_text",
    "matches_tags",
    "prioritize",
    "run_search",
    "score_relevance",
    "tokenize",
    "validate_query",
]
