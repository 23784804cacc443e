"""Tests for search results reported as success/error values."""

from unittest.mock import MagicMock

from morpheus.search.engine import KnowledgeSearchEngine
from morpheus.search.outcome import run_search
from morpheus.search.schemas import SearchFailure, SearchSuccess
from morpheus.storage.base import StorageError


def test_success_carries_ranked_lists(sample_store):
    outcome = run_search(KnowledgeSearchEngine(sample_store), {"query": "travel", "limit": 1})

    assert isinstance(outcome, SearchSuccess)
    assert outcome.status == "success"
    assert len(outcome.data.notes) == 1
    assert len(outcome.data.links) == 1


def test_validation_failure_is_an_error_value(sample_store):
    outcome = run_search(KnowledgeSearchEngine(sample_store), {"query": ""})

    assert isinstance(outcome, SearchFailure)
    assert outcome.status == "error"
    assert "query" in outcome.error


def test_storage_failure_is_an_error_value():
    store = MagicMock()
    store.get_notes.side_effect = StorageError("disk I/O error")

    outcome = run_search(KnowledgeSearchEngine(store), {"query": "travel"})

    assert outcome == SearchFailure(error="disk I/O error")


def test_default_limit_is_applied(sample_store):
    outcome = run_search(KnowledgeSearchEngine(sample_store), {"query": "blue"}, default_limit=2)

    assert len(outcome.data.notes) == 2
