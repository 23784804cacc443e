"""Search wrapped in a success/error result instead of exceptions."""

import logging
from typing import Any

from morpheus.constants.search import DEFAULT_SEARCH_LIMIT
from morpheus.search.engine import KnowledgeSearchEngine
from morpheus.search.schemas import SearchData, SearchFailure, SearchOutcome, SearchSuccess
from morpheus.search.validation import QueryValidationError, validate_query
from morpheus.storage.base import StorageError

logger = logging.getLogger(__name__)


def run_search(
    engine: KnowledgeSearchEngine, raw: Any, default_limit: int = DEFAULT_SEARCH_LIMIT
) -> SearchOutcome:
    """Validate and run a query, reporting failure in-band.

    Returns:
        SearchSuccess with the ranked lists, or SearchFailure carrying the
        validation or storage error message.
    """
    try:
        query = validate_query(raw, default_limit=default_limit)
    except QueryValidationError as e:
        return SearchFailure(error=str(e))

    try:
        results = engine.search(query)
    except StorageError as e:
        logger.error(f"Search failed for {query.query!r}: {e}")
        return SearchFailure(error=str(e))

    return SearchSuccess(data=SearchData(notes=results.notes, links=results.links))
