"""Knowledge query endpoints for the web UI, the platform and editor tools."""

import logging
from typing import Any, Union

from fastapi import APIRouter, Body, Depends, HTTPException, Query

from morpheus.api.deps import (
    get_context_service,
    get_search_engine,
    get_settings,
    get_tagging_service,
)
from morpheus.config import Config
from morpheus.knowledge.schemas import Tag
from morpheus.search.context import ContextService
from morpheus.search.engine import KnowledgeSearchEngine
from morpheus.search.outcome import run_search
from morpheus.search.schemas import (
    ContextRequest,
    ContextResponse,
    SearchFailure,
    SearchMetadata,
    SearchOutcome,
    SearchResponse,
    SearchSuccess,
)
from morpheus.search.validation import QueryValidationError, validate_query
from morpheus.tagging import TaggingService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/mcp", tags=["mcp"])


@router.post("/query", response_model=SearchResponse)
async def query_knowledge(
    payload: Any = Body(...),
    engine: KnowledgeSearchEngine = Depends(get_search_engine),
    tagging: TaggingService = Depends(get_tagging_service),
    settings: Config = Depends(get_settings),
) -> SearchResponse:
    """Rank notes and links against a free-text query.

    Body: ``{"query": str, "tags": [str], "limit": int}``. Notes and links
    are ranked independently and each list is cut to ``limit``.
    """
    try:
        query = validate_query(payload, default_limit=settings.search.default_limit)
    except QueryValidationError as e:
        raise HTTPException(status_code=422, detail=e.to_detail()) from e

    results = engine.search(query)
    item_tags = [tag for item in [*results.notes, *results.links] for tag in item.tags]
    suggested = await tagging.suggest_for_query(
        query.query, item_tags, limit=settings.tagging.max_suggested_tags
    )

    return SearchResponse(
        notes=results.notes,
        links=results.links,
        suggested_tags=suggested,
        metadata=SearchMetadata(
            total_notes=results.total_notes,
            total_links=results.total_links,
            used_tags=results.used_tags,
        ),
    )


@router.post("/platform/context", response_model=ContextResponse)
async def platform_context(
    request: ContextRequest,
    service: ContextService = Depends(get_context_service),
) -> ContextResponse:
    """Return a few tag-prioritized items flattened to text."""
    return service.get_context(request.query)


@router.get("/platform/tags", response_model=list[Tag])
async def platform_tags(
    query: str = Query(..., description="Text to match tag names against"),
    service: ContextService = Depends(get_context_service),
) -> list[Tag]:
    """List tags whose names relate to the query."""
    return service.get_related_tags(query)


@router.post("/ide/context", response_model=Union[SearchSuccess, SearchFailure])
async def ide_context(
    payload: Any = Body(...),
    engine: KnowledgeSearchEngine = Depends(get_search_engine),
    settings: Config = Depends(get_settings),
) -> SearchOutcome:
    """Search with the error reported in-band.

    Always answers 200 with either ``{"status": "success", "data": ...}`` or
    ``{"status": "error", "error": ...}``.
    """
    outcome = run_search(engine, payload, default_limit=settings.search.default_limit)
    if isinstance(outcome, SearchFailure):
        logger.info(f"IDE context request failed: {outcome.error}")
    return outcome
