"""FastAPI dependency injection functions."""

from functools import lru_cache

from fastapi import Depends, HTTPException, status

from morpheus.config import Config, load_settings
from morpheus.llm.client import LLMClient
from morpheus.search.context import ContextService
from morpheus.search.engine import KnowledgeSearchEngine
from morpheus.storage.base import KnowledgeStore
from morpheus.storage.factory import create_store
from morpheus.tagging import TaggingService


@lru_cache
def get_settings() -> Config:
    """Get cached application settings."""
    return load_settings()


_store_instance: KnowledgeStore | None = None


def get_store() -> KnowledgeStore:
    """Get the process-wide knowledge store.

    The backend is chosen once, on first use, from ``[storage] backend``.
    """
    global _store_instance
    if _store_instance is None:
        settings = get_settings()
        if settings.storage.backend == "sqlite":
            settings.data_dir.mkdir(parents=True, exist_ok=True)
        _store_instance = create_store(settings)
    return _store_instance


def _reset_store_instance() -> None:
    """Reset the store instance (for testing only)."""
    global _store_instance
    if _store_instance is not None:
        _store_instance.close()
        _store_instance = None


def get_search_engine(store: KnowledgeStore = Depends(get_store)) -> KnowledgeSearchEngine:
    """Get a search engine reading from the active store."""
    return KnowledgeSearchEngine(store)


def get_context_service(
    store: KnowledgeStore = Depends(get_store),
    engine: KnowledgeSearchEngine = Depends(get_search_engine),
    settings: Config = Depends(get_settings),
) -> ContextService:
    """Get the context retrieval service configured from ``[context]``."""
    return ContextService(
        store,
        engine=engine,
        tag_limit=settings.context.tag_limit,
        search_limit=settings.context.search_limit,
        max_results=settings.context.max_results,
    )


_llm_instance: LLMClient | None = None


def get_llm(settings: Config = Depends(get_settings)) -> LLMClient:
    """Get LLM client instance."""
    global _llm_instance
    if _llm_instance is None:
        _llm_instance = LLMClient(
            provider=settings.llm_provider,
            model=settings.llm_model,
            api_key=settings.llm_api_key,
            endpoint=settings.llm_endpoint,
            log_path=settings.llm_log_path,
            default_temperature=settings.llm.default_temperature,
            max_tokens=settings.llm.max_tokens,
        )
    return _llm_instance


def _reset_llm_instance() -> None:
    """Reset LLM client instance (for testing only)."""
    global _llm_instance
    _llm_instance = None


def get_tagging_service(
    store: KnowledgeStore = Depends(get_store),
    llm: LLMClient = Depends(get_llm),
    settings: Config = Depends(get_settings),
) -> TaggingService:
    """Get the tagging service; LLM query suggestions follow ``[tagging]``."""
    return TaggingService(
        store,
        llm=llm,
        use_llm_for_queries=settings.tagging.llm_suggestions,
        json_temperature=settings.llm.json_temperature,
    )


def require_tags(store: KnowledgeStore, tag_ids: list[int]) -> None:
    """Reject tag ids that do not exist before any write happens.

    Raises:
        HTTPException: 400 naming the unknown ids.
    """
    unknown = [tag_id for tag_id in dict.fromkeys(tag_ids) if store.get_tag(tag_id) is None]
    if unknown:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Unknown tag id(s): {', '.join(str(i) for i in unknown)}",
        )
