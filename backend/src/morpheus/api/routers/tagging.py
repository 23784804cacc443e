"""Auto-tagging endpoint."""

from fastapi import APIRouter, Depends

from morpheus.api.deps import get_tagging_service
from morpheus.tagging import AutoTagRequest, AutoTagResult, TaggingService

router = APIRouter(prefix="/api", tags=["tagging"])


@router.post("/auto-tag", response_model=AutoTagResult)
async def auto_tag(
    request: AutoTagRequest,
    service: TaggingService = Depends(get_tagging_service),
) -> AutoTagResult:
    """Suggest tags for a piece of content, creating any that are new.

    Returns empty lists when the LLM is unavailable.
    """
    return await service.auto_tag(request.content)
