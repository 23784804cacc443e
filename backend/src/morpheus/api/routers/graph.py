"""Knowledge graph endpoint."""

from fastapi import APIRouter, Depends

from morpheus.api.deps import get_store
from morpheus.knowledge.graph import GraphData, build_graph, graph_to_data
from morpheus.storage.base import KnowledgeStore

router = APIRouter(prefix="/api/graph", tags=["graph"])


@router.get("", response_model=GraphData)
async def get_graph(store: KnowledgeStore = Depends(get_store)) -> GraphData:
    """Return every note and link as nodes and every connection as an edge."""
    return graph_to_data(build_graph(store))
