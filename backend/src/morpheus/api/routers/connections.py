"""Connection endpoints: weighted edges between notes and links."""

from fastapi import APIRouter, Depends, HTTPException, status

from morpheus.api.deps import get_store
from morpheus.knowledge.schemas import Connection, ConnectionCreate, ItemType
from morpheus.storage.base import KnowledgeStore

router = APIRouter(prefix="/api/connections", tags=["connections"])


def _item_exists(store: KnowledgeStore, item_type: ItemType, item_id: int) -> bool:
    if item_type == ItemType.NOTE:
        return store.get_note(item_id) is not None
    return store.get_link(item_id) is not None


@router.get("", response_model=list[Connection])
async def list_connections(store: KnowledgeStore = Depends(get_store)) -> list[Connection]:
    return store.get_connections()


@router.post("", response_model=Connection, status_code=status.HTTP_201_CREATED)
async def create_connection(
    data: ConnectionCreate, store: KnowledgeStore = Depends(get_store)
) -> Connection:
    """Connect two existing items."""
    for item_type, item_id in (
        (data.source_type, data.source_id),
        (data.target_type, data.target_id),
    ):
        if not _item_exists(store, item_type, item_id):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Unknown {item_type.value} {item_id}",
            )
    return store.create_connection(
        source_id=data.source_id,
        source_type=data.source_type,
        target_id=data.target_id,
        target_type=data.target_type,
        strength=data.strength,
    )


@router.delete("/{connection_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_connection(
    connection_id: int, store: KnowledgeStore = Depends(get_store)
) -> None:
    if not store.delete_connection(connection_id):
        raise HTTPException(status_code=404, detail="Connection not found")
