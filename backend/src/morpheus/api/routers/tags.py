"""Tag endpoints."""

from fastapi import APIRouter, Depends, HTTPException, status

from morpheus.api.deps import get_store
from morpheus.knowledge.schemas import (
    Link,
    LinkWithTags,
    Note,
    NoteWithTags,
    Tag,
    TagCreate,
    TagUpdate,
)
from morpheus.storage.base import DuplicateTagError, KnowledgeStore

router = APIRouter(prefix="/api/tags", tags=["tags"])


@router.get("", response_model=list[Tag])
async def list_tags(store: KnowledgeStore = Depends(get_store)) -> list[Tag]:
    """List all tags."""
    return store.get_tags()


@router.get("/{tag_id}", response_model=Tag)
async def get_tag(tag_id: int, store: KnowledgeStore = Depends(get_store)) -> Tag:
    tag = store.get_tag(tag_id)
    if tag is None:
        raise HTTPException(status_code=404, detail="Tag not found")
    return tag


@router.get("/{tag_id}/notes", response_model=list[NoteWithTags])
async def get_tag_notes(
    tag_id: int, store: KnowledgeStore = Depends(get_store)
) -> list[NoteWithTags]:
    """List the notes carrying a tag."""
    if store.get_tag(tag_id) is None:
        raise HTTPException(status_code=404, detail="Tag not found")
    notes: list[Note] = store.get_notes_by_tag(tag_id)
    return [NoteWithTags(**n.model_dump(), tags=store.get_note_tags(n.id)) for n in notes]


@router.get("/{tag_id}/links", response_model=list[LinkWithTags])
async def get_tag_links(
    tag_id: int, store: KnowledgeStore = Depends(get_store)
) -> list[LinkWithTags]:
    """List the links carrying a tag."""
    if store.get_tag(tag_id) is None:
        raise HTTPException(status_code=404, detail="Tag not found")
    links: list[Link] = store.get_links_by_tag(tag_id)
    return [
        LinkWithTags(**link.model_dump(), tags=store.get_link_tags(link.id)) for link in links
    ]


@router.post("", response_model=Tag, status_code=status.HTTP_201_CREATED)
async def create_tag(data: TagCreate, store: KnowledgeStore = Depends(get_store)) -> Tag:
    """Create a tag. Names are unique."""
    try:
        return store.create_tag(data.name, data.color)
    except DuplicateTagError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e


@router.put("/{tag_id}", response_model=Tag)
async def update_tag(
    tag_id: int, data: TagUpdate, store: KnowledgeStore = Depends(get_store)
) -> Tag:
    """Rename or recolor a tag."""
    changes = {
        key: value
        for key, value in data.model_dump(exclude_unset=True).items()
        if value is not None
    }
    try:
        tag = store.update_tag(tag_id, **changes)
    except DuplicateTagError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e
    if tag is None:
        raise HTTPException(status_code=404, detail="Tag not found")
    return tag


@router.delete("/{tag_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_tag(tag_id: int, store: KnowledgeStore = Depends(get_store)) -> None:
    """Delete a tag and detach it from every note and link."""
    if not store.delete_tag(tag_id):
        raise HTTPException(status_code=404, detail="Tag not found")
