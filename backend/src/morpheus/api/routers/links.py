"""Saved link endpoints."""

from fastapi import APIRouter, Depends, HTTPException, status

from morpheus.api.deps import get_store, require_tags
from morpheus.knowledge.schemas import Link, LinkCreate, LinkUpdate, LinkWithTags
from morpheus.storage.base import KnowledgeStore

router = APIRouter(prefix="/api/links", tags=["links"])

# url and title are NOT NULL; an explicit null leaves them unchanged
_REQUIRED_FIELDS = ("url", "title")


def _with_tags(store: KnowledgeStore, link: Link) -> LinkWithTags:
    return LinkWithTags(**link.model_dump(), tags=store.get_link_tags(link.id))


@router.get("", response_model=list[LinkWithTags])
async def list_links(store: KnowledgeStore = Depends(get_store)) -> list[LinkWithTags]:
    """List all saved links, most recently updated first."""
    return [_with_tags(store, link) for link in store.get_links()]


@router.get("/{link_id}", response_model=LinkWithTags)
async def get_link(link_id: int, store: KnowledgeStore = Depends(get_store)) -> LinkWithTags:
    """Get a single link with its tags."""
    link = store.get_link(link_id)
    if link is None:
        raise HTTPException(status_code=404, detail="Link not found")
    return _with_tags(store, link)


@router.post("", response_model=LinkWithTags, status_code=status.HTTP_201_CREATED)
async def create_link(
    data: LinkCreate, store: KnowledgeStore = Depends(get_store)
) -> LinkWithTags:
    """Save a link. Each URL can be saved once."""
    if store.get_link_by_url(data.url) is not None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="Link with this URL already exists"
        )
    require_tags(store, data.tags)

    link = store.create_link(
        url=data.url,
        title=data.title,
        description=data.description,
        summary=data.summary,
        thumbnail_url=data.thumbnail_url,
    )
    if data.tags:
        store.set_link_tags(link.id, data.tags)
    return _with_tags(store, link)


@router.put("/{link_id}", response_model=LinkWithTags)
async def update_link(
    link_id: int, data: LinkUpdate, store: KnowledgeStore = Depends(get_store)
) -> LinkWithTags:
    """Update a link; a ``tags`` list replaces the link's tags."""
    if store.get_link(link_id) is None:
        raise HTTPException(status_code=404, detail="Link not found")

    changes = data.model_dump(exclude_unset=True)
    tag_ids = changes.pop("tags", None)
    for key in _REQUIRED_FIELDS:
        if key in changes and changes[key] is None:
            del changes[key]

    if "url" in changes:
        existing = store.get_link_by_url(changes["url"])
        if existing is not None and existing.id != link_id:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Link with this URL already exists",
            )
    if tag_ids is not None:
        require_tags(store, tag_ids)

    link = store.update_link(link_id, **changes)
    if link is None:
        raise HTTPException(status_code=404, detail="Link not found")
    if tag_ids is not None:
        store.set_link_tags(link_id, tag_ids)
    return _with_tags(store, link)


@router.delete("/{link_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_link(link_id: int, store: KnowledgeStore = Depends(get_store)) -> None:
    """Delete a link together with its tag links and connections."""
    if not store.delete_link(link_id):
        raise HTTPException(status_code=404, detail="Link not found")
