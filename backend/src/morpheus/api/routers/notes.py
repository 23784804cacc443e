"""Notes API endpoints."""

from fastapi import APIRouter, Depends, HTTPException, status

from morpheus.api.deps import get_store, require_tags
from morpheus.knowledge.schemas import Note, NoteCreate, NoteUpdate, NoteWithTags
from morpheus.storage.base import KnowledgeStore

router = APIRouter(prefix="/api/notes", tags=["notes"])


def _with_tags(store: KnowledgeStore, note: Note) -> NoteWithTags:
    return NoteWithTags(**note.model_dump(), tags=store.get_note_tags(note.id))


@router.get("", response_model=list[NoteWithTags])
async def list_notes(store: KnowledgeStore = Depends(get_store)) -> list[NoteWithTags]:
    """List all notes, most recently updated first."""
    return [_with_tags(store, note) for note in store.get_notes()]


@router.get("/{note_id}", response_model=NoteWithTags)
async def get_note(note_id: int, store: KnowledgeStore = Depends(get_store)) -> NoteWithTags:
    """Get a single note with its tags."""
    note = store.get_note(note_id)
    if note is None:
        raise HTTPException(status_code=404, detail="Note not found")
    return _with_tags(store, note)


@router.post("", response_model=NoteWithTags, status_code=status.HTTP_201_CREATED)
async def create_note(
    data: NoteCreate, store: KnowledgeStore = Depends(get_store)
) -> NoteWithTags:
    """Create a note, attaching the given tag ids."""
    require_tags(store, data.tags)
    note = store.create_note(data.title, data.content)
    if data.tags:
        store.set_note_tags(note.id, data.tags)
    return _with_tags(store, note)


@router.put("/{note_id}", response_model=NoteWithTags)
async def update_note(
    note_id: int, data: NoteUpdate, store: KnowledgeStore = Depends(get_store)
) -> NoteWithTags:
    """Update a note.

    Omitted fields are left alone. A ``tags`` list replaces the note's tags.
    """
    if store.get_note(note_id) is None:
        raise HTTPException(status_code=404, detail="Note not found")

    changes = data.model_dump(exclude_unset=True)
    tag_ids = changes.pop("tags", None)
    changes = {key: value for key, value in changes.items() if value is not None}
    if tag_ids is not None:
        require_tags(store, tag_ids)

    note = store.update_note(note_id, **changes)
    if note is None:
        raise HTTPException(status_code=404, detail="Note not found")
    if tag_ids is not None:
        store.set_note_tags(note_id, tag_ids)
    return _with_tags(store, note)


@router.delete("/{note_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_note(note_id: int, store: KnowledgeStore = Depends(get_store)) -> None:
    """Delete a note together with its tag links and connections."""
    if not store.delete_note(note_id):
        raise HTTPException(status_code=404, detail="Note not found")
