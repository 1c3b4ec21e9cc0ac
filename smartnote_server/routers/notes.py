# Copyright (C) 2024 SmartNote Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Note API routes. Every query is scoped to the authenticated owner."""

from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, Query, status

from smartnote_server.api.schemas import (
    NoteCreate,
    NotePageResponse,
    NoteResponse,
    NoteUpdate,
)
from smartnote_server.dependencies import get_current_user, get_note_store
from smartnote_server.models import User
from smartnote_server.stores import NoteFilter, NoteStore

router = APIRouter(prefix="/notes", tags=["notes"])


@router.post("", response_model=NoteResponse, status_code=status.HTTP_201_CREATED)
async def create_note(
    data: NoteCreate,
    user: User = Depends(get_current_user),
    notes: NoteStore = Depends(get_note_store),
) -> NoteResponse:
    """Create a new note."""
    note = await notes.create(user.id, data.title, data.content)
    return NoteResponse.model_validate(note)


@router.get("", response_model=NotePageResponse)
async def list_notes(
    title: str | None = Query(None),
    created_from: datetime | None = Query(None),
    created_to: datetime | None = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    user: User = Depends(get_current_user),
    notes: NoteStore = Depends(get_note_store),
) -> NotePageResponse:
    """List current user's notes, newest first, with optional filters."""
    result = await notes.list_notes(
        user.id,
        NoteFilter(
            title=title,
            created_from=created_from,
            created_to=created_to,
            page=page,
            limit=limit,
        ),
    )
    return NotePageResponse.model_validate(result)


@router.get("/search", response_model=list[NoteResponse])
async def search_notes(
    search: str | None = Query(None),
    user: User = Depends(get_current_user),
    notes: NoteStore = Depends(get_note_store),
) -> list[NoteResponse]:
    """Search current user's notes by title or content."""
    found = await notes.search(user.id, search)
    return [NoteResponse.model_validate(n) for n in found]


@router.get("/{note_id}", response_model=NoteResponse)
async def get_note(
    note_id: int,
    user: User = Depends(get_current_user),
    notes: NoteStore = Depends(get_note_store),
) -> NoteResponse:
    """Get note by ID with owner info."""
    note = await notes.get(user.id, note_id)
    if not note:
        raise HTTPException(status_code=404, detail="Note not found")
    return NoteResponse.model_validate(note)


@router.put("/{note_id}", response_model=NoteResponse)
async def update_note(
    note_id: int,
    data: NoteUpdate,
    user: User = Depends(get_current_user),
    notes: NoteStore = Depends(get_note_store),
) -> NoteResponse:
    """Update title and/or content."""
    note = await notes.get(user.id, note_id)
    if not note:
        raise HTTPException(status_code=404, detail="Note not found")
    note = await notes.update(note, title=data.title, content=data.content)
    return NoteResponse.model_validate(note)


@router.delete("/{note_id}")
async def delete_note(
    note_id: int,
    user: User = Depends(get_current_user),
    notes: NoteStore = Depends(get_note_store),
) -> dict:
    """Delete a note."""
    if not await notes.delete(user.id, note_id):
        raise HTTPException(status_code=404, detail="Note not found")
    return {"id": note_id, "message": "Note deleted successfully"}
