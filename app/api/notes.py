from typing import List, Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from app.db.session import get_db
from app.core.security import get_current_user
from app.core.rate_limit import check_rate_limit
from app.schemas.note import NoteCreate, NoteOut, NoteSummaryOut, NoteUpdate
from app.services import notes

router = APIRouter(prefix="/notes", tags=["notes"])


@router.get("/", response_model=List[NoteOut])
async def list_notes(db: AsyncSession = Depends(get_db), current_user=Depends(get_current_user)):
    return await notes.list_own_notes(db, current_user)


@router.post("/", response_model=NoteOut, status_code=status.HTTP_201_CREATED)
async def create_note(
    payload: NoteCreate,
    db: AsyncSession = Depends(get_db),
    current_user=Depends(get_current_user)
):
    await check_rate_limit(current_user.id)
    return await notes.create_note(db, current_user, payload)


@router.get("/summary", response_model=List[NoteSummaryOut])
async def notes_summary(db: AsyncSession = Depends(get_db), current_user=Depends(get_current_user)):
    return await notes.notes_summary(db, current_user)


@router.get("/user/{user_id}", response_model=List[NoteOut])
async def notes_about_user(
    user_id: int,
    agent_id: Optional[int] = Query(None),
    db: AsyncSession = Depends(get_db),
    current_user=Depends(get_current_user)
):
    return await notes.notes_about_user(db, current_user, user_id, agent_id)


@router.put("/{note_id}", response_model=NoteOut)
async def update_note(
    note_id: int,
    payload: NoteUpdate,
    db: AsyncSession = Depends(get_db),
    current_user=Depends(get_current_user)
):
    await check_rate_limit(current_user.id)
    return await notes.update_note(db, current_user, note_id, payload)


@router.delete("/{note_id}")
async def delete_note(
    note_id: int,
    db: AsyncSession = Depends(get_db),
    current_user=Depends(get_current_user)
):
    await check_rate_limit(current_user.id)
    await notes.delete_note(db, current_user, note_id)
    return {"deleted": True}
