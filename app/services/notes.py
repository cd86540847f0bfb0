"""Private notes: written by agents, shown to their author and, per agent, to the user they concern"""
import logging
from typing import List, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from app.core.audit_log import log_audit
from app.core.auth_utils import enforce
from app.core.enums import AuditAction, UserRole
from app.core.exceptions import InvalidInput, NotFound
from app.core.policy import (
    can_create_note,
    can_list_own_notes,
    can_mutate_note,
    can_view_note_summary,
    note_read_scope,
)
from app.core.response_builders import build_note_response, build_note_response_list, build_user_snapshot
from app.core.security import Principal
from app.models.note import PrivateNote
from app.schemas.note import NoteCreate, NoteOut, NoteSummaryOut, NoteUpdate
from app.services.accounts import get_user

logger = logging.getLogger(__name__)


async def get_note(db: AsyncSession, note_id: int) -> Optional[PrivateNote]:
    res = await db.execute(
        select(PrivateNote)
        .where(PrivateNote.id == note_id)
        .execution_options(populate_existing=True)
    )
    return res.unique().scalars().first()


async def list_own_notes(db: AsyncSession, principal: Principal) -> List[NoteOut]:
    enforce(can_list_own_notes(principal.role), principal.id)
    res = await db.execute(
        select(PrivateNote)
        .where(PrivateNote.author_id == principal.id)
        .order_by(PrivateNote.created_at.desc(), PrivateNote.id.desc())
    )
    return build_note_response_list(res.unique().scalars().all())


async def create_note(db: AsyncSession, principal: Principal, payload: NoteCreate) -> NoteOut:
    enforce(can_create_note(principal.role), principal.id)

    if payload.related_user_id is not None:
        related = await get_user(db, payload.related_user_id)
        if related is None:
            raise NotFound("Target user not found")
        if related.role != UserRole.USER:
            raise InvalidInput("Notes can only concern user accounts")

    note = PrivateNote(
        title=payload.title.strip(),
        content=payload.content,
        author_id=principal.id,
        related_user_id=payload.related_user_id,
        tags=payload.tags,
    )
    db.add(note)
    await db.flush()

    await log_audit(db, principal.id, AuditAction.CREATE_NOTE, {"note_id": note.id, "related_user_id": note.related_user_id})
    await db.commit()

    note = await get_note(db, note.id)
    return build_note_response(note)


async def update_note(db: AsyncSession, principal: Principal, note_id: int, payload: NoteUpdate) -> NoteOut:
    note = await get_note(db, note_id)
    enforce(can_mutate_note(principal.id, principal.role, note), principal.id)

    for field, value in payload.model_dump(exclude_unset=True, exclude_none=True).items():
        setattr(note, field, value)

    db.add(note)
    await db.flush()
    await log_audit(db, principal.id, AuditAction.UPDATE_NOTE, {"note_id": note.id})
    await db.commit()
    await db.refresh(note)

    return build_note_response(note)


async def delete_note(db: AsyncSession, principal: Principal, note_id: int) -> None:
    note = await get_note(db, note_id)
    enforce(can_mutate_note(principal.id, principal.role, note), principal.id)

    await db.delete(note)
    await log_audit(db, principal.id, AuditAction.DELETE_NOTE, {"note_id": note_id})
    await db.commit()
    logger.info(f"Agent {principal.id} deleted note {note_id}")


async def notes_about_user(
    db: AsyncSession,
    principal: Principal,
    user_id: int,
    agent_id: Optional[int] = None,
) -> List[NoteOut]:
    decision = enforce(note_read_scope(principal.id, principal.role, user_id, agent_id), principal.id)
    scope = decision.scope

    res = await db.execute(
        select(PrivateNote)
        .where(
            PrivateNote.related_user_id == scope.related_user_id,
            PrivateNote.author_id == scope.author_id,
        )
        .order_by(PrivateNote.created_at.desc(), PrivateNote.id.desc())
    )
    return build_note_response_list(res.unique().scalars().all())


async def notes_summary(db: AsyncSession, principal: Principal) -> List[NoteSummaryOut]:
    """Per authoring agent: how many notes concern the caller and when the latest changed.

    The notes themselves are fetched one agent at a time through
    ``notes_about_user``.
    """
    enforce(can_view_note_summary(principal.role), principal.id)

    res = await db.execute(select(PrivateNote).where(PrivateNote.related_user_id == principal.id))
    by_agent = {}
    for note in res.unique().scalars().all():
        entry = by_agent.setdefault(note.author_id, {"agent": note.author, "total": 0, "latest": note.updated_at})
        entry["total"] += 1
        if note.updated_at > entry["latest"]:
            entry["latest"] = note.updated_at

    summary = [
        NoteSummaryOut(agent=build_user_snapshot(e["agent"]), total_notes=e["total"], latest_note_date=e["latest"])
        for e in by_agent.values()
    ]
    summary.sort(key=lambda s: s.latest_note_date, reverse=True)
    return summary
