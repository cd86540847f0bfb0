"""Inbox view: who the caller has talked to, and who they could talk to.

History partners come first, newest conversation first. Contacts the caller
is allowed to message but has no history with follow, alphabetically. A
partner never appears twice.
"""
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, List, Mapping, Optional

from sqlalchemy import or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from app.core.enums import MessageChannel
from app.core.policy import contactable_roles
from app.core.response_builders import build_user_snapshot
from app.core.security import Principal
from app.models.message import Message
from app.models.user import User
from app.schemas.message import ConversationOut, LastMessage


@dataclass
class ConversationEntry:
    partner: object
    last_message_content: Optional[str] = None
    last_message_at: Optional[datetime] = None


def other_participant(actor_id: int, message) -> int:
    return message.receiver_id if message.sender_id == actor_id else message.sender_id


def merge_conversations(
    actor_id: int,
    messages: Iterable,
    partners: Mapping[int, object],
    eligible: Iterable,
) -> List[ConversationEntry]:
    newest_first = sorted(messages, key=lambda m: (m.created_at, m.id), reverse=True)

    latest = {}
    for message in newest_first:
        other_id = other_participant(actor_id, message)
        if other_id == actor_id or other_id in latest or other_id not in partners:
            continue
        latest[other_id] = message

    entries = [
        ConversationEntry(partners[other_id], m.content, m.created_at)
        for other_id, m in latest.items()
    ]

    untouched = [u for u in eligible if u.id != actor_id and u.id not in latest]
    untouched.sort(key=lambda u: (u.name, u.id))
    entries.extend(ConversationEntry(u) for u in untouched)
    return entries


async def list_conversations(db: AsyncSession, principal: Principal) -> List[ConversationOut]:
    res = await db.execute(
        select(Message)
        .where(
            Message.group_id.is_(None),
            Message.channel == MessageChannel.NORMAL,
            or_(Message.sender_id == principal.id, Message.receiver_id == principal.id),
        )
        .order_by(Message.created_at.desc(), Message.id.desc())
    )
    messages = res.unique().scalars().all()

    partners = {}
    for m in messages:
        other = m.receiver if m.sender_id == principal.id else m.sender
        partners[other.id] = other

    roles = contactable_roles(principal.role)
    eligible = []
    if roles:
        res = await db.execute(
            select(User).where(
                User.is_active.is_(True),
                User.id != principal.id,
                User.role.in_(roles),
            )
        )
        eligible = res.scalars().all()

    return [
        ConversationOut(
            user=build_user_snapshot(entry.partner),
            last_message=(
                LastMessage(content=entry.last_message_content, created_at=entry.last_message_at)
                if entry.last_message_at is not None else None
            ),
        )
        for entry in merge_conversations(principal.id, messages, partners, eligible)
    ]
