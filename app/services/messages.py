"""Direct and group messaging under the access policy"""
import logging
from typing import Optional
from sqlalchemy import and_, or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from app.core.audit_log import log_audit
from app.core.auth_utils import enforce
from app.core.config import settings
from app.core.enums import AuditAction, MessageChannel, UserRole
from app.core.exceptions import InvalidInput, Unauthorized
from app.core.metrics import messages_sent
from app.core.policy import (
    can_access_group,
    can_read_direct_thread,
    can_read_message,
    can_send_direct,
    classify_channel,
    visible_direct_messages,
    visible_group_messages,
)
from app.core.response_builders import (
    build_direct_message_response,
    build_group_response,
    build_message_response,
    build_message_response_list,
    build_user_response,
)
from app.core.security import Principal
from app.models.base import utcnow
from app.models.group import Group
from app.models.message import Message
from app.models.user import User
from app.schemas.group import GroupThreadOut
from app.schemas.message import CurrentUser, DirectMessageOut, DirectThreadOut, MessageOut
from app.services.accounts import get_user
from app.services.groups import count_messages, get_membership, load_group

logger = logging.getLogger(__name__)


def _clean_content(content: str) -> str:
    content = (content or "").strip()
    if not content:
        raise InvalidInput("Message content is required")
    return content


async def load_sender(db: AsyncSession, principal: Principal) -> User:
    sender = await get_user(db, principal.id)
    if sender is None:
        raise Unauthorized("Account no longer exists")
    return sender


async def store_message(
    db: AsyncSession,
    sender: User,
    content: str,
    receiver: Optional[User] = None,
    group: Optional[Group] = None,
    channel: Optional[MessageChannel] = None,
) -> Message:
    """Insert one message; a normal group message also refreshes the group's freshness."""
    now = utcnow()
    message = Message(
        content=content,
        channel=channel or classify_channel(content),
        sender_id=sender.id,
        receiver_id=receiver.id if receiver is not None else None,
        group_id=group.id if group is not None else None,
        created_at=now,
        updated_at=now,
    )
    message.sender = sender
    message.receiver = receiver
    db.add(message)

    if group is not None and message.channel == MessageChannel.NORMAL:
        group.updated_at = now
        db.add(group)

    await db.flush()
    kind = "group" if group is not None else "direct"
    messages_sent.labels(kind=kind, channel=str(message.channel)).inc()
    return message


async def send_direct(db: AsyncSession, principal: Principal, recipient_id: int, content: str) -> DirectMessageOut:
    content = _clean_content(content)

    recipient = await get_user(db, recipient_id)
    enforce(can_send_direct(principal.id, principal.role, recipient), principal.id)
    sender = await load_sender(db, principal)

    message = await store_message(db, sender, content, receiver=recipient)
    await log_audit(db, principal.id, AuditAction.SEND_DIRECT_MESSAGE, {"message_id": message.id, "receiver_id": recipient.id})
    await db.commit()

    return build_direct_message_response(message, sender, recipient)


async def get_direct_thread(db: AsyncSession, principal: Principal, other_id: int) -> DirectThreadOut:
    other = await get_user(db, other_id)
    enforce(can_read_direct_thread(principal.role, other), principal.id)

    res = await db.execute(
        select(Message)
        .where(
            Message.group_id.is_(None),
            Message.channel == MessageChannel.NORMAL,
            or_(
                and_(Message.sender_id == principal.id, Message.receiver_id == other_id),
                and_(Message.sender_id == other_id, Message.receiver_id == principal.id),
            ),
        )
        .order_by(Message.created_at.desc(), Message.id.desc())
        .limit(settings.MESSAGE_PAGE_SIZE)
    )
    # newest page, returned oldest first
    messages = list(reversed(res.unique().scalars().all()))

    return DirectThreadOut(
        other_user=build_user_response(other),
        messages=build_message_response_list(visible_direct_messages(messages)),
        current_user_id=principal.id,
    )


async def send_group(db: AsyncSession, principal: Principal, group_id: int, content: str) -> MessageOut:
    content = _clean_content(content)

    membership = await get_membership(db, principal.id, group_id)
    group = await load_group(db, group_id)
    enforce(can_access_group(principal.role, membership is not None, group is not None), principal.id)
    sender = await load_sender(db, principal)

    message = await store_message(db, sender, content, group=group)
    await log_audit(db, principal.id, AuditAction.SEND_GROUP_MESSAGE, {"message_id": message.id, "group_id": group_id})
    await db.commit()

    return build_message_response(message)


async def get_group_thread(db: AsyncSession, principal: Principal, group_id: int) -> GroupThreadOut:
    membership = await get_membership(db, principal.id, group_id)
    group = await load_group(db, group_id)
    enforce(can_access_group(principal.role, membership is not None, group is not None), principal.id)

    q = (
        select(Message)
        .join(User, Message.sender_id == User.id)
        .where(Message.group_id == group_id, Message.channel == MessageChannel.NORMAL)
    )
    if principal.role != UserRole.AGENT:
        # page over what the viewer may see
        q = q.where(or_(Message.sender_id == principal.id, User.role == UserRole.AGENT))

    res = await db.execute(
        q.order_by(Message.created_at.desc(), Message.id.desc()).limit(settings.MESSAGE_PAGE_SIZE)
    )
    messages = list(reversed(res.unique().scalars().all()))
    counts = await count_messages(db, [group_id])

    return GroupThreadOut(
        group=build_group_response(group, counts.get(group_id, 0)),
        messages=build_message_response_list(visible_group_messages(principal.id, principal.role, messages)),
        current_user=CurrentUser(id=principal.id, role=principal.role),
    )


async def get_message(db: AsyncSession, principal: Principal, message_id: int) -> MessageOut:
    res = await db.execute(select(Message).where(Message.id == message_id))
    message = res.unique().scalars().first()

    is_member = False
    if message is not None and message.group_id is not None:
        is_member = await get_membership(db, principal.id, message.group_id) is not None

    enforce(can_read_message(principal.id, principal.role, message, is_member), principal.id)
    return build_message_response(message)
