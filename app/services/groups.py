import logging
from typing import Dict, Iterable, List, Optional
from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy.orm import selectinload

from app.core.audit_log import log_audit
from app.core.auth_utils import check_not_found, enforce
from app.core.enums import AuditAction, MessageChannel, UserRole
from app.core.policy import can_manage_groups
from app.core.response_builders import build_group_response
from app.core.security import Principal
from app.models.group import Group, GroupMember
from app.models.message import Message
from app.models.user import User
from app.schemas.group import GroupCreate, GroupOut

logger = logging.getLogger(__name__)


async def get_membership(db: AsyncSession, user_id: int, group_id: int) -> Optional[GroupMember]:
    res = await db.execute(
        select(GroupMember).where(GroupMember.user_id == user_id, GroupMember.group_id == group_id)
    )
    return res.scalars().first()


async def load_group(db: AsyncSession, group_id: int) -> Optional[Group]:
    res = await db.execute(
        select(Group)
        .where(Group.id == group_id)
        .options(selectinload(Group.memberships))
        .execution_options(populate_existing=True)
    )
    return res.unique().scalars().first()


async def count_messages(db: AsyncSession, group_ids: Iterable[int]) -> Dict[int, int]:
    group_ids = list(group_ids)
    if not group_ids:
        return {}
    res = await db.execute(
        select(Message.group_id, func.count(Message.id))
        .where(Message.group_id.in_(group_ids), Message.channel == MessageChannel.NORMAL)
        .group_by(Message.group_id)
    )
    return {group_id: count for group_id, count in res.all()}


async def list_groups(db: AsyncSession, principal: Principal) -> List[GroupOut]:
    """Agents see every group, users only the groups they belong to; freshest first."""
    q = select(Group).options(selectinload(Group.memberships))
    if principal.role != UserRole.AGENT:
        member_of = select(GroupMember.group_id).where(GroupMember.user_id == principal.id)
        q = q.where(Group.id.in_(member_of))
    q = q.order_by(Group.updated_at.desc(), Group.id.desc())

    res = await db.execute(q)
    groups = res.unique().scalars().all()
    counts = await count_messages(db, [g.id for g in groups])
    return [build_group_response(g, counts.get(g.id, 0)) for g in groups]


async def _require_users(db: AsyncSession, user_ids: List[int]) -> None:
    if not user_ids:
        return
    res = await db.execute(select(User.id).where(User.id.in_(user_ids)))
    found = set(res.scalars().all())
    for user_id in user_ids:
        check_not_found(user_id in found, "User", user_id)


async def create_group(db: AsyncSession, principal: Principal, payload: GroupCreate) -> GroupOut:
    enforce(can_manage_groups(principal.role), principal.id)

    member_ids = [principal.id] + [m for m in dict.fromkeys(payload.member_ids) if m != principal.id]
    await _require_users(db, member_ids)

    group = Group(
        name=payload.name.strip(),
        description=payload.description,
        created_by=principal.id,
    )
    db.add(group)
    await db.flush()

    for user_id in member_ids:
        db.add(GroupMember(group_id=group.id, user_id=user_id))
    await db.flush()

    await log_audit(db, principal.id, AuditAction.CREATE_GROUP, {"group_id": group.id, "members": member_ids})
    await db.commit()

    logger.info(f"Agent {principal.id} created group {group.id} with {len(member_ids)} members")
    group = await load_group(db, group.id)
    return build_group_response(group)


async def add_member(db: AsyncSession, principal: Principal, group_id: int, user_id: int) -> GroupOut:
    enforce(can_manage_groups(principal.role), principal.id)

    group = await load_group(db, group_id)
    check_not_found(group, "Group", group_id)
    await _require_users(db, [user_id])

    if await get_membership(db, user_id, group_id) is None:
        db.add(GroupMember(group_id=group_id, user_id=user_id))
        await db.flush()
        await log_audit(db, principal.id, AuditAction.ADD_GROUP_MEMBER, {"group_id": group_id, "user_id": user_id})
        await db.commit()
        logger.info(f"Agent {principal.id} added user {user_id} to group {group_id}")

    group = await load_group(db, group_id)
    counts = await count_messages(db, [group_id])
    return build_group_response(group, counts.get(group_id, 0))
