"""Back office: admin login, dashboard counts and account moderation"""
import logging
from typing import Optional, Tuple
from sqlalchemy import delete, func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from app.core.admin_session import AdminSessionData, admin_sessions
from app.core.audit_log import log_audit
from app.core.auth_utils import check_not_found
from app.core.config import settings
from app.core.enums import ActorType, AuditAction, UserRole
from app.core.exceptions import InvalidCredentials, InvalidInput
from app.core.response_builders import build_user_response
from app.core.security import hash_password, verify_password
from app.models.admin import Admin
from app.models.group import Group
from app.models.message import Message
from app.models.note import PrivateNote
from app.models.user import User
from app.schemas.admin import AdminUserList, DashboardStats, DeletedUserOut, Pagination
from app.schemas.user import UserOut

logger = logging.getLogger(__name__)


async def admin_login(db: AsyncSession, username: str, password: str) -> Tuple[Admin, str]:
    res = await db.execute(select(Admin).where(Admin.username == username))
    admin = res.scalars().first()
    if not admin or not verify_password(password, admin.password_hash):
        raise InvalidCredentials()

    session_id = await admin_sessions.create(admin.id, admin.username)
    await log_audit(db, admin.id, AuditAction.ADMIN_LOGIN, {"username": username}, actor_type=ActorType.ADMIN)
    await db.commit()
    return admin, session_id


async def dashboard_stats(db: AsyncSession) -> DashboardStats:
    """Live counts straight from the store; nothing here is cached."""
    def count(model, *where):
        return select(func.count()).select_from(model).where(*where).scalar_subquery()

    res = await db.execute(select(
        count(User, User.role == UserRole.USER).label("total_users"),
        count(User, User.role == UserRole.AGENT).label("total_agents"),
        count(User, User.role == UserRole.AGENT, User.is_active.is_(False)).label("pending_agents"),
        count(Group).label("total_groups"),
        count(Message).label("total_messages"),
        count(PrivateNote).label("total_notes"),
    ))
    return DashboardStats(**res.one()._asdict())


async def list_users(db: AsyncSession, page: int = 1, limit: int = 20, role: Optional[UserRole] = None) -> AdminUserList:
    q = select(User)
    if role is not None:
        q = q.where(User.role == role)
    q = q.order_by(User.created_at.desc(), User.id.desc()).limit(limit).offset((page - 1) * limit)

    res = await db.execute(q)
    users = res.scalars().all()
    return AdminUserList(
        users=[build_user_response(u) for u in users],
        pagination=Pagination(page=page, limit=limit, has_more=len(users) == limit),
    )


async def set_user_status(db: AsyncSession, admin: AdminSessionData, user_id: int, is_active: bool) -> UserOut:
    res = await db.execute(select(User).where(User.id == user_id))
    user = res.scalars().first()
    check_not_found(user, "User", user_id)

    user.is_active = is_active
    db.add(user)
    await db.flush()
    await log_audit(db, admin.id, AuditAction.ADMIN_UPDATE_USER, {"user_id": user_id, "is_active": is_active}, actor_type=ActorType.ADMIN)
    await db.commit()
    await db.refresh(user)

    logger.info(f"Admin {admin.username} set user {user_id} active={is_active}")
    return build_user_response(user)


async def delete_user(db: AsyncSession, admin: AdminSessionData, user_id: int) -> DeletedUserOut:
    """Delete an account in one statement.

    Messages, notes and memberships go with it through ON DELETE CASCADE;
    groups the user created keep existing with no creator.
    """
    res = await db.execute(select(User).where(User.id == user_id))
    user = res.scalars().first()
    check_not_found(user, "User", user_id)
    deleted = DeletedUserOut(id=user.id, name=user.name, email=user.email)

    await db.execute(delete(User).where(User.id == user_id))
    await log_audit(db, admin.id, AuditAction.ADMIN_DELETE_USER, {"user_id": user_id}, actor_type=ActorType.ADMIN)
    await db.commit()
    db.expunge_all()

    logger.info(f"Admin {admin.username} deleted user {user_id}")
    return deleted


async def change_password(db: AsyncSession, admin: AdminSessionData, current_password: str, new_password: str) -> None:
    if len(new_password) < settings.MIN_ADMIN_PASSWORD_LENGTH:
        raise InvalidInput(f"New password must be at least {settings.MIN_ADMIN_PASSWORD_LENGTH} characters long")

    res = await db.execute(select(Admin).where(Admin.id == admin.id))
    account = res.scalars().first()
    check_not_found(account, "Admin")

    if not verify_password(current_password, account.password_hash):
        raise InvalidInput("Current password is incorrect")

    account.password_hash = hash_password(new_password)
    db.add(account)
    await db.flush()
    await log_audit(db, admin.id, AuditAction.ADMIN_CHANGE_PASSWORD, {"admin_id": admin.id}, actor_type=ActorType.ADMIN)
    await db.commit()
    logger.info(f"Admin {admin.username} changed password")
