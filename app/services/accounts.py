"""Registration, authentication and the user directory"""
import logging
from typing import List, Optional, Tuple
from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from app.core.audit_log import log_audit
from app.core.enums import AuditAction, UserRole
from app.core.exceptions import DuplicateAccount, InvalidCredentials
from app.core.response_builders import build_user_response
from app.core.security import Principal, create_access_token, hash_password, verify_password
from app.models.user import User
from app.schemas.auth import RegisterIn
from app.schemas.user import UserOut

logger = logging.getLogger(__name__)


async def get_user(db: AsyncSession, user_id: int) -> Optional[User]:
    res = await db.execute(select(User).where(User.id == user_id))
    return res.scalars().first()


async def register(db: AsyncSession, payload: RegisterIn) -> User:
    email = payload.email.strip().lower()
    phone = payload.phone.strip() if payload.phone and payload.phone.strip() else None

    clash = [User.email == email]
    if phone:
        clash.append(User.phone == phone)
    res = await db.execute(select(User).where(or_(*clash)))
    if res.scalars().first():
        raise DuplicateAccount()

    user = User(
        name=payload.name.strip(),
        email=email,
        phone=phone,
        password_hash=hash_password(payload.password),
        role=payload.role,
        # agents wait for admin approval
        is_active=payload.role != UserRole.AGENT,
    )
    db.add(user)
    try:
        await db.flush()
    except IntegrityError:
        await db.rollback()
        raise DuplicateAccount()

    await log_audit(db, user.id, AuditAction.REGISTER, {"email": email, "role": str(payload.role)})
    await db.commit()

    logger.info(f"Registered {user.role} account {user.id} (active={user.is_active})")
    return user


async def authenticate(db: AsyncSession, email: str, password: str) -> Tuple[User, str]:
    res = await db.execute(select(User).where(User.email == email.strip().lower()))
    user = res.scalars().first()
    if not user or not user.is_active or not verify_password(password, user.password_hash):
        raise InvalidCredentials()

    await log_audit(db, user.id, AuditAction.LOGIN, {"email": user.email})
    await db.commit()

    token = create_access_token(str(user.id), str(user.role), user.phone)
    return user, token


async def list_directory(db: AsyncSession, principal: Principal) -> List[UserOut]:
    """Active accounts the caller may contact.

    Agents see every active account with phone numbers; users see only
    active agents, without phone numbers.
    """
    q = select(User).where(User.is_active.is_(True))
    if principal.role != UserRole.AGENT:
        q = q.where(User.role == UserRole.AGENT)
    q = q.order_by(User.name.asc(), User.id.asc())

    res = await db.execute(q)
    include_phone = principal.role == UserRole.AGENT
    return [build_user_response(u, include_phone=include_phone) for u in res.scalars().all()]
