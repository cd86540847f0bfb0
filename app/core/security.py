from dataclasses import dataclass
from datetime import datetime, timezone, timedelta
from typing import Optional
from jose import jwt, JWTError
from fastapi import Cookie, Depends
from fastapi.security import OAuth2PasswordBearer
from passlib.context import CryptContext
from app.core.config import settings
from app.core.enums import UserRole
from app.core.exceptions import Unauthorized
from app.core.admin_session import AdminSessionData, admin_sessions

JWT_ALGORITHM = "HS256"

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="auth/login", auto_error=False)


pwd_context = CryptContext(schemes=["argon2"], deprecated="auto")

def hash_password(password: str) -> str:
    return pwd_context.hash(password)

def verify_password(plain_password: str, hashed_password: str) -> bool:
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except Exception:
        return False


@dataclass(frozen=True)
class Principal:
    """Identity carried by a user session token.

    Role and phone are whatever they were at login. A role change or
    deactivation takes effect when the token expires or the user logs in
    again.
    """
    id: int
    role: UserRole
    phone: Optional[str] = None


def create_access_token(subject: str, role: str, phone: Optional[str] = None, expires_minutes: int | None = None) -> str:
    expires = expires_minutes or settings.ACCESS_TOKEN_EXPIRE_MINUTES
    expire_dt = datetime.now(timezone.utc) + timedelta(minutes=expires)
    to_encode = {"sub": str(subject), "role": str(role), "phone": phone, "exp": expire_dt}
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=JWT_ALGORITHM)

def decode_access_token(token: str) -> Principal:
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[JWT_ALGORITHM])
        return Principal(
            id=int(payload["sub"]),
            role=UserRole(payload["role"]),
            phone=payload.get("phone"),
        )
    except (JWTError, KeyError, TypeError, ValueError):
        raise Unauthorized("Invalid token")

async def get_current_user(token: Optional[str] = Depends(oauth2_scheme)) -> Principal:
    if not token:
        raise Unauthorized("Not authenticated")
    principal = decode_access_token(token)
    if principal.role not in (UserRole.USER, UserRole.AGENT):
        raise Unauthorized("Invalid token")
    return principal

async def require_admin(admin_session: Optional[str] = Cookie(None, alias=settings.ADMIN_SESSION_COOKIE)) -> AdminSessionData:
    session = await admin_sessions.get(admin_session)
    if session is None or session.role != str(UserRole.ADMIN):
        raise Unauthorized("Invalid or expired admin session")
    return session
