"""Admin sessions, kept in Redis so every instance sees the same logins.

A session id is an opaque random token mapped to the admin identity and the
login time. Redis expires the key after ``ADMIN_SESSION_TTL``; reads also
compare the stored login time against the clock so a key that outlived its
TTL (clock skew, restored snapshot) is still refused.
"""
import json
import logging
import secrets
import time
from dataclasses import asdict, dataclass
from typing import Callable, Optional

from app.core.config import settings
from app.core.enums import UserRole
from app.core.redis import get_redis

logger = logging.getLogger(__name__)

KEY_PREFIX = "admin_session:"


@dataclass
class AdminSessionData:
    id: int
    username: str
    role: str
    login_time: float


class AdminSessionStore:

    def __init__(self, ttl_seconds: Optional[int] = None, clock: Callable[[], float] = time.time):
        self.ttl_seconds = ttl_seconds or settings.ADMIN_SESSION_TTL
        self.clock = clock

    @staticmethod
    def _key(session_id: str) -> str:
        return f"{KEY_PREFIX}{session_id}"

    async def create(self, admin_id: int, username: str) -> str:
        session_id = secrets.token_urlsafe(32)
        data = AdminSessionData(
            id=int(admin_id),
            username=username,
            role=str(UserRole.ADMIN),
            login_time=self.clock(),
        )
        await get_redis().set(self._key(session_id), json.dumps(asdict(data)), ex=self.ttl_seconds)
        logger.info(f"Admin session opened for {username}")
        return session_id

    async def get(self, session_id: Optional[str]) -> Optional[AdminSessionData]:
        if not session_id:
            return None

        raw = await get_redis().get(self._key(session_id))
        if raw is None:
            return None

        data = AdminSessionData(**json.loads(raw))
        if self.clock() - data.login_time > self.ttl_seconds:
            await self.delete(session_id)
            return None
        return data

    async def delete(self, session_id: Optional[str]) -> None:
        if session_id:
            await get_redis().delete(self._key(session_id))


admin_sessions = AdminSessionStore()
