import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./test_messaging.db")
os.environ.setdefault("REDIS_URL", "redis://localhost:6379/15")
os.environ.setdefault("SECRET_KEY", "test-secret-key")

import itertools
import pytest
from fakeredis import FakeServer
from fakeredis.aioredis import FakeRedis
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.pool import NullPool

from app.main import app
from app.db.session import build_engine, get_db
from app.models.base import Base
from app.models.admin import Admin
from app.models.user import User
from app.models import audit, group, message, note  # noqa: F401  (register tables)
from app.core.config import settings
from app.core.enums import UserRole
from app.core.redis import use_redis
from app.core.security import Principal, create_access_token, hash_password

ADMIN_USERNAME = "root"
ADMIN_PASSWORD = "admin-pass"


@pytest.fixture
async def engine(tmp_path):
    url = os.getenv("TEST_DATABASE_URL") or f"sqlite+aiosqlite:///{tmp_path / 'test.db'}"
    test_engine = build_engine(url, poolclass=NullPool)

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield test_engine

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await test_engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture(autouse=True)
def fake_redis():
    client = FakeRedis(server=FakeServer())
    use_redis(client)
    yield client
    use_redis(None)


@pytest.fixture
async def client(session_factory):
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def create_user_factory(db):
    counter = itertools.count(1)

    async def _create_user(name=None, role=UserRole.USER, phone=None, is_active=True, password="secret123", email=None):
        n = next(counter)
        user = User(
            name=name or f"{role.value.title()} {n}",
            email=email or f"{role.value.lower()}{n}@example.com",
            phone=phone,
            password_hash=hash_password(password),
            role=role,
            is_active=is_active,
        )
        db.add(user)
        await db.commit()
        await db.refresh(user)
        return user

    return _create_user


@pytest.fixture
async def user(create_user_factory):
    return await create_user_factory(name="Uma User", phone="9876543210")


@pytest.fixture
async def other_user(create_user_factory):
    return await create_user_factory(name="Omar User", phone="9123456780")


@pytest.fixture
async def agent(create_user_factory):
    return await create_user_factory(name="Alice Agent", role=UserRole.AGENT, phone="9988776655")


@pytest.fixture
async def agent_2(create_user_factory):
    return await create_user_factory(name="Bob Agent", role=UserRole.AGENT, phone="9001122334")


def _principal_for(account) -> Principal:
    return Principal(id=account.id, role=account.role, phone=account.phone)


def _auth_headers(account) -> dict:
    token = create_access_token(str(account.id), str(account.role), account.phone)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def principal_for():
    return _principal_for


@pytest.fixture
def auth_headers():
    return _auth_headers


@pytest.fixture
async def admin_account(db):
    account = Admin(username=ADMIN_USERNAME, password_hash=hash_password(ADMIN_PASSWORD))
    db.add(account)
    await db.commit()
    await db.refresh(account)
    return account


def session_cookie_header(response) -> dict:
    # the cookie is Secure, so it is replayed by hand over plain http
    session_id = response.headers["set-cookie"].split(";")[0].split("=", 1)[1]
    return {"Cookie": f"{settings.ADMIN_SESSION_COOKIE}={session_id}"}


@pytest.fixture
def admin_credentials():
    return {"username": ADMIN_USERNAME, "password": ADMIN_PASSWORD}


@pytest.fixture
async def admin_headers(client, admin_account, admin_credentials):
    response = await client.post("/admin/auth", json=admin_credentials)
    assert response.status_code == 200
    return session_cookie_header(response)


@pytest.fixture
def app_settings():
    """Return application settings"""
    return settings


def pytest_configure(config):
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests"
    )
    config.addinivalue_line(
        "markers", "auth: marks tests related to authentication"
    )
    config.addinivalue_line(
        "markers", "policy: marks tests related to the access policy"
    )
    config.addinivalue_line(
        "markers", "whatsapp: marks tests related to WhatsApp links"
    )
    config.addinivalue_line(
        "markers", "rate_limit: marks tests related to rate limiting"
    )
    config.addinivalue_line(
        "markers", "admin: marks tests related to the admin back office"
    )
    config.addinivalue_line(
        "markers", "audit: marks tests related to audit logging"
    )


@pytest.fixture(scope="session", autouse=True)
def startup():
    print("\n" + "="*70)
    print("Starting Test Suite")
    print("="*70)
    yield
    print("\n" + "="*70)
    print("Test Suite Complete")
    print("="*70)
