"""Test fixtures — a fresh in-memory database per test.

Learn: Each test gets its own SQLite (aiosqlite) engine with a StaticPool,
so every session in the test shares one in-memory database that vanishes
when the engine is disposed. The app's get_db dependency is overridden to
hand out that session; authentication is NOT mocked — tests register and
log in through the real endpoints and send real Bearer tokens.

Settings are read at import time, so the required env vars are set here
before anything from inkwell is imported.
"""

import os
import uuid

os.environ["INKWELL_DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["INKWELL_JWT_SECRET"] = "test-secret-not-for-production"
os.environ["INKWELL_BCRYPT_ROUNDS"] = "4"

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from inkwell.auth.jwt import TokenService  # noqa: E402
from inkwell.db.engine import get_db, init_models  # noqa: E402
from inkwell.main import app  # noqa: E402
from inkwell.schemas.user import UserCreate  # noqa: E402
from inkwell.services.user_service import UserService  # noqa: E402

TEST_SECRET = os.environ["INKWELL_JWT_SECRET"]
DEFAULT_PASSWORD = "password_123"


@pytest_asyncio.fixture()
async def db_engine():
    engine = create_async_engine("sqlite+aiosqlite://", poolclass=StaticPool)
    await init_models(engine)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture()
async def db_session(db_engine):
    session = AsyncSession(bind=db_engine, expire_on_commit=False)
    try:
        yield session
    finally:
        await session.close()


@pytest_asyncio.fixture()
async def client(db_session):
    """HTTP client with the app's get_db pointed at the test database."""

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def tokens() -> TokenService:
    return TokenService(secret=TEST_SECRET)


@pytest_asyncio.fixture()
async def user_factory(db_session):
    """Create users directly through the service layer."""
    svc = UserService(db_session)

    async def _make(email: str | None = None, password: str = DEFAULT_PASSWORD, **fields):
        data = UserCreate(
            email=email or f"user-{uuid.uuid4().hex[:8]}@example.com",
            fname=fields.pop("fname", "Test"),
            lname=fields.pop("lname", "User"),
            password=password,
            **fields,
        )
        return await svc.create(data)

    return _make


@pytest_asyncio.fixture()
async def register_and_login(client):
    """Register a user over HTTP, log in, and return (user, auth headers)."""

    async def _go(email: str | None = None, password: str = DEFAULT_PASSWORD):
        email = email or f"user-{uuid.uuid4().hex[:8]}@example.com"
        r = await client.post(
            "/api/v1/users",
            json={"email": email, "fname": "Test", "lname": "User", "password": password},
        )
        assert r.status_code == 201, r.text
        user = r.json()

        r = await client.post(
            "/api/v1/auth/login", json={"email": email, "password": password}
        )
        assert r.status_code == 200, r.text
        body = r.json()
        user["refresh_token"] = body["refresh_token"]
        return user, {"Authorization": f"Bearer {body['access_token']}"}

    return _go
