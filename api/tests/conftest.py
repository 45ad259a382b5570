"""Shared test fixtures."""

import os
import tempfile

# Point the app at a throwaway SQLite file and upload dir before it is imported.
_TMP = tempfile.mkdtemp(prefix="greenfield-tests-")
os.environ.setdefault("GF_DATABASE_URL", f"sqlite+aiosqlite:///{_TMP}/test.db")
os.environ.setdefault("GF_UPLOAD_DIR", os.path.join(_TMP, "uploads"))

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from app.core.auth import create_access_token, hash_password  # noqa: E402
from app.core.database import async_session_factory, engine  # noqa: E402
from app.main import app  # noqa: E402
from app.models import Base, User, UserRole  # noqa: E402


@pytest.fixture(autouse=True)
async def _fresh_database():
    """Dispose stale pool connections and rebuild the schema before each test.

    The global engine is created at import time. When pytest-asyncio creates a new
    event loop for tests, any existing pooled connections are bound to the old loop
    and will fail with 'Future attached to a different loop'. Disposing before each
    test forces fresh connections in the current loop.
    """
    await engine.dispose()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    yield


@pytest.fixture
async def client():
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


async def _make_user(email: str, role: UserRole = UserRole.CUSTOMER, name: str = "Test Player") -> User:
    async with async_session_factory() as db:
        user = User(
            name=name,
            email=email,
            phone="01700000000",
            hashed_password=hash_password("test123"),
            role=role,
        )
        db.add(user)
        await db.commit()
        return user


@pytest.fixture
async def customer():
    return await _make_user("player@example.com")


@pytest.fixture
async def other_customer():
    return await _make_user("rival@example.com", name="Rival Player")


@pytest.fixture
async def admin_user():
    return await _make_user("admin@example.com", role=UserRole.ADMIN, name="Admin User")


def _auth_headers(user: User) -> dict:
    return {"Authorization": f"Bearer {create_access_token(str(user.id))}"}


@pytest.fixture
def customer_headers(customer):
    return _auth_headers(customer)


@pytest.fixture
def other_headers(other_customer):
    return _auth_headers(other_customer)


@pytest.fixture
def admin_headers(admin_user):
    return _auth_headers(admin_user)
