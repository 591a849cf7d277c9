import os
import tempfile
import uuid
from datetime import date, datetime, timezone

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

# ------------------------------------------------------------------
# FORCE TESTING MODE
# Must happen BEFORE importing hostel_leave.main so the settings and the
# DB engine pick up the throwaway SQLite file.
# ------------------------------------------------------------------
_DB_DIR = tempfile.mkdtemp(prefix="hostel_leave_tests_")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{os.path.join(_DB_DIR, 'test.db')}"
os.environ["SECRET_KEY"] = "test-secret-key-with-enough-length-for-hs256"
os.environ["TESTING"] = "true"
os.environ.setdefault("LEAVE_TIMEZONE", "UTC")

from hostel_leave.main import app
from hostel_leave.api.deps import get_now
from hostel_leave.core.database import AsyncSessionLocal, drop_db, init_db
from hostel_leave.core.security import create_access_token
from hostel_leave.models.user import User, UserRole

FIXED_NOW = datetime(2026, 3, 10, 9, 30, tzinfo=timezone.utc)
TODAY = date(2026, 3, 10)


@pytest_asyncio.fixture
async def reset_db():
    await drop_db()
    await init_db()
    yield


@pytest_asyncio.fixture
async def db_session(reset_db):
    async with AsyncSessionLocal() as session:
        yield session


@pytest_asyncio.fixture
async def client(reset_db):
    """
    httpx >= 0.27 client over ASGITransport, with the clock pinned to FIXED_NOW.
    """
    app.dependency_overrides[get_now] = lambda: FIXED_NOW
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as ac:
        yield ac
    app.dependency_overrides.clear()


async def make_user(session, role: UserRole, name: str | None = None) -> User:
    uid = uuid.uuid4()
    user = User(
        id=uid,
        name=name or f"{role.value} {uid.hex[:6]}",
        email=f"{role.value.lower()}_{uid.hex[:8]}@example.com",
        password_hash="not-a-real-hash",
        role=role,
    )
    session.add(user)
    await session.commit()
    await session.refresh(user)
    return user


def auth_headers(user: User) -> dict:
    token = create_access_token(subject=str(user.id), data={"role": user.role.value.lower()})
    return {"Authorization": f"Bearer {token}"}


@pytest_asyncio.fixture
async def student(db_session):
    return await make_user(db_session, UserRole.Student, name="Asha Student")


@pytest_asyncio.fixture
async def other_student(db_session):
    return await make_user(db_session, UserRole.Student, name="Ravi Student")


@pytest_asyncio.fixture
async def admin(db_session):
    return await make_user(db_session, UserRole.Admin, name="Warden Admin")


def leave_payload(**overrides) -> dict:
    payload = {
        "leave_type": "home",
        "start_date": "2026-03-12",
        "end_date": "2026-03-14",
        "reason": "Sister's wedding",
        "destination": "Kanpur",
        "contact_during_leave": "9876543210",
        "parent_approval": True,
    }
    payload.update(overrides)
    return payload
