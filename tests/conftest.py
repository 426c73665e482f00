"""Pytest fixtures for unit and integration tests."""
import os
from typing import AsyncGenerator, Optional

# Settings are read once at import; point the app at SQLite before that happens
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ["SCHEDULER_ENABLED"] = "false"
os.environ["HMAC_SECRET"] = ""
os.environ["ADMIN_EMAILS"] = "director@example.com"

import pytest_asyncio  # noqa: E402
from httpx import AsyncClient, ASGITransport  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from daycare.crud import crud_child  # noqa: E402
from daycare.database import enable_sqlite_savepoints, get_db  # noqa: E402
from daycare.main import app  # noqa: E402
from daycare.models import Child, ChildOwner, User, UserRole  # noqa: E402
from daycare.models.base import Base  # noqa: E402

# Use in-memory SQLite for tests (aiomysql requires MariaDB)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest_asyncio.fixture
async def test_engine():
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_sqlite_savepoints(engine)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def db(test_engine) -> AsyncGenerator[AsyncSession, None]:
    TestSession = async_sessionmaker(
        bind=test_engine, class_=AsyncSession, expire_on_commit=False
    )
    async with TestSession() as session:
        yield session
        await session.rollback()


@pytest_asyncio.fixture
async def client(db) -> AsyncGenerator[AsyncClient, None]:
    """HTTP test client with DB override."""
    app.dependency_overrides[get_db] = lambda: db
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as ac:
        yield ac
    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Data factories
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture
async def make_user(db):
    async def _make(email: str, role: UserRole = UserRole.parent) -> User:
        user = User(name=email.split("@")[0], email=email, role=role, child_ids=[])
        db.add(user)
        await db.flush()
        return user

    return _make


@pytest_asyncio.fixture
async def make_child(db):
    async def _make(
        name: str,
        *,
        external_id: Optional[str] = None,
        owners: tuple[int, ...] = (),
        legacy_parent_id: Optional[int] = None,
        legacy_owner_id: Optional[int] = None,
    ) -> Child:
        child = Child(
            name=name,
            external_id=external_id,
            legacy_parent_id=legacy_parent_id,
            legacy_owner_id=legacy_owner_id,
        )
        db.add(child)
        await db.flush()
        for user_id in owners:
            db.add(ChildOwner(child_id=child.id, user_id=user_id))
        await db.flush()
        return await crud_child.get(db, child.id)

    return _make
