"""Shared test fixtures - uses async SQLite for isolated testing."""

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from meetcal.db.database import Base, get_db
from meetcal.models.availability import Availability
from meetcal.models.friendship import Friendship, ACCEPTED
from meetcal.models.profile import Profile

# In-memory SQLite for tests (no Docker needed)
TEST_DATABASE_URL = "sqlite+aiosqlite:///file::memory:?cache=shared&uri=true"

test_engine = create_async_engine(TEST_DATABASE_URL, echo=False)


# pysqlite emits SAVEPOINT without BEGIN; use SQLAlchemy's documented workaround
# so begin_nested() behaves like a real savepoint.
@event.listens_for(test_engine.sync_engine, "connect")
def _sqlite_connect(dbapi_conn, connection_record):
    dbapi_conn.isolation_level = None


@event.listens_for(test_engine.sync_engine, "begin")
def _sqlite_begin(conn):
    conn.exec_driver_sql("BEGIN")


test_session_factory = async_sessionmaker(
    test_engine, class_=AsyncSession, expire_on_commit=False
)


async def _override_get_db():
    async with test_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


@pytest.fixture(autouse=True)
async def setup_db():
    """Create all tables before each test, drop after."""
    # Import all models so Base.metadata knows about them
    import meetcal.models  # noqa: F401

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture
async def db():
    """Direct async DB session for service-level tests."""
    async with test_session_factory() as session:
        yield session
        await session.commit()


@pytest.fixture
async def client():
    """Async HTTP test client with test DB override."""
    from meetcal.main import app

    app.dependency_overrides[get_db] = _override_get_db
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def make_profile(db):
    """Factory: make_profile("alice") -> Profile with id "alice"."""

    async def _make(user_id: str, full_name: str | None = None) -> Profile:
        profile = Profile(
            id=user_id,
            full_name=full_name or user_id.title(),
            email=f"{user_id}@example.com",
        )
        db.add(profile)
        await db.flush()
        return profile

    return _make


@pytest.fixture
def befriend(db):
    """Factory: store an accepted edge requester -> target."""

    async def _befriend(requester: str, target: str, status: str = ACCEPTED) -> Friendship:
        edge = Friendship(user_id=requester, friend_id=target, status=status)
        db.add(edge)
        await db.flush()
        return edge

    return _befriend


@pytest.fixture
def mark(db):
    """Factory: write availability rows directly, bypassing the store adapter."""

    async def _mark(user_id: str, status: str, *days) -> None:
        for day in days:
            db.add(Availability(user_id=user_id, date=day, status=status))
        await db.flush()

    return _mark
