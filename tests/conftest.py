"""
Pytest fixtures for test database, client, and authentication.

Each test gets a fresh schema, in-memory SQLite unless TEST_DATABASE_URL is
set; the API runs against it through the get_db override.
"""

import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("JWT_SECRET", "test-access-secret-with-enough-length-for-hs256")
os.environ.setdefault("JWT_REFRESH_SECRET", "test-refresh-secret-with-enough-length-for-hs256")
os.environ.setdefault("BCRYPT_ROUNDS", "4")

from datetime import datetime, timezone, timedelta
from typing import AsyncGenerator

import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import NullPool, StaticPool

from eventaro.main import app
from eventaro.db.base import Base
from eventaro.db.session import get_db
from eventaro.core.security import create_access_token, hash_password
from eventaro.models.user import User, UserRole
from eventaro.models.event import Event, EventStatus
from eventaro.models.reservation import Reservation, ReservationStatus

# Point at a PostgreSQL test database to exercise row locking for real
TEST_DATABASE_URL = os.getenv("TEST_DATABASE_URL", "sqlite+aiosqlite://")
TEST_PASSWORD = "testpassword123"


@pytest_asyncio.fixture(scope="function")
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Create tables, yield session, then drop tables for isolation."""
    if TEST_DATABASE_URL.startswith("sqlite"):
        engine = create_async_engine(
            TEST_DATABASE_URL,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    else:
        engine = create_async_engine(TEST_DATABASE_URL, poolclass=NullPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client that overrides the DB dependency with the test session."""

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


async def _create_user(db: AsyncSession, full_name: str, email: str, role: UserRole) -> User:
    user = User(
        full_name=full_name,
        email=email,
        hashed_password=hash_password(TEST_PASSWORD),
        role=role.value,
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


def _headers_for(user: User) -> dict:
    token = create_access_token({"sub": str(user.id), "email": user.email, "role": user.role})
    return {"Authorization": f"Bearer {token}"}


@pytest_asyncio.fixture
async def admin_user(db_session: AsyncSession) -> User:
    return await _create_user(db_session, "Ada Admin", "admin@example.com", UserRole.ADMIN)


@pytest_asyncio.fixture
async def test_user(db_session: AsyncSession) -> User:
    """A regular participant."""
    return await _create_user(db_session, "Test User", "test@example.com", UserRole.USER)


@pytest_asyncio.fixture
async def other_user(db_session: AsyncSession) -> User:
    return await _create_user(db_session, "Other User", "other@example.com", UserRole.USER)


@pytest_asyncio.fixture
async def admin_headers(admin_user: User) -> dict:
    return _headers_for(admin_user)


@pytest_asyncio.fixture
async def auth_headers(test_user: User) -> dict:
    """Authorization headers with the participant's Bearer token."""
    return _headers_for(test_user)


@pytest_asyncio.fixture
async def other_headers(other_user: User) -> dict:
    return _headers_for(other_user)


async def _create_event(
    db: AsyncSession,
    title: str,
    status: EventStatus,
    max_capacity: int = 100,
    starts_in: timedelta = timedelta(days=30),
) -> Event:
    event = Event(
        title=title,
        description=f"{title} description",
        date_time=datetime.now(timezone.utc) + starts_in,
        location="Test Venue",
        max_capacity=max_capacity,
        status=status.value,
    )
    db.add(event)
    await db.commit()
    await db.refresh(event)
    return event


@pytest_asyncio.fixture
async def published_event(db_session: AsyncSession) -> Event:
    """Published event with 100 places, 30 days out."""
    return await _create_event(db_session, "Test Concert", EventStatus.PUBLISHED)


@pytest_asyncio.fixture
async def small_event(db_session: AsyncSession) -> Event:
    """Published event with a single place."""
    return await _create_event(db_session, "Tiny Workshop", EventStatus.PUBLISHED, max_capacity=1)


@pytest_asyncio.fixture
async def draft_event(db_session: AsyncSession) -> Event:
    return await _create_event(db_session, "Draft Meetup", EventStatus.DRAFT)


@pytest_asyncio.fixture
async def imminent_event(db_session: AsyncSession) -> Event:
    """Published event starting in 24 hours, inside the cancellation lead time."""
    return await _create_event(
        db_session, "Tomorrow Talk", EventStatus.PUBLISHED, starts_in=timedelta(hours=24)
    )


@pytest_asyncio.fixture
async def make_reservation(db_session: AsyncSession):
    """Factory that inserts a reservation directly, bypassing the API checks."""

    async def _make(user: User, event: Event, status: ReservationStatus) -> Reservation:
        reservation = Reservation(user_id=user.id, event_id=event.id, status=status.value)
        db_session.add(reservation)
        await db_session.commit()
        await db_session.refresh(reservation)
        return reservation

    return _make
