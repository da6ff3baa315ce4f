"""
Pytest fixtures for test database, client, and authentication.

Each test gets a fresh in-memory SQLite database; the API's DB dependency
is overridden to use the same session the fixtures write through.
"""

from typing import AsyncGenerator

import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool

from hotel_booking.main import app
from hotel_booking.db.base import Base
from hotel_booking.db.session import get_db
from hotel_booking.models import Booking, Hotel, Room, User

import factories

TEST_DATABASE_URL = "sqlite+aiosqlite://"


@pytest_asyncio.fixture(scope="function")
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Create tables, yield session, then drop the whole database."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session

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


@pytest_asyncio.fixture
async def test_user(db_session: AsyncSession) -> User:
    return await factories.create_user(db_session, email="test@example.com")


@pytest_asyncio.fixture
async def auth_headers(db_session: AsyncSession, test_user: User) -> dict:
    """Authorization headers backed by a stored session."""
    token = await factories.create_session_token(db_session, test_user)
    return {"Authorization": f"Bearer {token}"}


@pytest_asyncio.fixture
async def eligible_user(db_session: AsyncSession, test_user: User) -> User:
    """test_user with an enrollment and a paid, in-person, hotel ticket."""
    return await factories.create_eligible_user(db_session, user=test_user)


@pytest_asyncio.fixture
async def hotel(db_session: AsyncSession) -> Hotel:
    return await factories.create_hotel(db_session)


@pytest_asyncio.fixture
async def room(db_session: AsyncSession, hotel: Hotel) -> Room:
    """A room with three free places."""
    return await factories.create_room(db_session, hotel, capacity=3)


@pytest_asyncio.fixture
async def other_room(db_session: AsyncSession, hotel: Hotel) -> Room:
    return await factories.create_room(db_session, hotel, capacity=2)


@pytest_asyncio.fixture
async def full_room(db_session: AsyncSession, hotel: Hotel) -> Room:
    """A single room already taken by another guest."""
    full = await factories.create_room(db_session, hotel, capacity=1)
    guest = await factories.create_user(db_session)
    await factories.create_booking(db_session, guest, full)
    return full


@pytest_asyncio.fixture
async def user_booking(db_session: AsyncSession, eligible_user: User, room: Room) -> Booking:
    return await factories.create_booking(db_session, eligible_user, room)
