"""Shared fixtures: a throwaway SQLite database per test, users, bookings and an API client."""

import os

# Settings are read at import time
os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("DEBUG", "false")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")

from collections.abc import AsyncGenerator
from datetime import UTC, datetime, timedelta

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from app.database import Base, get_db
from app.main import app
from app.models import Booking, ProfessionalProfile, User
from tests.factories import auth_headers_for, create_booking, create_professional, create_user


@pytest_asyncio.fixture
async def engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client whose requests each get their own session on the test database."""

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


# ============ USERS ============


@pytest_asyncio.fixture
async def consumer(db) -> User:
    return await create_user(db, "ana@example.com", first_name="Ana", last_name="Ruiz")


@pytest_asyncio.fixture
async def other_consumer(db) -> User:
    return await create_user(db, "luis@example.com", first_name="Luis")


@pytest_asyncio.fixture
async def professional_user(db) -> User:
    return await create_user(db, "marco@example.com", role="professional", first_name="Marco")


@pytest_asyncio.fixture
async def professional(db, professional_user) -> ProfessionalProfile:
    return await create_professional(db, professional_user)


@pytest_asyncio.fixture
async def provider(db) -> User:
    return await create_user(db, "agency@example.com", role="provider", first_name="Agency")


@pytest_asyncio.fixture
async def managed_professional(db, provider) -> ProfessionalProfile:
    user = await create_user(db, "nina@example.com", role="professional", first_name="Nina")
    return await create_professional(db, user, provider=provider)


@pytest_asyncio.fixture
async def admin(db) -> User:
    return await create_user(db, "admin@example.com", role="admin", first_name="Admin")


@pytest_asyncio.fixture
async def booking(db, consumer, professional) -> Booking:
    return await create_booking(db, consumer, professional)


@pytest_asyncio.fixture
async def completed_booking(db, consumer, professional) -> Booking:
    now = datetime.now(UTC)
    return await create_booking(
        db,
        consumer,
        professional,
        status="completed",
        scheduled_date=now - timedelta(days=1),
        confirmed_at=now - timedelta(days=2),
        started_at=now - timedelta(days=1),
        completed_at=now - timedelta(hours=2),
    )


# ============ AUTH ============


@pytest.fixture
def consumer_headers(consumer) -> dict[str, str]:
    return auth_headers_for(consumer)


@pytest.fixture
def professional_headers(professional_user) -> dict[str, str]:
    return auth_headers_for(professional_user)


@pytest.fixture
def admin_headers(admin) -> dict[str, str]:
    return auth_headers_for(admin)
