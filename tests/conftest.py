"""Shared fixtures: in-memory SQLite database, sessions and an API client."""
import os
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

# Use in-memory SQLite for testing
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

# Set test database URL before importing the app
os.environ["DB_URL"] = TEST_DATABASE_URL

from scholarmatch.models import Base  # noqa: E402
from scholarmatch.schemas import StudentProfile  # noqa: E402


@pytest_asyncio.fixture
async def test_engine():
    """Create a fresh database engine for each test."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture(name="session")
async def session_fixture(test_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create a new session for each test."""
    session_maker = async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)

    async with session_maker() as session:
        yield session


@pytest_asyncio.fixture(name="client")
async def client_fixture(session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client bound to the app with the test session injected."""
    from scholarmatch.api import app
    from scholarmatch.db import get_session

    async def get_session_override() -> AsyncGenerator[AsyncSession, None]:
        yield session

    app.dependency_overrides[get_session] = get_session_override

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://localhost") as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
def strong_profile() -> StudentProfile:
    """A well-rounded student who clears most common requirements."""
    return StudentProfile(
        gpa=3.8,
        sat_score=1400,
        act_score=31,
        class_rank=5,
        class_size=100,
        gender="Female",
        ethnicity=["Hispanic"],
        state="CA",
        city="Los Angeles",
        citizenship="US Citizen",
        intended_major="Biology",
        field_of_study="Life Sciences",
        career_goals="Become a research physician working in public health",
        volunteer_hours=120,
        extracurriculars=[{"name": "Science Olympiad"}, "Robotics Club"],
        leadership_roles=[{"title": "Club President"}],
        work_experience=[{"months": 8}],
        awards_honors=["National Merit Finalist"],
        financial_need="HIGH",
        efc_range="0-5000",
        pell_grant_eligible=True,
        first_generation=True,
        strength_score=60,
    )
