"""Pytest configuration for tests directory."""
import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from innermost.domain.willing_box.models import CycleRules
from innermost.domain.willing_box.services import WillingBoxService
from innermost.infra.db.base import Base
from innermost.infra.db.models import WeeklyScoreModel, WillingBoxModel  # noqa: F401

from tests.factories import (
    FakeClock,
    InMemoryWeeklyScoreRepository,
    InMemoryWillingBoxRepository,
)


def pytest_configure(config):
    """Register markers."""
    config.addinivalue_line(
        "markers", "integration: marks tests that need a real DB (deselect with '-m \"not integration\"')"
    )


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def box_repo():
    return InMemoryWillingBoxRepository()


@pytest.fixture
def score_repo():
    return InMemoryWeeklyScoreRepository()


@pytest.fixture
def rules():
    return CycleRules()


@pytest.fixture
def service(box_repo, score_repo, clock, rules):
    return WillingBoxService(box_repo, score_repo, clock, rules=rules, max_write_attempts=3)


# Test database setup
@pytest.fixture
async def db_session():
    """SQLite in-memory session with the willing box tables created."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
    )
    async with session_factory() as session:
        yield session

    await engine.dispose()
