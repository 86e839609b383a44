"""Shared pytest fixtures for backend tests."""
import asyncio
import os
import tempfile
from datetime import datetime, timezone
from typing import AsyncGenerator, Generator, List, Optional

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

from company_ranker.api.dependencies import get_ranking_service
from company_ranker.core.cache_store import CacheStore
from company_ranker.core.rate_limiter import RateLimiter
from company_ranker.db.database import PreferencesDatabase
from company_ranker.main import create_app
from company_ranker.models.schemas import Company
from company_ranker.services.ranking_service import RankingService


# === Test Doubles ===

class FakeClock:
    """Settable clock for the cache store."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


class FakeTornService:
    """Stands in for TornApiService and records every fetch."""

    def __init__(self, companies: Optional[List[Company]] = None):
        self.companies = companies or []
        self.error: Optional[Exception] = None
        self.calls: List[tuple] = []
        self.gate: Optional[asyncio.Event] = None
        self.closed = False

    async def fetch_companies(self, category_id: int, credential: str) -> List[Company]:
        self.calls.append((category_id, credential))
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        return list(self.companies)

    async def close(self) -> None:
        self.closed = True


# === Sample Data ===

def make_company(company_id: int, **overrides) -> Company:
    """Build a Company with sensible defaults."""
    values = {
        "id": company_id,
        "name": f"Company {company_id}",
        "company_type": 10,
        "rating": 5,
        "days_old": 100,
        "employees": 5,
        "capacity": 10,
        "daily_income": 1000,
        "weekly_income": 7000,
        "daily_customers": 10,
        "weekly_customers": 70,
    }
    values.update(overrides)
    return Company(**values)


@pytest.fixture
def company_factory():
    """Factory building Company records from overrides."""
    return make_company


@pytest.fixture
def sample_companies() -> List[Company]:
    """A small batch spanning several rating groups."""
    return [
        make_company(1, name="Alpha Gardens", rating=7, days_old=400, daily_income=2000,
                     weekly_income=10000, daily_customers=40, weekly_customers=280),
        make_company(2, name="beta Blooms", rating=7, days_old=50, daily_income=500,
                     weekly_income=12000, daily_customers=20, weekly_customers=300),
        make_company(3, name="Gamma Florist", rating=5, days_old=900, daily_income=1000,
                     weekly_income=7000, daily_customers=15, weekly_customers=100),
        make_company(4, name="Delta Petals", rating=3, days_old=20, daily_income=0,
                     weekly_income=0, daily_customers=0, weekly_customers=0, employees=0),
        make_company(5, name="Epsilon Roses", rating=10, days_old=2500, daily_income=9000,
                     weekly_income=60000, daily_customers=90, weekly_customers=600),
    ]


# === Cache Fixtures ===

@pytest.fixture
def fixed_clock() -> FakeClock:
    """Clock set to 2024-05-01 20:00 UTC, after that day's reset."""
    return FakeClock(datetime(2024, 5, 1, 20, 0, tzinfo=timezone.utc))


@pytest.fixture
def cache_store(tmp_path, fixed_clock: FakeClock) -> CacheStore:
    """Cache store writing into a temporary directory."""
    return CacheStore(cache_dir=str(tmp_path / "cache"), clock=fixed_clock)


# === Database Fixtures ===

@pytest.fixture
def temp_db_path() -> Generator[str, None, None]:
    """Create a temporary database file for isolated tests."""
    with tempfile.NamedTemporaryFile(suffix=".sqlite", delete=False) as f:
        db_path = f.name
    yield db_path
    try:
        os.unlink(db_path)
    except FileNotFoundError:
        pass


@pytest_asyncio.fixture
async def test_database(temp_db_path: str) -> AsyncGenerator[PreferencesDatabase, None]:
    """Provide an isolated preferences database."""
    db = PreferencesDatabase(db_path=temp_db_path)
    await db._ensure_initialized()
    yield db
    await db.close()


# === Service Fixtures ===

@pytest.fixture
def fake_torn(sample_companies: List[Company]) -> FakeTornService:
    """Fake Torn API returning the sample batch."""
    return FakeTornService(sample_companies)


@pytest_asyncio.fixture
async def ranking_service(
    fake_torn: FakeTornService,
    cache_store: CacheStore,
    test_database: PreferencesDatabase
) -> AsyncGenerator[RankingService, None]:
    """Ranking service wired to fakes and temporary storage."""
    service = RankingService(
        torn_service=fake_torn,
        cache_store=cache_store,
        database=test_database,
    )
    await service.initialize()
    yield service
    await service.close()


# === Application Fixtures ===

@pytest.fixture
def test_app(ranking_service: RankingService):
    """Create a test FastAPI application."""
    app = create_app()
    app.dependency_overrides[get_ranking_service] = lambda: ranking_service
    return app


@pytest_asyncio.fixture
async def async_client(test_app) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client for API testing."""
    transport = ASGITransport(app=test_app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as client:
        yield client


# === Utility Fixtures ===

@pytest.fixture
def rate_limiter() -> RateLimiter:
    """Create a fast rate limiter for testing."""
    return RateLimiter(max_requests=100, time_window=0.01)
