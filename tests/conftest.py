"""Test fixtures and configuration."""

from unittest.mock import AsyncMock

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from printshop.models.base import Base
from printshop.pricing.cache import GenerationCounter, MatrixCache
from printshop.repositories.matrix import PricingMatrixRepository
from printshop.repositories.settings import ConfigStore
from printshop.schemas.matrix import PricingMatrix


@pytest_asyncio.fixture
async def db_engine():
    """In-memory SQLite shared across sessions of one test."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def mock_redis():
    """Mock Redis client backed by a dict (get/incr only)."""
    values = {}

    async def _get(key):
        return values.get(key)

    async def _incr(key):
        values[key] = str(int(values.get(key, 0)) + 1)
        return int(values[key])

    redis = AsyncMock()
    redis.get = AsyncMock(side_effect=_get)
    redis.incr = AsyncMock(side_effect=_incr)
    redis.values = values
    return redis


@pytest.fixture
def store(db_session):
    return ConfigStore(db_session)


@pytest.fixture
def matrix_cache():
    return MatrixCache()


@pytest.fixture
def matrices(store, matrix_cache):
    return PricingMatrixRepository(store, matrix_cache)


@pytest.fixture
def shared_matrices(store, matrix_cache, mock_redis):
    """Repository wired to a generation counter."""
    return PricingMatrixRepository(store, matrix_cache, GenerationCounter(mock_redis))


@pytest.fixture
def a5_matrix():
    """A5 matrix from the reference pricing scenario."""
    return PricingMatrix.model_validate(
        {
            "book_size": "A5",
            "page_costs": {"تحریر": {"70": {"bw": 380, "color": 980}}},
            "binding_costs": {"شومیز": 3000},
            "cover_cost": 8000,
            "extras_costs": {},
            "profit_margin": 0.1,
        }
    )


@pytest.fixture
def restricted_matrix():
    """Matrix exercising every kind of restriction."""
    return PricingMatrix.model_validate(
        {
            "book_size": "وزیری",
            "page_costs": {
                "تحریر": {
                    "60": {"bw": 350, "color": 950},
                    "70": {"bw": 380, "color": 0},
                    "80": {"bw": 0, "color": 0},
                },
                "گلاسه": {"100": {"bw": 600, "color": 1200}},
                "بالک": {"80": {"bw": 450, "color": 1050}},
            },
            "binding_costs": {
                "شومیز": {"200": 5000, "250": 5500, "300": 6000},
                "جلد سخت": {"250": 11000},
                "سیمی": 3000,
            },
            "cover_cost": 0,
            "extras_costs": {
                "لب گرد": {"price": 1000, "type": "per_unit"},
                "خط تا": {"price": 500, "type": "fixed"},
                "شیرینک": {"price": 1500, "type": "per_unit"},
            },
            "restrictions": {
                "forbidden_paper_types": ["بالک"],
                "forbidden_binding_types": ["جلد سخت"],
                "forbidden_print_types": {
                    "گلاسه": ["bw"],
                    "تحریر": {"60": ["color"]},
                },
                "forbidden_cover_weights": {"شومیز": ["300"]},
                "forbidden_extras": {"سیمی": ["لب گرد"]},
            },
        }
    )
