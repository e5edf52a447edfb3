# ABOUTME: Pytest fixtures and configuration for weather_notify tests.
# ABOUTME: Provides mock settings, sample subscriptions, and an in-memory database.

from collections.abc import AsyncGenerator
from datetime import UTC, datetime

import pytest
import pytest_asyncio
from pydantic import SecretStr
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from weather_notify.config import Settings
from weather_notify.db.models import Base, Subscription
from weather_notify.models import Weather

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest.fixture
def mock_settings() -> Settings:
    """Create mock settings for testing."""
    return Settings(
        smtp_host="localhost",
        smtp_port=1025,
        smtp_user=SecretStr("test-user"),
        smtp_password=SecretStr("test-password"),
        sender_email="test@example.com",
        sender_name="Test Sender",
        weather_api_url="https://weather.example.com/v1/current.json",
        weather_api_key=SecretStr("test-weather-key"),
        weather_api_timeout=5.0,
        app_base_url="http://testserver",
        scheduler_enabled=False,
        job_step_timeout=1.0,
        log_level="DEBUG",
    )


def _make_subscription(
    *,
    id: int = 1,
    email: str = "a@x.com",
    city: str = "Kyiv",
    frequency: str = "daily",
    confirmed: bool = True,
    last_sent_at: datetime | None = None,
) -> Subscription:
    """Build an in-memory Subscription with distinct tokens per id."""
    now = datetime.now(tz=UTC)
    return Subscription(
        id=id,
        email=email,
        city=city,
        frequency=frequency,
        confirmed=confirmed,
        confirm_token=f"{id:032x}",
        unsubscribe_token=f"{id + 1000:032x}",
        created_at=now,
        updated_at=now,
        last_sent_at=last_sent_at,
    )


@pytest.fixture
def make_subscription():
    """Factory fixture building in-memory subscriptions."""
    return _make_subscription


@pytest.fixture
def sample_weather() -> Weather:
    """Create a sample Weather value."""
    return Weather(temperature=12.34, humidity=81, description="Light rain")


@pytest_asyncio.fixture
async def db_session() -> AsyncGenerator[AsyncSession]:
    """Create an in-memory SQLite session with the schema created."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with factory() as session:
        yield session

    await engine.dispose()
