# ABOUTME: FastAPI dependency injection for database sessions and services.
# ABOUTME: Provides reusable dependencies for route handlers.

from collections.abc import AsyncGenerator
from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from weather_notify.config import get_settings
from weather_notify.db.repository import SubscriptionRepository
from weather_notify.db.session import get_db_session
from weather_notify.email.sender import EmailSender
from weather_notify.services.subscription_service import SubscriptionService
from weather_notify.services.weather_service import WeatherService
from weather_notify.weather.client import WeatherAPIClient

# Type aliases for common dependencies
DbSession = Annotated[AsyncSession, Depends(get_db_session)]


async def get_subscription_repository(
    session: DbSession,
) -> AsyncGenerator[SubscriptionRepository]:
    """Get subscription repository with session."""
    yield SubscriptionRepository(session)


SubscriptionRepo = Annotated[SubscriptionRepository, Depends(get_subscription_repository)]


def get_email_sender() -> EmailSender:
    """Get email sender configured from settings."""
    return EmailSender(get_settings())


def get_subscription_service(
    repo: SubscriptionRepo,
    sender: Annotated[EmailSender, Depends(get_email_sender)],
) -> SubscriptionService:
    """Get subscription service bound to the request's repository."""
    return SubscriptionService(repo, sender)


SubscriptionSvc = Annotated[SubscriptionService, Depends(get_subscription_service)]


def get_weather_service() -> WeatherService:
    """Get weather service backed by the WeatherAPI client."""
    return WeatherService(WeatherAPIClient(get_settings()))


WeatherSvc = Annotated[WeatherService, Depends(get_weather_service)]
