# ABOUTME: Service exposing current weather lookups to routes and the update job.
# ABOUTME: Thin pass-through to the configured weather provider, no caching.

from weather_notify.models import Weather
from weather_notify.ports import WeatherProvider


class WeatherService:
    """Fetches current weather through a WeatherProvider."""

    def __init__(self, provider: WeatherProvider) -> None:
        self.provider = provider

    async def get_weather(self, city: str) -> Weather:
        return await self.provider.get_weather(city)
