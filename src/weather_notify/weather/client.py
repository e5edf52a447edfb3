# ABOUTME: WeatherAPI.com client fetching current conditions for a city.
# ABOUTME: Maps upstream responses to Weather values or application errors.

import httpx
import structlog

from weather_notify.config import Settings, get_settings
from weather_notify.exceptions import CityNotFoundError, UpstreamUnavailableError
from weather_notify.models import Weather

log = structlog.get_logger()

# WeatherAPI error code for "No matching location found."
NO_MATCHING_LOCATION = 1006


class WeatherAPIClient:
    """Fetches current weather from WeatherAPI.com."""

    def __init__(
        self,
        settings: Settings | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self._transport = transport

    async def get_weather(self, city: str) -> Weather:
        """Get current weather for a city.

        Raises:
            CityNotFoundError: If WeatherAPI has no location matching the city.
            UpstreamUnavailableError: On transport errors, bad statuses or bad payloads.
        """
        if not self.settings.weather_api_key:
            raise UpstreamUnavailableError("Weather API key not configured")

        params = {"key": self.settings.weather_api_key.get_secret_value(), "q": city}

        try:
            async with httpx.AsyncClient(
                timeout=self.settings.weather_api_timeout, transport=self._transport
            ) as client:
                response = await client.get(self.settings.weather_api_url, params=params)
        except httpx.TimeoutException as e:
            log.warning("weather_api_timeout", city=city)
            raise UpstreamUnavailableError(f"weather API timed out for {city}") from e
        except httpx.HTTPError as e:
            log.error("weather_api_request_failed", city=city, error=str(e))
            raise UpstreamUnavailableError(f"weather API request failed: {e}") from e

        if response.status_code != 200:
            if self._is_unknown_location(response):
                log.info("weather_city_not_found", city=city)
                raise CityNotFoundError(city)
            log.warning("weather_api_bad_status", city=city, status=response.status_code)
            raise UpstreamUnavailableError(f"failed to get weather: HTTP {response.status_code}")

        try:
            current = response.json()["current"]
            weather = Weather(
                temperature=current["temp_c"],
                humidity=current["humidity"],
                description=current["condition"]["text"],
            )
        except (ValueError, KeyError, TypeError) as e:
            log.error("weather_api_bad_payload", city=city, error=str(e))
            raise UpstreamUnavailableError("failed to decode weather API response") from e

        log.info(
            "weather_fetched",
            city=city,
            temperature=weather.temperature,
            humidity=weather.humidity,
            description=weather.description,
        )
        return weather

    @staticmethod
    def _is_unknown_location(response: httpx.Response) -> bool:
        if response.status_code != 400:
            return False
        try:
            return response.json()["error"]["code"] == NO_MATCHING_LOCATION
        except (ValueError, KeyError, TypeError):
            return False
