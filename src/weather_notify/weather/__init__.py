# ABOUTME: Weather provider module.
# ABOUTME: Fetches current conditions from the upstream weather API.

from weather_notify.weather.client import WeatherAPIClient

__all__ = ["WeatherAPIClient"]
