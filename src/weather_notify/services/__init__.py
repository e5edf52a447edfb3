# ABOUTME: Services module initialization.
# ABOUTME: Exports the subscription lifecycle, weather lookup and update job services.

from weather_notify.services.notification_job import TickResult, WeatherUpdateJob
from weather_notify.services.subscription_service import SubscriptionService, generate_token
from weather_notify.services.weather_service import WeatherService

__all__ = [
    "SubscriptionService",
    "TickResult",
    "WeatherService",
    "WeatherUpdateJob",
    "generate_token",
]
