# ABOUTME: Main package for the weather update subscription service.
# ABOUTME: Exports settings and the core domain types.

from weather_notify.config import get_settings
from weather_notify.models import Frequency, Weather

__all__ = [
    "get_settings",
    "Frequency",
    "Weather",
]
