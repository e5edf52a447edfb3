# ABOUTME: Pydantic models and enums shared across services and routes.
# ABOUTME: Defines Frequency and the Weather value object.

from enum import Enum

from pydantic import BaseModel, Field


class Frequency(str, Enum):
    """How often a subscriber receives weather updates."""

    HOURLY = "hourly"
    DAILY = "daily"


class Weather(BaseModel):
    """Current weather for a city. Fetched fresh, never persisted."""

    temperature: float  # degrees Celsius
    humidity: int = Field(ge=0, le=100)  # percent
    description: str
