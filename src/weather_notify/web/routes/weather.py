# ABOUTME: Route returning current weather for a city.
# ABOUTME: Exposes the weather service directly, without subscription state.

from typing import Annotated

from fastapi import APIRouter, HTTPException, Query

from weather_notify.exceptions import CityNotFoundError, UpstreamUnavailableError
from weather_notify.models import Weather
from weather_notify.web.dependencies import WeatherSvc
from weather_notify.web.routes.subscribe import CITY_PATTERN

router = APIRouter(prefix="/api", tags=["weather"])


@router.get("/weather", response_model=Weather)
async def get_weather(
    city: Annotated[str, Query(min_length=1, max_length=255, pattern=CITY_PATTERN)],
    service: WeatherSvc,
):
    try:
        return await service.get_weather(city)
    except CityNotFoundError as e:
        raise HTTPException(status_code=404, detail="City not found") from e
    except UpstreamUnavailableError as e:
        raise HTTPException(status_code=502, detail="Weather provider unavailable") from e
