# ABOUTME: FastAPI application factory with database and scheduler lifespan.
# ABOUTME: Main entry point for the weather subscription web API.

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from weather_notify.config import configure_logging, get_settings
from weather_notify.db.session import close_db, init_db
from weather_notify.scheduler import create_scheduler
from weather_notify.web.routes import api, subscribe, weather

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None]:
    """Application lifespan context for database and scheduler setup/teardown."""
    settings = get_settings()
    configure_logging(settings)
    logger.info("app_startup")
    await init_db()

    scheduler = create_scheduler(settings) if settings.scheduler_enabled else None
    if scheduler:
        scheduler.start()

    yield

    logger.info("app_shutdown")
    if scheduler:
        scheduler.shutdown(wait=False)
    await close_db()


async def http_error_handler(_request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Render HTTP errors as {"error": message}."""
    return JSONResponse({"error": exc.detail}, status_code=exc.status_code)


async def validation_error_handler(_request: Request, exc: RequestValidationError) -> JSONResponse:
    """Reject malformed input with 400 and the first validation message."""
    errors = exc.errors()
    if errors:
        first = errors[0]
        field = ".".join(str(part) for part in first.get("loc", ()) if part not in ("body",))
        message = f"{field}: {first.get('msg', 'invalid value')}" if field else first.get("msg")
    else:
        message = "Invalid input"
    logger.debug("request_validation_failed", error=message)
    return JSONResponse({"error": message}, status_code=400)


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="Weather Notify",
        description="Subscribe to hourly or daily weather updates by email",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)

    app.include_router(api.router)
    app.include_router(subscribe.router)
    app.include_router(weather.router)

    return app


# Application instance for uvicorn
app = create_app()
