# ABOUTME: Routes module initialization.
# ABOUTME: Exports all route modules for FastAPI app.

from weather_notify.web.routes import api, subscribe, weather

__all__ = ["api", "subscribe", "weather"]
