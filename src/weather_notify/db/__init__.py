# ABOUTME: Database module initialization.
# ABOUTME: Exports core database components for the persistence layer.

from weather_notify.db.models import Base, Subscription
from weather_notify.db.repository import SubscriptionRepository
from weather_notify.db.session import get_session, init_db

__all__ = [
    "Base",
    "Subscription",
    "SubscriptionRepository",
    "get_session",
    "init_db",
]
