# ABOUTME: Protocols for the collaborators the subscription core depends on.
# ABOUTME: Storage, mail transport and weather provider can be swapped freely.

from typing import Protocol

from weather_notify.db.models import Subscription
from weather_notify.models import Weather


class SubscriptionStore(Protocol):
    """Persistence for subscription records."""

    async def create(self, subscription: Subscription) -> Subscription: ...

    async def find_by_email(self, email: str) -> Subscription | None: ...

    async def get_by_token(self, token: str) -> Subscription | None: ...

    async def update(self, subscription: Subscription) -> Subscription:
        """Write an existing row, raising NotFoundError if it was deleted."""
        ...

    async def unsubscribe_by_token(self, token: str) -> None:
        """Delete by unsubscribe token, raising NotFoundError when nothing matched."""
        ...

    async def get_all_confirmed(self) -> list[Subscription]: ...


class Mailer(Protocol):
    """Blocking mail transport. Callers run it off the event loop."""

    def send_confirmation(self, email: str, token: str) -> None: ...

    def send_weather_update(self, email: str, body: str) -> None: ...


class WeatherProvider(Protocol):
    """Source of current weather conditions."""

    async def get_weather(self, city: str) -> Weather: ...
