# ABOUTME: Batch job sending weather updates to confirmed subscribers on each tick.
# ABOUTME: Applies hourly/daily throttling and isolates failures per subscriber.

import asyncio
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

import structlog

from weather_notify.db.models import Subscription
from weather_notify.exceptions import NotFoundError
from weather_notify.models import Frequency, Weather
from weather_notify.services.subscription_service import SubscriptionService
from weather_notify.services.weather_service import WeatherService

# Shorter than a day so scheduler jitter never pushes a daily send to the next tick.
DAILY_THROTTLE_WINDOW = timedelta(hours=23)

KNOWN_FREQUENCIES = {f.value for f in Frequency}


@dataclass
class TickResult:
    """Outcome counters for one run of the weather update job."""

    total: int = 0
    sent: int = 0
    skipped: int = 0
    failed: int = 0


def _as_utc(value: datetime) -> datetime:
    # Some backends (SQLite) hand back naive datetimes for timezone-aware columns.
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def is_due(subscription: Subscription, now: datetime) -> bool:
    """Decide whether a subscription should receive an update at ``now``.

    Hourly subscriptions are always due; the hourly tick is their throttle.
    Daily subscriptions are due when never sent or when the last send is at
    least DAILY_THROTTLE_WINDOW old.
    """
    if subscription.frequency == Frequency.HOURLY.value:
        return True
    if subscription.frequency == Frequency.DAILY.value:
        if subscription.last_sent_at is None:
            return True
        return now - _as_utc(subscription.last_sent_at) >= DAILY_THROTTLE_WINDOW
    return False


def compose_update(subscription: Subscription, weather: Weather, base_url: str) -> str:
    """Build the plain-text body of a weather update email."""
    unsubscribe_url = f"{base_url}/api/unsubscribe/{subscription.unsubscribe_token}"
    return (
        "Hello!\n\n"
        f"Weather in {subscription.city}:\n"
        f"Temperature: {weather.temperature:.1f}°C\n"
        f"Humidity: {weather.humidity}%\n"
        f"Description: {weather.description}\n\n"
        f"To unsubscribe: {unsubscribe_url}"
    )


class WeatherUpdateJob:
    """Sends due weather updates to every confirmed subscriber.

    Delivery is at-least-once: ``last_sent_at`` is written only after a
    successful send, and a failed write means the next tick sends again.
    """

    def __init__(
        self,
        subscriptions: SubscriptionService,
        weather: WeatherService,
        base_url: str,
        step_timeout: float = 30.0,
        logger: structlog.BoundLogger | None = None,
    ) -> None:
        self.subscriptions = subscriptions
        self.weather = weather
        self.base_url = base_url.rstrip("/")
        self.step_timeout = step_timeout
        self.log = logger or structlog.get_logger()

    async def run(self, now: datetime | None = None) -> TickResult:
        """Run one tick.

        Args:
            now: Reference time for throttling. Defaults to the current UTC time.

        Returns:
            Counters for the tick.

        Raises:
            StorageError: If confirmed subscriptions could not be fetched; nothing is sent.
        """
        try:
            subscriptions = await self.subscriptions.get_all_confirmed()
        except Exception:
            self.log.error("weather_job_fetch_failed", exc_info=True)
            raise

        now = now or datetime.now(UTC)
        result = TickResult(total=len(subscriptions))

        for subscription in subscriptions:
            if subscription.frequency not in KNOWN_FREQUENCIES or not is_due(subscription, now):
                result.skipped += 1
                continue

            if await self._process(subscription, now):
                result.sent += 1
            else:
                result.failed += 1

        self.log.info(
            "weather_job_tick_done",
            total=result.total,
            sent=result.sent,
            skipped=result.skipped,
            failed=result.failed,
        )
        return result

    async def _process(self, subscription: Subscription, now: datetime) -> bool:
        """Fetch, send and stamp one subscription. Returns True when the email went out."""
        log = self.log.bind(subscription_id=subscription.id, email=subscription.email)

        try:
            weather = await asyncio.wait_for(
                self.weather.get_weather(subscription.city), timeout=self.step_timeout
            )
        except Exception as e:
            log.warning("weather_fetch_failed", city=subscription.city, error=repr(e))
            return False

        body = compose_update(subscription, weather, self.base_url)
        try:
            await asyncio.wait_for(
                self.subscriptions.send_weather_update(subscription.email, body),
                timeout=self.step_timeout,
            )
        except Exception as e:
            log.warning("weather_update_send_failed", error=repr(e))
            return False

        subscription.last_sent_at = now
        try:
            await self.subscriptions.update(subscription)
        except NotFoundError:
            # Unsubscribed mid-tick; the row stays deleted.
            log.info("subscription_gone_before_stamp")
        except Exception as e:
            # Sent but not stamped: the next tick will send again.
            log.warning("last_sent_update_failed", error=repr(e))

        return True
