# ABOUTME: Exception hierarchy for subscription lifecycle, storage and upstream failures.
# ABOUTME: Routes map these to HTTP statuses; the weather job logs them per subscriber.


class WeatherNotifyError(Exception):
    """Base class for all application errors."""


class SubscriptionValidationError(WeatherNotifyError, ValueError):
    """Subscription input is malformed (e.g. unknown frequency)."""


class AlreadyExistsError(WeatherNotifyError):
    """A subscription for this email already exists."""

    def __init__(self, email: str) -> None:
        super().__init__(f"Email {email} is already subscribed")
        self.email = email


class NotFoundError(WeatherNotifyError):
    """No subscription matches the given token."""


class AlreadyConfirmedError(WeatherNotifyError):
    """The subscription behind a confirm token is already confirmed."""


class StorageError(WeatherNotifyError):
    """The repository failed to read or write subscriptions."""


class UpdateFailedError(StorageError):
    """Persisting a change to an existing subscription failed."""


class UpstreamUnavailableError(WeatherNotifyError):
    """The weather provider or mail transport could not be reached."""


class CityNotFoundError(WeatherNotifyError):
    """The weather provider has no location matching the city."""

    def __init__(self, city: str) -> None:
        super().__init__(f"City not found: {city}")
        self.city = city
