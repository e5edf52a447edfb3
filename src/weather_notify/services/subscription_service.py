# ABOUTME: Service for managing weather update subscriptions.
# ABOUTME: Handles creation with token issuance, confirmation, unsubscription and updates.

import asyncio
import secrets

import structlog

from weather_notify.db.models import Subscription
from weather_notify.exceptions import (
    AlreadyConfirmedError,
    AlreadyExistsError,
    NotFoundError,
    StorageError,
    SubscriptionValidationError,
    UpdateFailedError,
)
from weather_notify.models import Frequency
from weather_notify.ports import Mailer, SubscriptionStore

TOKEN_BYTES = 16  # 128 bits of entropy


def generate_token() -> str:
    """Generate an unguessable token for confirmation/unsubscribe links."""
    return secrets.token_hex(TOKEN_BYTES)  # 32 chars


class SubscriptionService:
    """Service owning the subscription lifecycle.

    Unconfirmed -> Confirmed via confirm_subscription; either state is
    deleted via unsubscribe. There is no way back to Unconfirmed.
    """

    def __init__(
        self,
        repo: SubscriptionStore,
        mailer: Mailer,
        logger: structlog.BoundLogger | None = None,
    ) -> None:
        self.repo = repo
        self.mailer = mailer
        self.log = logger or structlog.get_logger()

    async def subscribe(self, email: str, city: str, frequency: str) -> Subscription:
        """Create an unconfirmed subscription and email its confirmation link.

        Args:
            email: Subscriber address, already validated by the caller.
            city: City to report weather for.
            frequency: "hourly" or "daily".

        Returns:
            The persisted subscription.

        Raises:
            SubscriptionValidationError: If frequency is not a known value.
            AlreadyExistsError: If a subscription for the email already exists.
            StorageError: If the repository fails.
        """
        try:
            frequency = Frequency(frequency).value
        except ValueError as e:
            raise SubscriptionValidationError(f"Invalid frequency: {frequency!r}") from e

        email = email.strip()

        existing = await self.repo.find_by_email(email)
        if existing:
            self.log.warning("already_subscribed", email=email)
            raise AlreadyExistsError(email)

        subscription = Subscription(
            email=email,
            city=city,
            frequency=frequency,
            confirmed=False,
            confirm_token=generate_token(),
            unsubscribe_token=generate_token(),
        )
        saved = await self.repo.create(subscription)
        self.log.info("subscription_created", email=email, city=city, id=saved.id)

        # Fire and forget: a bounced confirmation leaves the row in place.
        try:
            await asyncio.to_thread(self.mailer.send_confirmation, saved.email, saved.confirm_token)
        except Exception:
            self.log.exception("confirmation_email_failed", email=saved.email)

        return saved

    async def confirm_subscription(self, token: str) -> Subscription:
        """Confirm a subscription using its confirmation token.

        Raises:
            NotFoundError: If the token matches no subscription.
            AlreadyConfirmedError: If the subscription is already confirmed.
            UpdateFailedError: If the confirmation could not be persisted.
        """
        subscription = await self.repo.get_by_token(token)

        if not subscription:
            self.log.warning("confirm_invalid_token", token=token[:8] + "...")
            raise NotFoundError("subscription not found")

        if subscription.confirmed:
            self.log.info("already_confirmed", email=subscription.email)
            raise AlreadyConfirmedError("subscription already confirmed")

        subscription.confirmed = True
        try:
            subscription = await self.repo.update(subscription)
        except StorageError as e:
            raise UpdateFailedError(f"failed to confirm subscription: {e}") from e

        self.log.info("subscription_confirmed", email=subscription.email)
        return subscription

    async def unsubscribe(self, token: str) -> None:
        """Delete the subscription owning an unsubscribe token.

        Raises:
            NotFoundError: If the token matches no subscription.
        """
        try:
            await self.repo.unsubscribe_by_token(token)
        except NotFoundError:
            self.log.warning("unsubscribe_invalid_token", token=token[:8] + "...")
            raise

        self.log.info("subscription_deleted", token=token[:8] + "...")

    async def get_all_confirmed(self) -> list[Subscription]:
        """Get all confirmed subscriptions."""
        return await self.repo.get_all_confirmed()

    async def update(self, subscription: Subscription) -> Subscription:
        """Persist changes to an existing subscription."""
        return await self.repo.update(subscription)

    async def send_weather_update(self, email: str, body: str) -> None:
        """Send a composed weather update to a subscriber."""
        await asyncio.to_thread(self.mailer.send_weather_update, email, body)
