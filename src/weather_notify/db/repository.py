# ABOUTME: Repository for subscription database access.
# ABOUTME: Each mutation is committed as its own single-record unit of work.

from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from weather_notify.db.models import Subscription
from weather_notify.exceptions import AlreadyExistsError, NotFoundError, StorageError


class SubscriptionRepository:
    """Repository for Subscription CRUD operations."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, subscription: Subscription) -> Subscription:
        """Insert a new subscription.

        Raises:
            AlreadyExistsError: If the email (or a token) violates a unique constraint.
            StorageError: On any other database failure.
        """
        self.session.add(subscription)
        try:
            await self.session.commit()
        except IntegrityError as e:
            await self.session.rollback()
            raise AlreadyExistsError(subscription.email) from e
        except SQLAlchemyError as e:
            await self.session.rollback()
            raise StorageError(f"failed to create subscription: {e}") from e
        return subscription

    async def find_by_email(self, email: str) -> Subscription | None:
        """Get subscription by email address."""
        try:
            result = await self.session.execute(
                select(Subscription).where(Subscription.email == email)
            )
        except SQLAlchemyError as e:
            raise StorageError(f"failed to look up subscription by email: {e}") from e
        return result.scalar_one_or_none()

    async def get_by_token(self, token: str) -> Subscription | None:
        """Get subscription by confirmation token."""
        try:
            result = await self.session.execute(
                select(Subscription).where(Subscription.confirm_token == token)
            )
        except SQLAlchemyError as e:
            raise StorageError(f"failed to look up subscription by token: {e}") from e
        return result.scalar_one_or_none()

    async def update(self, subscription: Subscription) -> Subscription:
        """Write the mutable fields of an existing subscription by id.

        Never inserts: a row deleted by an unsubscribe stays deleted.

        Raises:
            NotFoundError: If the subscription no longer exists.
            StorageError: On any other database failure.
        """
        stmt = (
            update(Subscription)
            .where(Subscription.id == subscription.id)
            .values(
                email=subscription.email,
                city=subscription.city,
                frequency=subscription.frequency,
                confirmed=subscription.confirmed,
                last_sent_at=subscription.last_sent_at,
            )
        )
        try:
            result = await self.session.execute(stmt)
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            raise StorageError(f"failed to update subscription {subscription.id}: {e}") from e

        if result.rowcount == 0:
            raise NotFoundError(f"subscription {subscription.id} not found")
        return subscription

    async def unsubscribe_by_token(self, token: str) -> None:
        """Delete the subscription owning an unsubscribe token.

        Raises:
            NotFoundError: If no row matched the token.
        """
        try:
            result = await self.session.execute(
                delete(Subscription).where(Subscription.unsubscribe_token == token)
            )
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            raise StorageError(f"failed to delete subscription: {e}") from e

        if result.rowcount == 0:
            raise NotFoundError("subscription not found")

    async def get_all_confirmed(self) -> list[Subscription]:
        """List confirmed subscriptions, oldest first.

        Rows come back detached from the session, so a failed update of one
        of them cannot expire the others.
        """
        try:
            result = await self.session.execute(
                select(Subscription)
                .where(Subscription.confirmed == True)  # noqa: E712
                .order_by(Subscription.created_at, Subscription.id)
            )
        except SQLAlchemyError as e:
            raise StorageError(f"failed to list confirmed subscriptions: {e}") from e

        subscriptions = list(result.scalars().all())
        for subscription in subscriptions:
            self.session.expunge(subscription)
        return subscriptions

    async def count_confirmed(self) -> int:
        """Count confirmed subscriptions."""
        result = await self.session.execute(
            select(func.count(Subscription.id)).where(Subscription.confirmed == True)  # noqa: E712
        )
        return result.scalar_one()

    async def count_all(self) -> int:
        """Count all subscriptions (including unconfirmed)."""
        result = await self.session.execute(select(func.count(Subscription.id)))
        return result.scalar_one()
