# ABOUTME: SQLAlchemy ORM models for subscription persistence.
# ABOUTME: Defines the Subscription table with unique email and token constraints.

from datetime import UTC, datetime

from sqlalchemy import Boolean, CheckConstraint, DateTime, Index, Integer, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def _utcnow() -> datetime:
    return datetime.now(UTC)


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


class Subscription(Base):
    """A weather update subscription with double opt-in confirmation.

    Lifecycle: created unconfirmed, confirmed once through ``confirm_token``,
    hard-deleted through ``unsubscribe_token``.
    """

    __tablename__ = "subscriptions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    email: Mapped[str] = mapped_column(String(320), unique=True, nullable=False)
    city: Mapped[str] = mapped_column(String(255), nullable=False)
    frequency: Mapped[str] = mapped_column(String(16), nullable=False)
    confirmed: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    confirm_token: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    unsubscribe_token: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, onupdate=_utcnow, nullable=False
    )
    last_sent_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        Index("ix_subscriptions_confirmed", confirmed),
        CheckConstraint("frequency IN ('hourly', 'daily')", name="ck_subscriptions_frequency"),
    )

    def __repr__(self) -> str:
        status = "confirmed" if self.confirmed else "pending"
        return f"<Subscription {self.email} {self.city} {self.frequency} ({status})>"
