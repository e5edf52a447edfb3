"""Create subscriptions table.

Revision ID: 001
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "subscriptions",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("email", sa.String(length=320), nullable=False),
        sa.Column("city", sa.String(length=255), nullable=False),
        sa.Column("frequency", sa.String(length=16), nullable=False),
        sa.Column("confirmed", sa.Boolean(), nullable=False, server_default="false"),
        sa.Column("confirm_token", sa.String(length=64), nullable=False),
        sa.Column("unsubscribe_token", sa.String(length=64), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("last_sent_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("email"),
        sa.UniqueConstraint("confirm_token"),
        sa.UniqueConstraint("unsubscribe_token"),
        sa.CheckConstraint("frequency IN ('hourly', 'daily')", name="ck_subscriptions_frequency"),
    )
    op.create_index("ix_subscriptions_confirmed", "subscriptions", ["confirmed"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_subscriptions_confirmed", table_name="subscriptions")
    op.drop_table("subscriptions")
