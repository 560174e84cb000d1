"""
Create circulation tables: users, books, checkouts, waitlist_entries,
notifications, system_settings.

Timestamps are stored as ``timestamp without time zone`` holding UTC.

Revision ID: 3f9a2c7d51e4
Revises:
Create Date: 2026-10-19 09:12:44.318205
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op


revision: str = "3f9a2c7d51e4"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

user_role = sa.Enum("STANDARD", "PREMIUM", "LIBRARIAN", "ADMIN", name="user_role")
book_status = sa.Enum(
    "AVAILABLE",
    "CHECKED_OUT",
    "ON_HOLD_PREMIUM",
    "ON_HOLD_WAITLIST",
    "INACTIVE",
    name="book_status",
)
checkout_status = sa.Enum("ACTIVE", "OVERDUE", "RETURNED", name="checkout_status")
waitlist_status = sa.Enum(
    "WAITING", "NOTIFIED", "CLAIMED", "EXPIRED", "CANCELLED", name="waitlist_status"
)
notification_type = sa.Enum(
    "CHECKOUT_CONFIRMED",
    "DUE_SOON",
    "OVERDUE",
    "WAITLIST_JOINED",
    "WAITLIST_AVAILABLE",
    "WAITLIST_EXPIRED",
    "BOOK_RETURNED",
    name="notification_type",
)


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
    ]


def upgrade() -> None:
    """Create all tables and indexes."""
    op.create_table(
        "users",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("role", user_role, nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "books",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("title", sa.String(500), nullable=False),
        sa.Column("author", sa.String(255), nullable=False),
        sa.Column("isbn", sa.String(20), nullable=True),
        sa.Column("status", book_status, nullable=False),
        sa.Column("hold_until", sa.DateTime(), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_books_status_hold_until", "books", ["status", "hold_until"])

    op.create_table(
        "checkouts",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("user_id", sa.Uuid(), sa.ForeignKey("users.id", ondelete="RESTRICT"), nullable=False),
        sa.Column("book_id", sa.Uuid(), sa.ForeignKey("books.id", ondelete="RESTRICT"), nullable=False),
        sa.Column("status", checkout_status, nullable=False),
        sa.Column("checked_out_at", sa.DateTime(), nullable=False),
        sa.Column("due_date", sa.DateTime(), nullable=False),
        sa.Column("returned_at", sa.DateTime(), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_checkouts_user_status", "checkouts", ["user_id", "status"])
    op.create_index("ix_checkouts_book_status", "checkouts", ["book_id", "status"])
    op.create_index("ix_checkouts_status_due_date", "checkouts", ["status", "due_date"])

    op.create_table(
        "waitlist_entries",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("book_id", sa.Uuid(), sa.ForeignKey("books.id", ondelete="CASCADE"), nullable=False),
        sa.Column("user_id", sa.Uuid(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("status", waitlist_status, nullable=False),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.Column("is_priority", sa.Boolean(), nullable=False),
        sa.Column("notified_at", sa.DateTime(), nullable=True),
        sa.Column("expires_at", sa.DateTime(), nullable=True),
        *_timestamps(),
    )
    op.create_index(
        "ix_waitlist_book_rank",
        "waitlist_entries",
        ["book_id", "status", "is_priority", "position"],
    )
    op.create_index("ix_waitlist_user_status", "waitlist_entries", ["user_id", "status"])
    op.create_index("ix_waitlist_status_expires", "waitlist_entries", ["status", "expires_at"])

    op.create_table(
        "notifications",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("user_id", sa.Uuid(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("book_id", sa.Uuid(), sa.ForeignKey("books.id", ondelete="SET NULL"), nullable=True),
        sa.Column("type", notification_type, nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("is_read", sa.Boolean(), nullable=False),
        *_timestamps(),
    )
    op.create_index(
        "ix_notifications_user_book_type",
        "notifications",
        ["user_id", "book_id", "type"],
    )
    op.create_index("ix_notifications_type_created", "notifications", ["type", "created_at"])

    op.create_table(
        "system_settings",
        sa.Column("key", sa.String(100), primary_key=True),
        sa.Column("value", sa.JSON(), nullable=True),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.Column("updated_by", sa.Uuid(), nullable=True),
    )


def downgrade() -> None:
    """Drop all tables and enum types."""
    op.drop_table("system_settings")
    op.drop_table("notifications")
    op.drop_table("waitlist_entries")
    op.drop_table("checkouts")
    op.drop_table("books")
    op.drop_table("users")

    bind = op.get_bind()
    for enum_type in (notification_type, waitlist_status, checkout_status, book_status, user_role):
        enum_type.drop(bind, checkfirst=True)
