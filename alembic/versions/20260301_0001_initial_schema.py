"""initial schema

Revision ID: 0001
Revises:
Create Date: 2026-03-01 10:00:00

"""
from collections.abc import Sequence

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "0001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

user_role = postgresql.ENUM("client", "provider", name="user_role", create_type=False)
rate_type = postgresql.ENUM("hourly", "fixed", "daily", name="rate_type", create_type=False)
booking_status = postgresql.ENUM(
    "pending", "confirmed", "completed", "cancelled", name="booking_status", create_type=False
)
application_status = postgresql.ENUM(
    "pending", "accepted", "rejected", name="application_status", create_type=False
)
message_type = postgresql.ENUM("text", "image", "file", name="message_type", create_type=False)
message_status = postgresql.ENUM(
    "sending", "sent", "delivered", "read", name="message_status", create_type=False
)

ENUMS = (user_role, rate_type, booking_status, application_status, message_type, message_status)


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False
        ),
        sa.Column(
            "updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False
        ),
    ]


def upgrade() -> None:
    bind = op.get_bind()
    for enum in ENUMS:
        enum.create(bind, checkfirst=True)

    op.create_table(
        "profiles",
        sa.Column("id", sa.UUID(), primary_key=True),
        sa.Column("user_id", sa.UUID(), nullable=False),
        sa.Column("full_name", sa.String(200)),
        sa.Column("email", sa.String(255)),
        sa.Column("phone", sa.String(30)),
        sa.Column("user_type", user_role),
        sa.Column("bio", sa.Text()),
        sa.Column("skills", postgresql.ARRAY(sa.String())),
        sa.Column("avatar_url", sa.String()),
        sa.Column("location", sa.String(200)),
        sa.Column("latitude", sa.Float()),
        sa.Column("longitude", sa.Float()),
        sa.Column("hourly_rate", sa.Float()),
        sa.Column("experience_years", sa.Integer()),
        sa.Column("rating", sa.Float()),
        sa.Column("total_reviews", sa.Integer()),
        *_timestamps(),
    )
    op.create_index("ix_profiles_user_id", "profiles", ["user_id"], unique=True)

    op.create_table(
        "services",
        sa.Column("id", sa.UUID(), primary_key=True),
        sa.Column(
            "provider_id",
            sa.UUID(),
            sa.ForeignKey("profiles.user_id", name="fk_services_provider_id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("title", sa.String(100), nullable=False),
        sa.Column("description", sa.Text()),
        sa.Column("category", sa.String(64), nullable=False),
        sa.Column("rate", sa.Float(), nullable=False),
        sa.Column("rate_type", rate_type, nullable=False),
        sa.Column("duration_minutes", sa.Integer(), nullable=False, server_default="60"),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.CheckConstraint("rate > 0", name="ck_services_rate_positive"),
        sa.CheckConstraint("duration_minutes > 0", name="ck_services_duration_positive"),
    )
    op.create_index("ix_services_provider_id", "services", ["provider_id"])

    op.create_table(
        "bookings",
        sa.Column("id", sa.UUID(), primary_key=True),
        sa.Column(
            "client_id",
            sa.UUID(),
            sa.ForeignKey("profiles.user_id", name="fk_bookings_client_id"),
            nullable=False,
        ),
        sa.Column(
            "provider_id",
            sa.UUID(),
            sa.ForeignKey("profiles.user_id", name="fk_bookings_provider_id"),
        ),
        sa.Column(
            "service_id",
            sa.UUID(),
            sa.ForeignKey("services.id", name="fk_bookings_service_id", ondelete="SET NULL"),
        ),
        sa.Column("amount", sa.Float(), nullable=False),
        sa.Column("currency", sa.String(3), nullable=False),
        sa.Column("status", booking_status, nullable=False),
        sa.Column("stripe_session_id", sa.String(255), unique=True),
        sa.Column("booking_date", sa.DateTime(timezone=True)),
        sa.Column("notes", sa.Text()),
        sa.Column("job_type", sa.String(64)),
        sa.Column("duration_minutes", sa.Integer()),
        *_timestamps(),
    )
    op.create_index("ix_bookings_client_id", "bookings", ["client_id"])
    op.create_index("ix_bookings_provider_id", "bookings", ["provider_id"])
    op.create_index("ix_bookings_status", "bookings", ["status"])

    op.create_table(
        "applications",
        sa.Column("id", sa.UUID(), primary_key=True),
        sa.Column(
            "booking_id",
            sa.UUID(),
            sa.ForeignKey("bookings.id", name="fk_applications_booking_id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "provider_id",
            sa.UUID(),
            sa.ForeignKey("profiles.user_id", name="fk_applications_provider_id"),
            nullable=False,
        ),
        sa.Column("message", sa.Text()),
        sa.Column("status", application_status, nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_applications_booking_id", "applications", ["booking_id"])

    op.create_table(
        "messages",
        sa.Column("id", sa.UUID(), primary_key=True),
        sa.Column(
            "sender_id",
            sa.UUID(),
            sa.ForeignKey("profiles.user_id", name="fk_messages_sender_id"),
            nullable=False,
        ),
        sa.Column(
            "recipient_id",
            sa.UUID(),
            sa.ForeignKey("profiles.user_id", name="fk_messages_recipient_id"),
            nullable=False,
        ),
        sa.Column("message_text", sa.Text(), nullable=False),
        sa.Column("message_type", message_type, nullable=False),
        sa.Column("file_url", sa.String()),
        sa.Column("file_size", sa.Integer()),
        sa.Column("status", message_status, nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_messages_sender_recipient", "messages", ["sender_id", "recipient_id"])
    op.create_index("ix_messages_recipient_sender", "messages", ["recipient_id", "sender_id"])

    op.create_table(
        "notifications",
        sa.Column("id", sa.UUID(), primary_key=True),
        sa.Column(
            "user_id",
            sa.UUID(),
            sa.ForeignKey(
                "profiles.user_id", name="fk_notifications_user_id", ondelete="CASCADE"
            ),
            nullable=False,
        ),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("type", sa.String(50), nullable=False),
        sa.Column("read", sa.Boolean(), nullable=False),
        sa.Column("data", postgresql.JSONB()),
        *_timestamps(),
    )
    op.create_index("ix_notifications_user_id", "notifications", ["user_id"])


def downgrade() -> None:
    op.drop_table("notifications")
    op.drop_table("messages")
    op.drop_table("applications")
    op.drop_table("bookings")
    op.drop_table("services")
    op.drop_table("profiles")

    bind = op.get_bind()
    for enum in reversed(ENUMS):
        enum.drop(bind, checkfirst=True)
