"""Initial schema

Revision ID: 20261019_0001
Revises:
Create Date: 2026-10-19 09:30:00
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "20261019_0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


booking_status_enum = sa.Enum(
    "draft",
    "confirmed",
    "completed",
    "cancelled",
    name="booking_status_enum",
    native_enum=False,
)
outbox_status_enum = sa.Enum("pending", "processed", "failed", name="outbox_status_enum", native_enum=False)


def _id_col() -> sa.Column:
    return sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True, nullable=False)


def _created_col() -> sa.Column:
    return sa.Column("created_at", sa.DateTime(timezone=True), nullable=False)


def _updated_col() -> sa.Column:
    return sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False)


def upgrade() -> None:
    # Needed for "photographer_id WITH =" inside a GiST exclusion constraint.
    op.execute("CREATE EXTENSION IF NOT EXISTS btree_gist")

    op.create_table(
        "service_offerings",
        _id_col(),
        _created_col(),
        _updated_col(),
        sa.Column("code", sa.String(length=64), nullable=False),
        sa.Column("name", sa.String(length=128), nullable=False),
        sa.Column("duration_minutes", sa.Integer(), nullable=False),
        sa.Column("is_fee_only", sa.Boolean(), nullable=False),
        sa.Column("uses_client_location", sa.Boolean(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.CheckConstraint("duration_minutes >= 0", name="ck_service_offerings_duration_non_negative"),
    )
    op.create_index("ix_service_offerings_code", "service_offerings", ["code"], unique=True)

    op.create_table(
        "photographers",
        _id_col(),
        _created_col(),
        _updated_col(),
        sa.Column("name", sa.String(length=128), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("phone", sa.String(length=32), nullable=True),
        sa.Column("services", postgresql.ARRAY(sa.String(length=64)), nullable=False),
        sa.Column("base_address", sa.String(length=512), nullable=False),
        sa.Column("base_lat", sa.Float(), nullable=False),
        sa.Column("base_lng", sa.Float(), nullable=False),
        sa.Column("radius_km", sa.Float(), nullable=False),
        sa.Column("slot_minutes", sa.Integer(), nullable=False),
        sa.Column("availability", postgresql.JSONB(astext_type=sa.Text()), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.CheckConstraint("radius_km > 0", name="ck_photographers_radius_positive"),
        sa.CheckConstraint("slot_minutes > 0", name="ck_photographers_slot_minutes_positive"),
        sa.CheckConstraint("base_lat BETWEEN -90 AND 90", name="ck_photographers_base_lat_range"),
        sa.CheckConstraint("base_lng BETWEEN -180 AND 180", name="ck_photographers_base_lng_range"),
    )
    op.create_index("ix_photographers_email", "photographers", ["email"], unique=True)
    op.create_index("ix_photographers_is_active", "photographers", ["is_active"], unique=False)

    op.create_table(
        "clients",
        _id_col(),
        _created_col(),
        _updated_col(),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=True),
        sa.Column("phone", sa.String(length=32), nullable=True),
        sa.Column("address", sa.String(length=512), nullable=False),
        sa.Column("lat", sa.Float(), nullable=True),
        sa.Column("lng", sa.Float(), nullable=True),
        sa.Column("blocked_photographer_ids", postgresql.ARRAY(postgresql.UUID(as_uuid=True)), nullable=False),
        sa.UniqueConstraint("email", name="uq_clients_email"),
    )

    op.create_table(
        "time_offs",
        _id_col(),
        _created_col(),
        _updated_col(),
        sa.Column("photographer_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("start_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("end_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("block_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("notes", sa.String(length=512), nullable=True),
        sa.Column("created_by_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.CheckConstraint("start_at < end_at", name="ck_time_offs_start_before_end"),
        sa.ForeignKeyConstraint(
            ["photographer_id"],
            ["photographers.id"],
            name="fk_time_offs_photographer_id_photographers",
            ondelete="CASCADE",
        ),
    )
    op.create_index("ix_time_offs_photographer_id", "time_offs", ["photographer_id"], unique=False)
    op.create_index("ix_time_offs_start_at", "time_offs", ["start_at"], unique=False)
    op.create_index("ix_time_offs_end_at", "time_offs", ["end_at"], unique=False)
    op.create_index("ix_time_offs_block_id", "time_offs", ["block_id"], unique=False)

    op.create_table(
        "bookings",
        _id_col(),
        _created_col(),
        _updated_col(),
        sa.Column("client_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("service_ids", postgresql.ARRAY(sa.String(length=64)), nullable=False),
        sa.Column("required_minutes", sa.Integer(), nullable=False),
        sa.Column("address", sa.String(length=512), nullable=False),
        sa.Column("lat", sa.Float(), nullable=False),
        sa.Column("lng", sa.Float(), nullable=False),
        sa.Column("photographer_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("date", sa.Date(), nullable=True),
        sa.Column("start_time", sa.Time(), nullable=True),
        sa.Column("end_time", sa.Time(), nullable=True),
        sa.Column("status", booking_status_enum, nullable=False),
        sa.Column("is_accompanied", sa.Boolean(), nullable=False),
        sa.Column("accompanying_broker_name", sa.String(length=255), nullable=True),
        sa.Column("notes", sa.String(length=1024), nullable=True),
        sa.Column("confirmed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("cancelled_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("cancellation_reason", sa.String(length=512), nullable=True),
        sa.Column("rescheduled_from_date", sa.Date(), nullable=True),
        sa.Column("rescheduled_from_start_time", sa.Time(), nullable=True),
        sa.Column("created_by_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.CheckConstraint(
            "status = 'draft' OR (photographer_id IS NOT NULL AND date IS NOT NULL "
            "AND start_time IS NOT NULL AND end_time IS NOT NULL)",
            name="ck_bookings_scheduled_unless_draft",
        ),
        sa.CheckConstraint("end_time IS NULL OR start_time < end_time", name="ck_bookings_start_before_end"),
        sa.CheckConstraint("required_minutes > 0", name="ck_bookings_required_minutes_positive"),
        sa.ForeignKeyConstraint(
            ["client_id"],
            ["clients.id"],
            name="fk_bookings_client_id_clients",
            ondelete="CASCADE",
        ),
        sa.ForeignKeyConstraint(
            ["photographer_id"],
            ["photographers.id"],
            name="fk_bookings_photographer_id_photographers",
            ondelete="RESTRICT",
        ),
    )
    op.create_index("ix_bookings_client_id", "bookings", ["client_id"], unique=False)
    op.create_index("ix_bookings_photographer_id", "bookings", ["photographer_id"], unique=False)
    op.create_index("ix_bookings_date", "bookings", ["date"], unique=False)
    op.create_index("ix_bookings_status", "bookings", ["status"], unique=False)
    op.execute(
        """
        ALTER TABLE bookings
        ADD CONSTRAINT ex_bookings_photographer_no_overlap
        EXCLUDE USING gist (
            photographer_id WITH =,
            tsrange(date + start_time, date + end_time, '[)') WITH &&
        )
        WHERE (status IN ('confirmed', 'completed'))
        """,
    )

    op.create_table(
        "audit_logs",
        _id_col(),
        _created_col(),
        _updated_col(),
        sa.Column("actor_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("actor_role", sa.String(length=32), nullable=True),
        sa.Column("action", sa.String(length=128), nullable=False),
        sa.Column("entity_type", sa.String(length=128), nullable=False),
        sa.Column("entity_id", sa.String(length=128), nullable=True),
        sa.Column("payload", postgresql.JSONB(astext_type=sa.Text()), nullable=False),
    )
    op.create_index("ix_audit_logs_actor_id", "audit_logs", ["actor_id"], unique=False)
    op.create_index("ix_audit_logs_action", "audit_logs", ["action"], unique=False)
    op.create_index("ix_audit_logs_entity_id", "audit_logs", ["entity_id"], unique=False)

    op.create_table(
        "outbox_events",
        _id_col(),
        _created_col(),
        _updated_col(),
        sa.Column("aggregate_type", sa.String(length=128), nullable=False),
        sa.Column("aggregate_id", sa.String(length=128), nullable=False),
        sa.Column("event_type", sa.String(length=128), nullable=False),
        sa.Column("payload", postgresql.JSONB(astext_type=sa.Text()), nullable=False),
        sa.Column("status", outbox_status_enum, nullable=False),
        sa.Column("occurred_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("processed_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_outbox_events_aggregate_type", "outbox_events", ["aggregate_type"], unique=False)
    op.create_index("ix_outbox_events_aggregate_id", "outbox_events", ["aggregate_id"], unique=False)
    op.create_index("ix_outbox_events_event_type", "outbox_events", ["event_type"], unique=False)
    op.create_index("ix_outbox_events_status", "outbox_events", ["status"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_outbox_events_status", table_name="outbox_events")
    op.drop_index("ix_outbox_events_event_type", table_name="outbox_events")
    op.drop_index("ix_outbox_events_aggregate_id", table_name="outbox_events")
    op.drop_index("ix_outbox_events_aggregate_type", table_name="outbox_events")
    op.drop_table("outbox_events")

    op.drop_index("ix_audit_logs_entity_id", table_name="audit_logs")
    op.drop_index("ix_audit_logs_action", table_name="audit_logs")
    op.drop_index("ix_audit_logs_actor_id", table_name="audit_logs")
    op.drop_table("audit_logs")

    op.execute("ALTER TABLE bookings DROP CONSTRAINT IF EXISTS ex_bookings_photographer_no_overlap")
    op.drop_index("ix_bookings_status", table_name="bookings")
    op.drop_index("ix_bookings_date", table_name="bookings")
    op.drop_index("ix_bookings_photographer_id", table_name="bookings")
    op.drop_index("ix_bookings_client_id", table_name="bookings")
    op.drop_table("bookings")

    op.drop_index("ix_time_offs_block_id", table_name="time_offs")
    op.drop_index("ix_time_offs_end_at", table_name="time_offs")
    op.drop_index("ix_time_offs_start_at", table_name="time_offs")
    op.drop_index("ix_time_offs_photographer_id", table_name="time_offs")
    op.drop_table("time_offs")

    op.drop_table("clients")

    op.drop_index("ix_photographers_is_active", table_name="photographers")
    op.drop_index("ix_photographers_email", table_name="photographers")
    op.drop_table("photographers")

    op.drop_index("ix_service_offerings_code", table_name="service_offerings")
    op.drop_table("service_offerings")
