"""create scheduling tables

Revision ID: 4b1f0c9d2a7e
Revises:
Create Date: 2026-10-19 09:12:44.518203

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '4b1f0c9d2a7e'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""

    # 1. Hosts
    op.create_table(
        'hosts',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('email', sa.String(320), nullable=False, unique=True),
        sa.Column('timezone', sa.String(64), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now())
    )

    # 2. Weekly availability, one row per host and weekday
    op.create_table(
        'availability_rules',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('host_id', sa.Uuid(), sa.ForeignKey('hosts.id'), nullable=False),
        sa.Column('day_of_week', sa.Integer, nullable=False),
        sa.Column('start_time', sa.Time, nullable=False),
        sa.Column('end_time', sa.Time, nullable=False),
        sa.Column('is_enabled', sa.Boolean, nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint('host_id', 'day_of_week', name='uq_availability_rules_host_day')
    )
    op.create_index('ix_availability_rules_host_id', 'availability_rules', ['host_id'])

    # 3. Date overrides
    op.create_table(
        'availability_overrides',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('host_id', sa.Uuid(), sa.ForeignKey('hosts.id'), nullable=False),
        sa.Column('date', sa.Date, nullable=False),
        sa.Column('is_blocked', sa.Boolean, nullable=False),
        sa.Column('start_time', sa.Time, nullable=True),
        sa.Column('end_time', sa.Time, nullable=True),
        sa.Column('reason', sa.String(200), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now())
    )
    op.create_index('ix_availability_overrides_host_id', 'availability_overrides', ['host_id'])
    op.create_index('ix_availability_overrides_date', 'availability_overrides', ['date'])

    # 4. Event types
    op.create_table(
        'event_types',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('host_id', sa.Uuid(), sa.ForeignKey('hosts.id'), nullable=False),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('slug', sa.String(100), nullable=False),
        sa.Column('description', sa.Text, nullable=True),
        sa.Column('duration_minutes', sa.Integer, nullable=False),
        sa.Column('buffer_before_minutes', sa.Integer, nullable=False),
        sa.Column('buffer_after_minutes', sa.Integer, nullable=False),
        sa.Column('minimum_notice_minutes', sa.Integer, nullable=False),
        sa.Column('booking_window_days', sa.Integer, nullable=False),
        sa.Column('max_bookings_per_day', sa.Integer, nullable=True),
        sa.Column('is_active', sa.Boolean, nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now())
    )
    op.create_index('ix_event_types_host_id', 'event_types', ['host_id'])

    # 5. Bookings
    op.create_table(
        'bookings',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('event_type_id', sa.Uuid(), sa.ForeignKey('event_types.id'), nullable=False),
        sa.Column('host_id', sa.Uuid(), sa.ForeignKey('hosts.id'), nullable=False),
        sa.Column('guest_name', sa.String(200), nullable=False),
        sa.Column('guest_email', sa.String(320), nullable=False),
        sa.Column('guest_phone', sa.String(50), nullable=True),
        sa.Column('guest_timezone', sa.String(64), nullable=False),
        sa.Column('guest_notes', sa.Text, nullable=True),
        sa.Column('start_time_utc', sa.DateTime(timezone=True), nullable=False),
        sa.Column('end_time_utc', sa.DateTime(timezone=True), nullable=False),
        sa.Column('status', sa.String(20), nullable=False),
        sa.Column('reschedule_token', sa.String(64), nullable=True),
        sa.Column('cancellation_reason', sa.Text, nullable=True),
        sa.Column('cancelled_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now())
    )
    op.create_index('ix_bookings_event_type_id', 'bookings', ['event_type_id'])
    op.create_index('ix_bookings_host_id', 'bookings', ['host_id'])
    op.create_index('ix_bookings_start_time_utc', 'bookings', ['start_time_utc'])
    op.create_index('ix_bookings_reschedule_token', 'bookings', ['reschedule_token'], unique=True)

    # 6. Answers to booking questions
    op.create_table(
        'booking_answers',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('booking_id', sa.Uuid(), sa.ForeignKey('bookings.id'), nullable=False),
        sa.Column('question_id', sa.Uuid(), nullable=False),
        sa.Column('value', sa.Text, nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint('booking_id', 'question_id', name='uq_booking_answers_question')
    )
    op.create_index('ix_booking_answers_booking_id', 'booking_answers', ['booking_id'])


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table('booking_answers')
    op.drop_table('bookings')
    op.drop_table('event_types')
    op.drop_table('availability_overrides')
    op.drop_table('availability_rules')
    op.drop_table('hosts')
