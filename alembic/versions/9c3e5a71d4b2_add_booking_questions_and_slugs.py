"""add booking questions, host slugs and event type soft delete

Revision ID: 9c3e5a71d4b2
Revises: 4b1f0c9d2a7e
Create Date: 2026-10-19 15:40:02.117390

"""
import re
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '9c3e5a71d4b2'
down_revision: Union[str, Sequence[str], None] = '4b1f0c9d2a7e'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _unique_slugs(rows):
    """Map row id to a slug derived from its name, suffixing -2, -3... on collisions"""
    taken, slugs = set(), {}
    for row_id, name in rows:
        base = re.sub(r"[^a-z0-9]+", "-", (name or "").lower()).strip("-")[:90].rstrip("-")
        if len(base) < 3:
            base = f"host-{str(row_id)[:8]}"
        slug, n = base, 1
        while slug in taken:
            n += 1
            slug = f"{base}-{n}"
        taken.add(slug)
        slugs[row_id] = slug
    return slugs


def upgrade() -> None:
    """Upgrade schema."""
    bind = op.get_bind()

    # 1. Host slugs, backfilled from names
    op.add_column('hosts', sa.Column('slug', sa.String(100), nullable=True))
    hosts = sa.table('hosts', sa.column('id', sa.Uuid()), sa.column('name'), sa.column('slug'),
                     sa.column('created_at'))
    rows = bind.execute(sa.select(hosts.c.id, hosts.c.name).order_by(hosts.c.created_at)).all()
    for host_id, slug in _unique_slugs(rows).items():
        bind.execute(hosts.update().where(hosts.c.id == host_id).values(slug=slug))
    with op.batch_alter_table('hosts') as batch:
        batch.alter_column('slug', existing_type=sa.String(100), nullable=False)
        batch.create_unique_constraint('uq_hosts_slug', ['slug'])

    # 2. Event types: soft delete, slugs unique per host
    event_types = sa.table('event_types', sa.column('id', sa.Uuid()), sa.column('host_id', sa.Uuid()),
                           sa.column('slug'))
    seen = set()
    for event_type_id, host_id, slug in bind.execute(
            sa.select(event_types.c.id, event_types.c.host_id, event_types.c.slug)
    ).all():
        candidate, n = slug, 1
        while (host_id, candidate) in seen:
            n += 1
            candidate = f"{slug[:95]}-{n}"
        seen.add((host_id, candidate))
        if candidate != slug:
            bind.execute(event_types.update().where(event_types.c.id == event_type_id).values(slug=candidate))

    with op.batch_alter_table('event_types') as batch:
        batch.add_column(sa.Column('deleted_at', sa.DateTime(timezone=True), nullable=True))
        batch.create_unique_constraint('uq_event_types_host_slug', ['host_id', 'slug'])

    # 3. Booking questions
    op.create_table(
        'booking_questions',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('event_type_id', sa.Uuid(), sa.ForeignKey('event_types.id'), nullable=False),
        sa.Column('question_text', sa.String(500), nullable=False),
        sa.Column('question_type', sa.String(20), nullable=False),
        sa.Column('is_required', sa.Boolean, nullable=False),
        sa.Column('options', sa.JSON, nullable=False),
        sa.Column('display_order', sa.Integer, nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now())
    )
    op.create_index('ix_booking_questions_event_type_id', 'booking_questions', ['event_type_id'])


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index('ix_booking_questions_event_type_id', table_name='booking_questions')
    op.drop_table('booking_questions')

    with op.batch_alter_table('event_types') as batch:
        batch.drop_constraint('uq_event_types_host_slug', type_='unique')
        batch.drop_column('deleted_at')

    with op.batch_alter_table('hosts') as batch:
        batch.drop_constraint('uq_hosts_slug', type_='unique')
        batch.drop_column('slug')
