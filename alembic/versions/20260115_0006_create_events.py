"""Create events table

Revision ID: 20260115_0006
Revises: 20260115_0005
Create Date: 2026-01-15 00:06:00.000000

"""
from collections.abc import Sequence

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = '20260115_0006'
down_revision: str | None = '20260115_0005'
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Create events table."""
    op.create_table(
        'events',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('start', sa.DateTime(timezone=True), nullable=False),
        sa.Column('end', sa.DateTime(timezone=True), nullable=True),
        sa.Column('background_color', sa.String(50), nullable=True, server_default='#58a6ff'),
        sa.Column('border_color', sa.String(50), nullable=True, server_default='#58a6ff'),
        sa.Column('client', sa.String(255), nullable=True),
        sa.Column('type', sa.String(100), nullable=True),
        sa.Column('description', sa.Text, nullable=True),
        sa.Column('all_day', sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )

    op.create_index('idx_events_start', 'events', ['start'])


def downgrade() -> None:
    """Drop events table."""
    op.drop_index('idx_events_start', table_name='events')
    op.drop_table('events')
