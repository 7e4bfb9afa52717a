"""Create subscriptions table

Revision ID: 20260115_0003
Revises: 20260115_0002
Create Date: 2026-01-15 00:03:00.000000

"""
from collections.abc import Sequence

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = '20260115_0003'
down_revision: str | None = '20260115_0002'
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Create subscriptions table."""
    op.create_table(
        'subscriptions',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column(
            'client_id',
            sa.Integer,
            sa.ForeignKey('clients.id', ondelete='CASCADE'),
            nullable=False,
        ),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('cost', sa.Numeric(12, 2), nullable=False),
        sa.Column('billing_cycle', sa.String(50), nullable=False),
        sa.Column('status', sa.String(50), nullable=False, server_default='Actif'),
        sa.Column('start_date', sa.Date, nullable=False),
        sa.Column('end_date', sa.Date, nullable=True),
        sa.Column('notes', sa.Text, nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )

    op.create_index('ix_subscriptions_client_id', 'subscriptions', ['client_id'])


def downgrade() -> None:
    """Drop subscriptions table."""
    op.drop_index('ix_subscriptions_client_id', table_name='subscriptions')
    op.drop_table('subscriptions')
