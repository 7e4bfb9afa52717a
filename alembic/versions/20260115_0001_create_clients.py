"""Create clients table

Revision ID: 20260115_0001
Revises:
Create Date: 2026-01-15 00:01:00.000000

"""
from collections.abc import Sequence

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = '20260115_0001'
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Create clients table."""
    op.create_table(
        'clients',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('client_name', sa.String(255), nullable=False),
        sa.Column('contact_person', sa.String(255), nullable=True),
        # Deliberately not unique
        sa.Column('email', sa.String(255), nullable=True),
        sa.Column('phone', sa.String(50), nullable=True),
        sa.Column('company', sa.String(255), nullable=True),
        sa.Column('address', sa.Text, nullable=True),
        sa.Column('city', sa.String(100), nullable=True),
        sa.Column('postal_code', sa.String(20), nullable=True),
        sa.Column('country', sa.String(100), nullable=True, server_default='France'),
        sa.Column('project_type', sa.String(100), nullable=True),
        sa.Column('technologies', sa.Text, nullable=True),
        sa.Column('budget', sa.Numeric(12, 2), nullable=True),
        sa.Column('start_date', sa.Date, nullable=True),
        sa.Column('end_date', sa.Date, nullable=True),
        sa.Column('status', sa.String(50), nullable=True, server_default='En cours'),
        sa.Column('progress', sa.Integer, nullable=True, server_default='0'),
        sa.Column('notes', sa.Text, nullable=True),
        sa.Column('website', sa.String(255), nullable=True),
        sa.Column('logo', sa.Text, nullable=True),
        sa.Column('priority', sa.String(50), nullable=True, server_default='Moyenne'),
        sa.Column('deadline', sa.Date, nullable=True),
        sa.Column('attachments', sa.JSON, nullable=True),
        sa.Column('todos', sa.JSON, nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )

    op.create_index('idx_clients_created', 'clients', ['created_at'])


def downgrade() -> None:
    """Drop clients table."""
    op.drop_index('idx_clients_created', table_name='clients')
    op.drop_table('clients')
