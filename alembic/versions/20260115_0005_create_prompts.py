"""Create prompts table

Revision ID: 20260115_0005
Revises: 20260115_0004
Create Date: 2026-01-15 00:05:00.000000

"""
from collections.abc import Sequence

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = '20260115_0005'
down_revision: str | None = '20260115_0004'
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Create prompts table."""
    op.create_table(
        'prompts',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('category', sa.String(100), nullable=False),
        sa.Column('content', sa.Text, nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )

    op.create_index('ix_prompts_category', 'prompts', ['category'])


def downgrade() -> None:
    """Drop prompts table."""
    op.drop_index('ix_prompts_category', table_name='prompts')
    op.drop_table('prompts')
