"""Create ai_photos table

Revision ID: 20260115_0004
Revises: 20260115_0003
Create Date: 2026-01-15 00:04:00.000000

"""
from collections.abc import Sequence

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = '20260115_0004'
down_revision: str | None = '20260115_0003'
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Create ai_photos table."""
    op.create_table(
        'ai_photos',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('image_prompt', sa.Text, nullable=True),
        sa.Column('video_prompt', sa.Text, nullable=True),
        # URL or base64 data URI
        sa.Column('image_url', sa.Text, nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )

    op.create_index('idx_ai_photos_created', 'ai_photos', ['created_at'])


def downgrade() -> None:
    """Drop ai_photos table."""
    op.drop_index('idx_ai_photos_created', table_name='ai_photos')
    op.drop_table('ai_photos')
