"""initial_library_schema

Revision ID: a1b2c3d4e5f6
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = 'a1b2c3d4e5f6'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create folders, designs, tags and design_tags tables."""
    op.create_table(
        'folders',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('parent_id', sa.String(36), sa.ForeignKey('folders.id', ondelete='CASCADE'), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index('ix_folders_parent_id', 'folders', ['parent_id'])

    op.create_table(
        'designs',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('name', sa.String(512), nullable=False),
        sa.Column('folder_id', sa.String(36), sa.ForeignKey('folders.id', ondelete='SET NULL'), nullable=True),
        sa.Column('document', sa.Text(), nullable=False, server_default='{}'),
        sa.Column('rendered_cache', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index('ix_designs_folder_id', 'designs', ['folder_id'])
    op.create_index('ix_designs_updated_at', 'designs', ['updated_at'])

    op.create_table(
        'tags',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('name', sa.String(100, collation='NOCASE'), nullable=False, unique=True),
        sa.Column('color', sa.String(20), nullable=False, server_default='#6B7280'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
    )

    op.create_table(
        'design_tags',
        sa.Column('design_id', sa.String(36), sa.ForeignKey('designs.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('tag_id', sa.String(36), sa.ForeignKey('tags.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index('ix_design_tags_tag_id', 'design_tags', ['tag_id'])
    op.create_index('ix_design_tags_design_id', 'design_tags', ['design_id'])


def downgrade() -> None:
    """Drop all library tables."""
    op.drop_index('ix_design_tags_design_id', table_name='design_tags')
    op.drop_index('ix_design_tags_tag_id', table_name='design_tags')
    op.drop_table('design_tags')
    op.drop_table('tags')
    op.drop_index('ix_designs_updated_at', table_name='designs')
    op.drop_index('ix_designs_folder_id', table_name='designs')
    op.drop_table('designs')
    op.drop_index('ix_folders_parent_id', table_name='folders')
    op.drop_table('folders')
