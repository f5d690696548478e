"""Baseline schema

Revision ID: 0001_baseline
Revises:
Create Date: 2026-10-19

Creates the College Quest tables:
- colleges, schools: catalog data
- profiles: one row per auth user, carries the admin role
- favorites, favorite_folders, favorite_folder_items: user bookmarks
- allowed_emails: sign-in allow list

Uniqueness constraints back the idempotent favorite/folder inserts.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '0001_baseline'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
    ]


def upgrade() -> None:
    """Create all tables."""

    op.create_table(
        'colleges',
        sa.Column('id', sa.UUID(), nullable=False, primary_key=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('city', sa.String(120), nullable=False),
        sa.Column('state', sa.String(50), nullable=False),
        sa.Column('zip_code', sa.String(20), nullable=True),
        sa.Column('region', sa.String(50), nullable=True),
        sa.Column('website', sa.String(500), nullable=True),
        sa.Column('category', sa.String(100), nullable=True),
        sa.Column('type', sa.String(50), nullable=True),
        sa.Column('size', sa.String(20), nullable=True),
        sa.Column('enrollment', sa.Integer(), nullable=True),
        sa.Column('tuition_in_state', sa.Integer(), nullable=True),
        sa.Column('tuition_out_of_state', sa.Integer(), nullable=True),
        sa.Column('net_cost', sa.Integer(), nullable=True),
        sa.Column('net_pricing_guidance', sa.Text(), nullable=True),
        sa.Column('acceptance_rate', sa.Float(), nullable=True),
        sa.Column('sat_math', sa.Integer(), nullable=True),
        sa.Column('sat_reading', sa.Integer(), nullable=True),
        sa.Column('act_composite', sa.Integer(), nullable=True),
        sa.Column('graduation_rate', sa.Float(), nullable=True),
        sa.Column('programs', sa.JSON(), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('image_url', sa.String(500), nullable=True),
        sa.Column('jesuit', sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column('scorecard_id', sa.String(20), nullable=True),
        sa.Column('latitude', sa.Float(), nullable=True),
        sa.Column('longitude', sa.Float(), nullable=True),
        *_timestamps(),
        sa.CheckConstraint('acceptance_rate >= 0 AND acceptance_rate <= 1', name='ck_colleges_acceptance_rate'),
    )
    op.create_index('ix_colleges_name', 'colleges', ['name'])
    op.create_index('ix_colleges_state', 'colleges', ['state'])
    op.create_index('ix_colleges_region', 'colleges', ['region'])

    op.create_table(
        'schools',
        sa.Column('id', sa.UUID(), nullable=False, primary_key=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('college_id', sa.UUID(), sa.ForeignKey('colleges.id', ondelete='CASCADE'), nullable=False),
        sa.Column('college_name', sa.String(255), nullable=True),
        sa.Column('college_city', sa.String(120), nullable=True),
        sa.Column('college_state', sa.String(50), nullable=True),
        sa.Column('category', sa.String(120), nullable=True),
        sa.Column('cip_code', sa.String(10), nullable=True),
        sa.Column('website', sa.String(500), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('source', sa.String(20), server_default='manual', nullable=False),
        *_timestamps(),
    )
    op.create_index('ix_schools_college_id', 'schools', ['college_id'])
    op.create_index('ix_schools_category', 'schools', ['category'])

    op.create_table(
        'profiles',
        sa.Column('id', sa.UUID(), nullable=False, primary_key=True),
        sa.Column('email', sa.String(255), nullable=True),
        sa.Column('display_name', sa.String(255), nullable=True),
        sa.Column('role', sa.String(20), server_default='user', nullable=False),
        *_timestamps(),
    )

    op.create_table(
        'favorites',
        sa.Column('id', sa.UUID(), nullable=False, primary_key=True),
        sa.Column('user_id', sa.UUID(), sa.ForeignKey('profiles.id', ondelete='CASCADE'), nullable=False),
        sa.Column('college_id', sa.UUID(), sa.ForeignKey('colleges.id', ondelete='CASCADE'), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.UniqueConstraint('user_id', 'college_id', name='uq_favorites_user_college'),
    )
    op.create_index('ix_favorites_user_id', 'favorites', ['user_id'])
    op.create_index('ix_favorites_college_id', 'favorites', ['college_id'])

    op.create_table(
        'favorite_folders',
        sa.Column('id', sa.UUID(), nullable=False, primary_key=True),
        sa.Column('user_id', sa.UUID(), sa.ForeignKey('profiles.id', ondelete='CASCADE'), nullable=False),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('color', sa.String(20), nullable=True),
        sa.Column('position', sa.Integer(), server_default='0', nullable=False),
        *_timestamps(),
        sa.UniqueConstraint('user_id', 'name', name='uq_favorite_folders_user_name'),
    )
    op.create_index('ix_favorite_folders_user_id', 'favorite_folders', ['user_id'])

    op.create_table(
        'favorite_folder_items',
        sa.Column('id', sa.UUID(), nullable=False, primary_key=True),
        sa.Column('folder_id', sa.UUID(), sa.ForeignKey('favorite_folders.id', ondelete='CASCADE'), nullable=False),
        sa.Column('college_id', sa.UUID(), sa.ForeignKey('colleges.id', ondelete='CASCADE'), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.UniqueConstraint('folder_id', 'college_id', name='uq_favorite_folder_items_folder_college'),
    )
    op.create_index('ix_favorite_folder_items_folder_id', 'favorite_folder_items', ['folder_id'])

    op.create_table(
        'allowed_emails',
        sa.Column('id', sa.UUID(), nullable=False, primary_key=True),
        sa.Column('email', sa.String(255), nullable=False, unique=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
    )


def downgrade() -> None:
    """Drop all tables."""
    op.drop_table('allowed_emails')
    op.drop_index('ix_favorite_folder_items_folder_id', table_name='favorite_folder_items')
    op.drop_table('favorite_folder_items')
    op.drop_index('ix_favorite_folders_user_id', table_name='favorite_folders')
    op.drop_table('favorite_folders')
    op.drop_index('ix_favorites_college_id', table_name='favorites')
    op.drop_index('ix_favorites_user_id', table_name='favorites')
    op.drop_table('favorites')
    op.drop_table('profiles')
    op.drop_index('ix_schools_category', table_name='schools')
    op.drop_index('ix_schools_college_id', table_name='schools')
    op.drop_table('schools')
    op.drop_index('ix_colleges_region', table_name='colleges')
    op.drop_index('ix_colleges_state', table_name='colleges')
    op.drop_index('ix_colleges_name', table_name='colleges')
    op.drop_table('colleges')
