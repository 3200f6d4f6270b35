"""Create initial schema

Revision ID: 20261018_0001
Revises: 
Create Date: 2026-10-18 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy import inspect


# revision identifiers, used by Alembic.
revision: str = '20261018_0001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

def _has_table(bind, name: str) -> bool:
    try:
        insp = inspect(bind)
        return insp.has_table(name)
    except Exception:
        return False

def upgrade() -> None:
    bind = op.get_bind()

    # Create admins table (at most one row)
    if not _has_table(bind, 'admins'):
        op.create_table('admins',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('email', sa.String(length=255), nullable=False),
            sa.Column('hashed_password', sa.String(length=255), nullable=False),
            sa.Column('singleton', sa.Integer(), server_default='1', nullable=False),
            sa.Column('created_at', sa.DateTime(), nullable=True),
            sa.CheckConstraint('singleton = 1', name='ck_admins_singleton'),
            sa.PrimaryKeyConstraint('id'),
            sa.UniqueConstraint('singleton')
        )
        op.create_index(op.f('ix_admins_email'), 'admins', ['email'], unique=True)
        op.create_index(op.f('ix_admins_id'), 'admins', ['id'], unique=False)

    # Create hotel_categories table
    if not _has_table(bind, 'hotel_categories'):
        op.create_table('hotel_categories',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('slug', sa.String(length=200), nullable=False),
            sa.Column('title', sa.String(length=200), nullable=False),
            sa.Column('description', sa.Text(), nullable=False),
            sa.Column('specs', sa.JSON(), nullable=False),
            sa.Column('essential_amenities', sa.JSON(), nullable=False),
            sa.Column('bed_type', sa.String(length=100), nullable=True),
            sa.Column('max_occupancy', sa.Integer(), nullable=True),
            sa.Column('room_size', sa.String(length=100), nullable=True),
            sa.Column('room_count', sa.Integer(), server_default='0', nullable=False),
            sa.Column('video_url', sa.String(length=1000), nullable=True),
            sa.Column('created_at', sa.DateTime(), nullable=True),
            sa.Column('updated_at', sa.DateTime(), nullable=True),
            sa.PrimaryKeyConstraint('id')
        )
        op.create_index(op.f('ix_hotel_categories_id'), 'hotel_categories', ['id'], unique=False)
        op.create_index(op.f('ix_hotel_categories_slug'), 'hotel_categories', ['slug'], unique=True)
        op.create_index(op.f('ix_hotel_categories_created_at'), 'hotel_categories', ['created_at'], unique=False)

    # Create prices table
    if not _has_table(bind, 'prices'):
        op.create_table('prices',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('category_id', sa.Integer(), nullable=False),
            sa.Column('hourly_hours', sa.Integer(), nullable=False),
            sa.Column('rate_cents', sa.Integer(), nullable=False),
            sa.Column('label', sa.String(length=100), nullable=True),
            sa.Column('created_at', sa.DateTime(), nullable=True),
            sa.ForeignKeyConstraint(['category_id'], ['hotel_categories.id'], ondelete='CASCADE'),
            sa.PrimaryKeyConstraint('id')
        )
        op.create_index(op.f('ix_prices_id'), 'prices', ['id'], unique=False)
        op.create_index(op.f('ix_prices_category_id'), 'prices', ['category_id'], unique=False)

    # Create gallery_images table
    if not _has_table(bind, 'gallery_images'):
        op.create_table('gallery_images',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('category', sa.String(length=50), nullable=False),
            sa.Column('url', sa.String(length=1000), nullable=False),
            sa.Column('public_id', sa.String(length=255), nullable=True),
            sa.Column('caption', sa.String(length=500), nullable=True),
            sa.Column('category_id', sa.Integer(), nullable=True),
            sa.Column('created_at', sa.DateTime(), nullable=True),
            sa.ForeignKeyConstraint(['category_id'], ['hotel_categories.id'], ondelete='CASCADE'),
            sa.PrimaryKeyConstraint('id')
        )
        op.create_index(op.f('ix_gallery_images_id'), 'gallery_images', ['id'], unique=False)
        op.create_index(op.f('ix_gallery_images_category'), 'gallery_images', ['category'], unique=False)
        op.create_index(op.f('ix_gallery_images_category_id'), 'gallery_images', ['category_id'], unique=False)
        op.create_index(op.f('ix_gallery_images_created_at'), 'gallery_images', ['created_at'], unique=False)


def downgrade() -> None:
    op.drop_table('gallery_images')
    op.drop_table('prices')
    op.drop_table('hotel_categories')
    op.drop_table('admins')
