"""Create benches and photos tables

Revision ID: 3f9c2a7d1b64
Revises:
Create Date: 2026-10-18 09:12:44.201873

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '3f9c2a7d1b64'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        'benches',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('created_by', sa.BigInteger(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.Column('deleted_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_benches_created_by'), 'benches', ['created_by'], unique=False)
    op.create_index(op.f('ix_benches_deleted_at'), 'benches', ['deleted_at'], unique=False)

    op.create_table(
        'photos',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('parent_id', sa.BigInteger(), nullable=False),
        sa.Column('uploader_id', sa.BigInteger(), nullable=False),
        sa.Column('is_main', sa.Boolean(), nullable=False),
        sa.Column('path_original', sa.String(length=255), nullable=False),
        sa.Column('path_medium', sa.String(length=255), nullable=False),
        sa.Column('path_thumbnail', sa.String(length=255), nullable=False),
        sa.Column('mime_type', sa.String(length=50), nullable=False),
        sa.Column('file_size', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.Column('deleted_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_photos_parent_id'), 'photos', ['parent_id'], unique=False)
    op.create_index(op.f('ix_photos_uploader_id'), 'photos', ['uploader_id'], unique=False)
    op.create_index(op.f('ix_photos_deleted_at'), 'photos', ['deleted_at'], unique=False)
    op.create_index('ix_photos_parent_main', 'photos', ['parent_id', 'is_main'], unique=False)
    op.create_index(
        'uq_photos_parent_live_main',
        'photos',
        ['parent_id'],
        unique=True,
        postgresql_where=sa.text('is_main AND deleted_at IS NULL'),
        sqlite_where=sa.text('is_main = 1 AND deleted_at IS NULL'),
    )


def downgrade() -> None:
    op.drop_index('uq_photos_parent_live_main', table_name='photos')
    op.drop_index('ix_photos_parent_main', table_name='photos')
    op.drop_index(op.f('ix_photos_deleted_at'), table_name='photos')
    op.drop_index(op.f('ix_photos_uploader_id'), table_name='photos')
    op.drop_index(op.f('ix_photos_parent_id'), table_name='photos')
    op.drop_table('photos')

    op.drop_index(op.f('ix_benches_deleted_at'), table_name='benches')
    op.drop_index(op.f('ix_benches_created_by'), table_name='benches')
    op.drop_table('benches')
