"""create users, videos and snapshot tables

Revision ID: 3f2c9a1b7d40
Revises:
Create Date: 2026-10-19 09:12:31.118402

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '3f2c9a1b7d40'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.String(32), primary_key=True),
        sa.Column('email', sa.String(320), nullable=False, unique=True),
        sa.Column('name', sa.Text(), nullable=False),
        sa.Column('password_hash', sa.Text(), nullable=False),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), nullable=False),
    )

    op.create_table(
        'videos',
        sa.Column('id', sa.String(32), primary_key=True),
        sa.Column('owner_id', sa.String(32), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('video_id', sa.String(64), nullable=False),
        sa.Column('title', sa.Text(), nullable=False),
        sa.Column('thumbnail_url', sa.Text(), nullable=False),
        sa.Column('url', sa.Text(), nullable=False),
        sa.Column('added_at', sa.TIMESTAMP(timezone=True), nullable=False),
        sa.UniqueConstraint('owner_id', 'video_id', name='uq_videos_owner_video'),
    )
    op.create_index('ix_videos_owner_id', 'videos', ['owner_id'])

    op.create_table(
        'video_metrics_snapshot',
        sa.Column('id', sa.BigInteger().with_variant(sa.Integer(), 'sqlite'), primary_key=True, autoincrement=True),
        sa.Column('video_pk', sa.String(32), sa.ForeignKey('videos.id', ondelete='CASCADE'), nullable=False),
        sa.Column('position', sa.Integer(), nullable=False),
        sa.Column('captured_at', sa.TIMESTAMP(timezone=True), nullable=False),
        sa.Column('view_count', sa.BIGINT(), nullable=False),
        sa.Column('like_count', sa.BIGINT(), nullable=False),
        sa.Column('comment_count', sa.BIGINT(), nullable=False),
        sa.CheckConstraint('view_count >= 0 AND like_count >= 0 AND comment_count >= 0',
                           name='ck_video_metrics_non_negative'),
    )

    # Storage order key: one row per (video, position)
    op.create_index('idx_video_metrics_video_position_unique',
                    'video_metrics_snapshot',
                    ['video_pk', 'position'],
                    unique=True)


def downgrade() -> None:
    op.drop_index('idx_video_metrics_video_position_unique', table_name='video_metrics_snapshot')
    op.drop_table('video_metrics_snapshot')
    op.drop_index('ix_videos_owner_id', table_name='videos')
    op.drop_table('videos')
    op.drop_table('users')
