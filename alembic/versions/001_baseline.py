"""baseline schema - all tables

Revision ID: 001_baseline
Revises:
Create Date: 2026-10-18
"""
from alembic import op
import sqlalchemy as sa

revision = '001_baseline'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    # Users table
    op.create_table('users',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('password_hash', sa.String(255), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    # User settings table
    op.create_table('user_settings',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('deepseek_api_key', sa.String(255), nullable=True),
        sa.Column('ai_depth', sa.String(20), nullable=False, server_default='medium'),
        sa.Column('theme', sa.String(20), nullable=False, server_default='system'),
        sa.Column('discrete_mode', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('notifications_enabled', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('notification_time', sa.String(5), nullable=False, server_default='21:00'),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_user_settings_user_id', 'user_settings', ['user_id'], unique=True)

    # Entries table - one per user per day
    op.create_table('entries',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('entry_date', sa.Date(), nullable=False),
        sa.Column('content', sa.Text(), nullable=True),
        sa.Column('mood', sa.Integer(), nullable=True),
        sa.Column('energy', sa.Integer(), nullable=True),
        sa.Column('sleep_hours', sa.Float(), nullable=True),
        sa.Column('sleep_quality', sa.Integer(), nullable=True),
        sa.Column('stress', sa.Integer(), nullable=True),
        sa.Column('focus', sa.Integer(), nullable=True),
        sa.Column('physical_discomfort', sa.Integer(), nullable=True),
        sa.Column('highlight', sa.Text(), nullable=True),
        sa.Column('is_private', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('is_favorite', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id', 'entry_date', name='uq_entries_user_date')
    )
    op.create_index('ix_entries_user_id', 'entries', ['user_id'])
    op.create_index('ix_entries_entry_date', 'entries', ['entry_date'])

    # Tags table - user_id NULL for system tags
    op.create_table('tags',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=True),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('color', sa.String(20), nullable=False, server_default='#6366f1'),
        sa.Column('icon', sa.String(50), nullable=False, server_default='tag'),
        sa.Column('is_system', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_tags_user_id', 'tags', ['user_id'])
    op.create_index('ix_tags_name', 'tags', ['name'])

    # Entry <-> tag association
    op.create_table('entry_tags',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('entry_id', sa.Integer(), nullable=False),
        sa.Column('tag_id', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(['entry_id'], ['entries.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['tag_id'], ['tags.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('entry_id', 'tag_id', name='uq_entry_tags_entry_tag')
    )
    op.create_index('ix_entry_tags_entry_id', 'entry_tags', ['entry_id'])
    op.create_index('ix_entry_tags_tag_id', 'entry_tags', ['tag_id'])

    # Emotions detected by the latest insight
    op.create_table('entry_emotions',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('entry_id', sa.Integer(), nullable=False),
        sa.Column('emotion', sa.String(50), nullable=False),
        sa.Column('intensity', sa.Integer(), nullable=False, server_default='5'),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(['entry_id'], ['entries.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_entry_emotions_entry_id', 'entry_emotions', ['entry_id'])

    # AI insights
    op.create_table('ai_insights',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('entry_id', sa.Integer(), nullable=True),
        sa.Column('insight_type', sa.String(30), nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('metadata', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['entry_id'], ['entries.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_ai_insights_user_id', 'ai_insights', ['user_id'])
    op.create_index('ix_ai_insights_entry_id', 'ai_insights', ['entry_id'])
    op.create_index('ix_ai_insights_insight_type', 'ai_insights', ['insight_type'])


def downgrade():
    op.drop_table('ai_insights')
    op.drop_table('entry_emotions')
    op.drop_table('entry_tags')
    op.drop_table('tags')
    op.drop_table('entries')
    op.drop_table('user_settings')
    op.drop_table('users')
