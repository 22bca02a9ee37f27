"""Initial Melon schema

Revision ID: 001_initial
Revises:
Create Date: 2025-11-02

Accounts, sessions, profiles, posts, reactions, follows and notifications.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '001_initial'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'accounts',
        sa.Column('id', sa.Text(), nullable=False),
        sa.Column('email', sa.Text(), nullable=False),
        sa.Column('password_hash', sa.Text(), nullable=False),
        sa.Column('created_at_utc', sa.Text(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('email')
    )

    op.create_table(
        'auth_sessions',
        sa.Column('session_token', sa.Text(), nullable=False),
        sa.Column('user_id', sa.Text(), nullable=False),
        sa.Column('created_at_utc', sa.Text(), nullable=False),
        sa.Column('expires_at_utc', sa.Text(), nullable=False),
        sa.PrimaryKeyConstraint('session_token'),
        sa.ForeignKeyConstraint(['user_id'], ['accounts.id'], ondelete='CASCADE')
    )
    op.create_index('ix_auth_sessions_user', 'auth_sessions', ['user_id'])

    op.create_table(
        'profiles',
        sa.Column('id', sa.Text(), nullable=False),
        sa.Column('username', sa.Text(), nullable=False),
        sa.Column('display_name', sa.Text(), nullable=True),
        sa.Column('bio', sa.Text(), nullable=True),
        sa.Column('avatar_url', sa.Text(), nullable=True),
        sa.Column('interests_json', sa.Text(), nullable=False, server_default='[]'),
        sa.Column('onboarding_completed', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('created_at_utc', sa.Text(), nullable=False),
        sa.Column('updated_at_utc', sa.Text(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('username'),
        sa.ForeignKeyConstraint(['id'], ['accounts.id'], ondelete='CASCADE')
    )

    # No FK on parent_post_id: replies of a deleted post stay orphaned.
    op.create_table(
        'posts',
        sa.Column('id', sa.Text(), nullable=False),
        sa.Column('user_id', sa.Text(), nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('tags_json', sa.Text(), nullable=False, server_default='[]'),
        sa.Column('image_urls_json', sa.Text(), nullable=False, server_default='[]'),
        sa.Column('parent_post_id', sa.Text(), nullable=True),
        sa.Column('created_at_utc', sa.Text(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['user_id'], ['profiles.id'], ondelete='CASCADE')
    )
    op.create_index('ix_posts_parent', 'posts', ['parent_post_id'])
    op.create_index('ix_posts_user_created', 'posts', ['user_id', 'created_at_utc'])
    op.create_index('ix_posts_created', 'posts', ['created_at_utc'])

    op.create_table(
        'reactions',
        sa.Column('id', sa.Text(), nullable=False),
        sa.Column('post_id', sa.Text(), nullable=False),
        sa.Column('user_id', sa.Text(), nullable=False),
        sa.Column('emoji', sa.Text(), nullable=False),
        sa.Column('created_at_utc', sa.Text(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('post_id', 'user_id', name='uq_reactions_post_user'),
        sa.ForeignKeyConstraint(['post_id'], ['posts.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['user_id'], ['profiles.id'], ondelete='CASCADE')
    )

    op.create_table(
        'follows',
        sa.Column('id', sa.Text(), nullable=False),
        sa.Column('follower_id', sa.Text(), nullable=False),
        sa.Column('following_id', sa.Text(), nullable=False),
        sa.Column('created_at_utc', sa.Text(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('follower_id', 'following_id', name='uq_follows_pair'),
        sa.CheckConstraint('follower_id <> following_id', name='ck_follows_not_self'),
        sa.ForeignKeyConstraint(['follower_id'], ['profiles.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['following_id'], ['profiles.id'], ondelete='CASCADE')
    )
    op.create_index('ix_follows_following', 'follows', ['following_id'])

    op.create_table(
        'notifications',
        sa.Column('id', sa.Text(), nullable=False),
        sa.Column('user_id', sa.Text(), nullable=False),
        sa.Column('actor_id', sa.Text(), nullable=False),
        sa.Column('post_id', sa.Text(), nullable=True),
        sa.Column('type', sa.Text(), nullable=False),
        sa.Column('reaction_emoji', sa.Text(), nullable=True),
        sa.Column('is_read', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('created_at_utc', sa.Text(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.CheckConstraint("type IN ('reaction', 'reply', 'follow')", name='ck_notifications_type'),
        sa.ForeignKeyConstraint(['user_id'], ['profiles.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['actor_id'], ['profiles.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['post_id'], ['posts.id'], ondelete='SET NULL')
    )
    op.create_index('ix_notifications_user_created', 'notifications', ['user_id', 'created_at_utc'])


def downgrade() -> None:
    op.drop_index('ix_notifications_user_created', table_name='notifications')
    op.drop_table('notifications')
    op.drop_index('ix_follows_following', table_name='follows')
    op.drop_table('follows')
    op.drop_table('reactions')
    op.drop_index('ix_posts_created', table_name='posts')
    op.drop_index('ix_posts_user_created', table_name='posts')
    op.drop_index('ix_posts_parent', table_name='posts')
    op.drop_table('posts')
    op.drop_table('profiles')
    op.drop_index('ix_auth_sessions_user', table_name='auth_sessions')
    op.drop_table('auth_sessions')
    op.drop_table('accounts')
