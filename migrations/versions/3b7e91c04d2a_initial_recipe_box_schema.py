"""Initial Recipe Box schema

Revision ID: 3b7e91c04d2a
Revises:
Create Date: 2026-10-17 09:12:44.118302

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '3b7e91c04d2a'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table('user',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('email', sa.String(length=120), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('display_name', sa.String(length=100), nullable=True),
        sa.Column('photo_url', sa.String(length=500), nullable=True),
        sa.Column('bio', sa.Text(), nullable=True),
        sa.Column('tier', sa.String(length=20), nullable=False),
        sa.Column('role', sa.String(length=20), nullable=False),
        sa.Column('profile_visibility', sa.String(length=20), nullable=False),
        sa.Column('friends_visibility', sa.String(length=20), nullable=False),
        sa.Column('recipe_visibility', sa.String(length=20), nullable=False),
        sa.Column('custom_categories', sa.JSON(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    with op.batch_alter_table('user', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_user_email'), ['email'], unique=True)
        batch_op.create_index(batch_op.f('ix_user_display_name'), ['display_name'], unique=False)

    op.create_table('recipe',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=200), nullable=False),
        sa.Column('servings', sa.String(length=50), nullable=True),
        sa.Column('prep_time', sa.String(length=50), nullable=True),
        sa.Column('cook_time', sa.String(length=50), nullable=True),
        sa.Column('categories', sa.JSON(), nullable=True),
        sa.Column('image_url', sa.String(length=500), nullable=True),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('source_url', sa.String(length=500), nullable=True),
        sa.Column('source_name', sa.String(length=200), nullable=True),
        sa.Column('last_scraped', sa.DateTime(), nullable=True),
        sa.Column('original_creator_id', sa.Integer(), nullable=True),
        sa.Column('original_creator_name', sa.String(length=100), nullable=True),
        sa.Column('visibility', sa.String(length=20), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['user_id'], ['user.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['original_creator_id'], ['user.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id')
    )
    with op.batch_alter_table('recipe', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_recipe_name'), ['name'], unique=False)
        batch_op.create_index(batch_op.f('ix_recipe_user_id'), ['user_id'], unique=False)

    op.create_table('recipe_ingredient',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('recipe_id', sa.Integer(), nullable=False),
        sa.Column('position', sa.Integer(), nullable=False),
        sa.Column('amount', sa.String(length=50), nullable=True),
        sa.Column('unit', sa.String(length=30), nullable=True),
        sa.Column('item', sa.String(length=500), nullable=False),
        sa.Column('group_name', sa.String(length=100), nullable=True),
        sa.ForeignKeyConstraint(['recipe_id'], ['recipe.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    with op.batch_alter_table('recipe_ingredient', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_recipe_ingredient_recipe_id'), ['recipe_id'], unique=False)

    op.create_table('recipe_instruction',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('recipe_id', sa.Integer(), nullable=False),
        sa.Column('position', sa.Integer(), nullable=False),
        sa.Column('text', sa.Text(), nullable=False),
        sa.Column('group_name', sa.String(length=100), nullable=True),
        sa.ForeignKeyConstraint(['recipe_id'], ['recipe.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    with op.batch_alter_table('recipe_instruction', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_recipe_instruction_recipe_id'), ['recipe_id'], unique=False)

    op.create_table('friend_request',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('sender_id', sa.Integer(), nullable=False),
        sa.Column('receiver_id', sa.Integer(), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['sender_id'], ['user.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['receiver_id'], ['user.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    with op.batch_alter_table('friend_request', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_friend_request_sender_id'), ['sender_id'], unique=False)
        batch_op.create_index(batch_op.f('ix_friend_request_receiver_id'), ['receiver_id'], unique=False)

    op.create_table('friendship',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_a_id', sa.Integer(), nullable=False),
        sa.Column('user_b_id', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.CheckConstraint('user_a_id < user_b_id', name='ck_friendship_order'),
        sa.ForeignKeyConstraint(['user_a_id'], ['user.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['user_b_id'], ['user.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_a_id', 'user_b_id', name='uq_friendship_pair')
    )
    with op.batch_alter_table('friendship', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_friendship_user_a_id'), ['user_a_id'], unique=False)
        batch_op.create_index(batch_op.f('ix_friendship_user_b_id'), ['user_b_id'], unique=False)

    op.create_table('follow',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('follower_id', sa.Integer(), nullable=False),
        sa.Column('followed_id', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['follower_id'], ['user.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['followed_id'], ['user.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('follower_id', 'followed_id', name='uq_follow_pair')
    )
    with op.batch_alter_table('follow', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_follow_follower_id'), ['follower_id'], unique=False)
        batch_op.create_index(batch_op.f('ix_follow_followed_id'), ['followed_id'], unique=False)

    op.create_table('shared_recipe',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('recipe_id', sa.Integer(), nullable=False),
        sa.Column('recipe_name', sa.String(length=200), nullable=False),
        sa.Column('recipe_image_url', sa.String(length=500), nullable=True),
        sa.Column('sender_id', sa.Integer(), nullable=False),
        sa.Column('receiver_id', sa.Integer(), nullable=False),
        sa.Column('message', sa.String(length=500), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['recipe_id'], ['recipe.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['sender_id'], ['user.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['receiver_id'], ['user.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    with op.batch_alter_table('shared_recipe', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_shared_recipe_recipe_id'), ['recipe_id'], unique=False)
        batch_op.create_index(batch_op.f('ix_shared_recipe_sender_id'), ['sender_id'], unique=False)
        batch_op.create_index(batch_op.f('ix_shared_recipe_receiver_id'), ['receiver_id'], unique=False)
        batch_op.create_index(batch_op.f('ix_shared_recipe_status'), ['status'], unique=False)

    op.create_table('notification',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('type', sa.String(length=30), nullable=False),
        sa.Column('from_user_id', sa.Integer(), nullable=False),
        sa.Column('from_user_name', sa.String(length=100), nullable=True),
        sa.Column('from_user_photo', sa.String(length=500), nullable=True),
        sa.Column('related_item_id', sa.Integer(), nullable=True),
        sa.Column('related_item_name', sa.String(length=200), nullable=True),
        sa.Column('recipe_id', sa.Integer(), nullable=True),
        sa.Column('is_read', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['user_id'], ['user.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['from_user_id'], ['user.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    with op.batch_alter_table('notification', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_notification_user_id'), ['user_id'], unique=False)
        batch_op.create_index(batch_op.f('ix_notification_related_item_id'), ['related_item_id'], unique=False)
        batch_op.create_index(batch_op.f('ix_notification_is_read'), ['is_read'], unique=False)
        batch_op.create_index(batch_op.f('ix_notification_created_at'), ['created_at'], unique=False)


def downgrade():
    op.drop_table('notification')
    op.drop_table('shared_recipe')
    op.drop_table('follow')
    op.drop_table('friendship')
    op.drop_table('friend_request')
    op.drop_table('recipe_instruction')
    op.drop_table('recipe_ingredient')
    op.drop_table('recipe')
    op.drop_table('user')
