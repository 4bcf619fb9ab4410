"""create_ceasefire_tables

Revision ID: c1a2f3e4d5b6
Revises:
Create Date: 2026-10-19 12:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = 'c1a2f3e4d5b6'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'profiles',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('username', sa.String(50), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('role', sa.String(20), server_default='fighter', nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_profiles_username', 'profiles', ['username'], unique=True)
    op.create_index('ix_profiles_email', 'profiles', ['email'], unique=True)

    op.create_table(
        'fights',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('title', sa.String(200), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('creator_id', sa.String(36), sa.ForeignKey('profiles.id'), nullable=False),
        sa.Column('opponent_email', sa.String(255), nullable=True),
        sa.Column('opponent_user_id', sa.String(36), sa.ForeignKey('profiles.id'), nullable=True),
        sa.Column('mediator_id', sa.String(36), sa.ForeignKey('profiles.id'), nullable=True),
        sa.Column('creator_animal', sa.String(20), nullable=False),
        sa.Column('opponent_animal', sa.String(20), nullable=True),
        sa.Column('status', sa.String(20), server_default='pending', nullable=False),
        sa.Column('resolution', sa.Text(), nullable=True),
        sa.Column('opponent_accepted', sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column('opponent_accepted_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_fight_creator', 'fights', ['creator_id'])
    op.create_index('ix_fight_opponent_email', 'fights', ['opponent_email'])
    op.create_index('ix_fight_mediator', 'fights', ['mediator_id'])
    op.create_index('ix_fight_status', 'fights', ['status'])
    op.create_index('ix_fight_created', 'fights', ['created_at'])

    op.create_table(
        'mediator_requests',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('fight_id', sa.String(36), sa.ForeignKey('fights.id', ondelete='CASCADE'), nullable=False),
        sa.Column('mediator_id', sa.String(36), sa.ForeignKey('profiles.id'), nullable=False),
        sa.Column('proposal_message', sa.Text(), nullable=False),
        sa.Column('status', sa.String(20), server_default='pending', nullable=False),
        sa.Column('accepted_by_creator', sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column('accepted_by_opponent', sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column('creator_response', sa.Text(), nullable=True),
        sa.Column('opponent_response', sa.Text(), nullable=True),
        sa.Column('accepted_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_mediator_request_fight', 'mediator_requests', ['fight_id'])
    op.create_index('ix_mediator_request_mediator', 'mediator_requests', ['mediator_id'])
    op.create_index('ix_mediator_request_status', 'mediator_requests', ['status'])

    op.create_table(
        'fight_activities',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('fight_id', sa.String(36), sa.ForeignKey('fights.id', ondelete='CASCADE'), nullable=False),
        sa.Column('user_id', sa.String(36), sa.ForeignKey('profiles.id'), nullable=False),
        sa.Column('activity_type', sa.String(40), nullable=False),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_activity_fight_created', 'fight_activities', ['fight_id', 'created_at'])


def downgrade() -> None:
    op.drop_index('ix_activity_fight_created', table_name='fight_activities')
    op.drop_table('fight_activities')

    op.drop_index('ix_mediator_request_status', table_name='mediator_requests')
    op.drop_index('ix_mediator_request_mediator', table_name='mediator_requests')
    op.drop_index('ix_mediator_request_fight', table_name='mediator_requests')
    op.drop_table('mediator_requests')

    op.drop_index('ix_fight_created', table_name='fights')
    op.drop_index('ix_fight_status', table_name='fights')
    op.drop_index('ix_fight_mediator', table_name='fights')
    op.drop_index('ix_fight_opponent_email', table_name='fights')
    op.drop_index('ix_fight_creator', table_name='fights')
    op.drop_table('fights')

    op.drop_index('ix_profiles_email', table_name='profiles')
    op.drop_index('ix_profiles_username', table_name='profiles')
    op.drop_table('profiles')
