"""initial_contest_schema

Revision ID: 3b9e2c4f1a7d
Revises:
Create Date: 2026-01-01 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '3b9e2c4f1a7d'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False, comment='Display name'),
        sa.Column('email', sa.String(length=255), nullable=False, comment='Email'),
        sa.Column('photo_url', sa.String(length=500), nullable=False, server_default='', comment='Avatar URL'),
        sa.Column('role', sa.String(length=20), nullable=False, server_default='user', comment='user/creator/admin'),
        sa.Column('wins_count', sa.Integer(), nullable=False, server_default='0', comment='Contests won'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_users_id', 'users', ['id'], unique=False)
    op.create_index('ix_users_email', 'users', ['email'], unique=True)
    op.create_index('ix_users_role', 'users', ['role'], unique=False)

    op.create_table(
        'contests',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('name', sa.String(length=200), nullable=False, comment='Contest name'),
        sa.Column('description', sa.Text(), nullable=False, server_default='', comment='Description'),
        sa.Column('task_instructions', sa.Text(), nullable=False, server_default='', comment='Task instructions'),
        sa.Column('contest_type', sa.String(length=50), nullable=False, server_default='', comment='Category'),
        sa.Column('price', sa.Numeric(precision=15, scale=2), nullable=False, comment='Entry fee'),
        sa.Column('prize_money', sa.Numeric(precision=15, scale=2), nullable=False, server_default='0', comment='Prize'),
        sa.Column('deadline', sa.DateTime(timezone=True), nullable=False, comment='Submission deadline'),
        sa.Column('creator_id', sa.Integer(), nullable=False, comment='Creator user id'),
        sa.Column('creator_name', sa.String(length=100), nullable=False, server_default='', comment='Creator name snapshot'),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='pending', comment='pending/confirmed'),
        sa.Column('participation_limit', sa.Integer(), nullable=False, server_default='0', comment='0 means unlimited'),
        sa.Column('participants_count', sa.Integer(), nullable=False, server_default='0', comment='Admitted participants'),
        sa.Column('winner_user_id', sa.Integer(), nullable=True, comment='Declared winner'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.CheckConstraint('price >= 0', name='ck_contests_price_non_negative'),
        sa.CheckConstraint('participation_limit >= 0', name='ck_contests_limit_non_negative'),
        sa.CheckConstraint('participants_count >= 0', name='ck_contests_count_non_negative'),
        sa.ForeignKeyConstraint(['creator_id'], ['users.id']),
        sa.ForeignKeyConstraint(['winner_user_id'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_contests_id', 'contests', ['id'], unique=False)
    op.create_index('ix_contests_contest_type', 'contests', ['contest_type'], unique=False)
    op.create_index('ix_contests_creator_id', 'contests', ['creator_id'], unique=False)
    op.create_index('ix_contests_status', 'contests', ['status'], unique=False)
    op.create_index('ix_contests_creator_status', 'contests', ['creator_id', 'status'], unique=False)

    op.create_table(
        'payments',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False, comment='Payer'),
        sa.Column('contest_id', sa.Integer(), nullable=False, comment='Contest paid for'),
        sa.Column('amount', sa.Numeric(precision=15, scale=2), nullable=False, comment='Amount'),
        sa.Column('currency', sa.String(length=3), nullable=False, server_default='usd', comment='ISO-4217 code'),
        sa.Column('payment_type', sa.String(length=20), nullable=False, server_default='entry', comment='entry/update'),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='pending', comment='pending/completed/failed'),
        sa.Column('gateway_intent_ref', sa.String(length=255), nullable=False, comment='Gateway intent id'),
        sa.Column('transaction_ref', sa.String(length=255), nullable=True, comment='Gateway transaction id'),
        sa.Column('paid_at', sa.DateTime(timezone=True), nullable=True, comment='Completed at'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['users.id']),
        sa.ForeignKeyConstraint(['contest_id'], ['contests.id'], ondelete='RESTRICT'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('gateway_intent_ref'),
    )
    op.create_index('ix_payments_id', 'payments', ['id'], unique=False)
    op.create_index('ix_payments_user_id', 'payments', ['user_id'], unique=False)
    op.create_index('ix_payments_contest_id', 'payments', ['contest_id'], unique=False)
    op.create_index('ix_payments_status', 'payments', ['status'], unique=False)
    op.create_index('ix_payments_created_at', 'payments', ['created_at'], unique=False)
    op.create_index('ix_payments_user_contest_status', 'payments', ['user_id', 'contest_id', 'status'], unique=False)
    op.create_index('ix_payments_status_created', 'payments', ['status', 'created_at'], unique=False)

    op.create_table(
        'participations',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('contest_id', sa.Integer(), nullable=False, comment='Contest'),
        sa.Column('user_id', sa.Integer(), nullable=False, comment='Participant'),
        sa.Column('payment_id', sa.Integer(), nullable=False, comment='Funding payment'),
        sa.Column('submission_link', sa.String(length=2048), nullable=False, server_default='', comment='Submission link'),
        sa.Column('submission_text', sa.Text(), nullable=False, server_default='', comment='Submission text'),
        sa.Column('payment_status', sa.String(length=20), nullable=False, server_default='paid', comment='Always paid'),
        sa.Column('user_name', sa.String(length=100), nullable=False, server_default='', comment='Name snapshot'),
        sa.Column('user_email', sa.String(length=255), nullable=False, server_default='', comment='Email snapshot'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.ForeignKeyConstraint(['contest_id'], ['contests.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id']),
        sa.ForeignKeyConstraint(['payment_id'], ['payments.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('contest_id', 'user_id', name='uq_participations_contest_user'),
    )
    op.create_index('ix_participations_id', 'participations', ['id'], unique=False)
    op.create_index('ix_participations_contest_id', 'participations', ['contest_id'], unique=False)
    op.create_index('ix_participations_user_id', 'participations', ['user_id'], unique=False)


def downgrade() -> None:
    op.drop_table('participations')
    op.drop_table('payments')
    op.drop_table('contests')
    op.drop_table('users')
