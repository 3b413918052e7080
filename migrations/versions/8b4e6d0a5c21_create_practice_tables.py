"""create clients, session_packages, scheduled_sessions, consumed_sessions

Revision ID: 8b4e6d0a5c21
Revises: 3f1a9c2d7b10
Create Date: 2026-09-28 10:40:03.552917

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '8b4e6d0a5c21'
down_revision: Union[str, Sequence[str], None] = '3f1a9c2d7b10'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        'clients',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('account_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('full_name', sa.String(length=255), nullable=False),
        sa.Column('rut', sa.String(length=32), nullable=True),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('phone', sa.String(length=64), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('birth_date', sa.Date(), nullable=True),
        sa.Column('gender', sa.String(length=32), nullable=True),
        sa.Column('status', sa.String(length=16), server_default='new', nullable=False),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.TIMESTAMP(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_clients_account_id', 'clients', ['account_id'])

    op.create_table(
        'session_packages',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('account_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('client_id', sa.String(length=36), sa.ForeignKey('clients.id'), nullable=False),
        sa.Column('total_sessions', sa.Integer(), nullable=False),
        sa.Column('used_sessions', sa.Integer(), server_default='0', nullable=False),
        sa.Column('status', sa.String(length=16), server_default='active', nullable=False),
        sa.Column('start_date', sa.Date(), nullable=True),
        sa.Column('expiry_date', sa.Date(), nullable=True),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_session_packages_account_id', 'session_packages', ['account_id'])
    op.create_index('ix_session_packages_client_id', 'session_packages', ['client_id'])

    op.create_table(
        'scheduled_sessions',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('account_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('client_id', sa.String(length=36), sa.ForeignKey('clients.id'), nullable=False),
        sa.Column('package_id', sa.String(length=36), sa.ForeignKey('session_packages.id'), nullable=True),
        sa.Column('session_date', sa.Date(), nullable=False),
        sa.Column('session_time', sa.Time(), nullable=False),
        sa.Column('status', sa.String(length=16), server_default='scheduled', nullable=False),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_scheduled_sessions_account_id', 'scheduled_sessions', ['account_id'])
    op.create_index('ix_scheduled_sessions_client_id', 'scheduled_sessions', ['client_id'])
    op.create_index('ix_scheduled_sessions_package_id', 'scheduled_sessions', ['package_id'])
    op.create_index(
        'ix_scheduled_sessions_account_date', 'scheduled_sessions',
        ['account_id', 'session_date', 'session_time'],
    )

    op.create_table(
        'consumed_sessions',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('account_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('client_id', sa.String(length=36), sa.ForeignKey('clients.id'), nullable=False),
        sa.Column('package_id', sa.String(length=36), sa.ForeignKey('session_packages.id'), nullable=False),
        sa.Column('consumed_at', sa.TIMESTAMP(timezone=True), nullable=False),
        sa.Column('note', sa.Text(), nullable=True),
        sa.Column('origin', sa.String(length=32), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_consumed_sessions_account_id', 'consumed_sessions', ['account_id'])
    op.create_index('ix_consumed_sessions_client_id', 'consumed_sessions', ['client_id'])
    op.create_index('ix_consumed_sessions_package_id', 'consumed_sessions', ['package_id'])
    op.create_index('ix_consumed_sessions_consumed_at', 'consumed_sessions', ['consumed_at'])


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table('consumed_sessions')
    op.drop_table('scheduled_sessions')
    op.drop_table('session_packages')
    op.drop_table('clients')
