"""initial donation tables

Revision ID: 4e1d2a7c9b10
Revises:
Create Date: 2025-09-02 10:21:07.114502
"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '4e1d2a7c9b10'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'donations',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('email', sa.String(length=254), nullable=False),
        sa.Column('phone', sa.String(length=20), nullable=True),
        sa.Column('amount', sa.Integer(), nullable=False),
        sa.Column('message', sa.Text(), nullable=True),
        sa.Column('anonymous', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('status', sa.String(length=16), nullable=False, server_default='pending'),
        sa.Column('order_id', sa.String(length=64), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_donations_id', 'donations', ['id'])
    op.create_index('ix_donations_status', 'donations', ['status'])
    op.create_index('ix_donations_order_id', 'donations', ['order_id'], unique=True)
    op.create_index('ix_donations_created_at', 'donations', ['created_at'])

    op.create_table(
        'disbursements',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('amount', sa.Integer(), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_disbursements_id', 'disbursements', ['id'])
    op.create_index('ix_disbursements_created_at', 'disbursements', ['created_at'])

    op.create_table(
        'admin_sessions',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('token', sa.String(length=64), nullable=False),
        sa.Column('expires_at', sa.DateTime(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_admin_sessions_id', 'admin_sessions', ['id'])
    op.create_index('ix_admin_sessions_token', 'admin_sessions', ['token'], unique=True)
    op.create_index('ix_admin_sessions_expires_at', 'admin_sessions', ['expires_at'])


def downgrade() -> None:
    op.drop_index('ix_admin_sessions_expires_at', table_name='admin_sessions')
    op.drop_index('ix_admin_sessions_token', table_name='admin_sessions')
    op.drop_index('ix_admin_sessions_id', table_name='admin_sessions')
    op.drop_table('admin_sessions')

    op.drop_index('ix_disbursements_created_at', table_name='disbursements')
    op.drop_index('ix_disbursements_id', table_name='disbursements')
    op.drop_table('disbursements')

    op.drop_index('ix_donations_created_at', table_name='donations')
    op.drop_index('ix_donations_order_id', table_name='donations')
    op.drop_index('ix_donations_status', table_name='donations')
    op.drop_index('ix_donations_id', table_name='donations')
    op.drop_table('donations')
