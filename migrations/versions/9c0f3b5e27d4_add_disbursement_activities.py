"""add disbursement activities and evidence files

Revision ID: 9c0f3b5e27d4
Revises: 4e1d2a7c9b10
Create Date: 2025-10-14 16:48:33.902215
"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '9c0f3b5e27d4'
down_revision: Union[str, Sequence[str], None] = '4e1d2a7c9b10'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'disbursement_activities',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('disbursement_id', sa.Integer(), nullable=False),
        sa.Column('activity_time', sa.DateTime(), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(
            ['disbursement_id'],
            ['disbursements.id'],
            name='fk_disbursement_activities_disbursement_id',  # named for SQLite batch mode
            ondelete='CASCADE',
        ),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_disbursement_activities_id', 'disbursement_activities', ['id'])
    op.create_index(
        'ix_disbursement_activities_disbursement_id',
        'disbursement_activities',
        ['disbursement_id'],
    )

    op.create_table(
        'activity_files',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('activity_id', sa.Integer(), nullable=False),
        sa.Column('file_url', sa.String(length=500), nullable=False),
        sa.Column('file_name', sa.String(length=255), nullable=False),
        sa.Column('file_type', sa.String(length=50), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(
            ['activity_id'],
            ['disbursement_activities.id'],
            name='fk_activity_files_activity_id',
            ondelete='CASCADE',
        ),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_activity_files_id', 'activity_files', ['id'])
    op.create_index('ix_activity_files_activity_id', 'activity_files', ['activity_id'])


def downgrade() -> None:
    op.drop_index('ix_activity_files_activity_id', table_name='activity_files')
    op.drop_index('ix_activity_files_id', table_name='activity_files')
    op.drop_table('activity_files')

    op.drop_index('ix_disbursement_activities_disbursement_id', table_name='disbursement_activities')
    op.drop_index('ix_disbursement_activities_id', table_name='disbursement_activities')
    op.drop_table('disbursement_activities')
