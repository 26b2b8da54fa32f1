"""Initial schema for ledger import system

Revision ID: 001_initial_schema
Revises: 
Create Date: 2025-10-14

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '001_initial_schema'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    # Create records table
    op.create_table(
        'records',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False, comment='Row name'),
        sa.Column('amount', sa.Float(), nullable=False, comment='Row amount (non-negative)'),
        sa.Column('date', sa.Date(), nullable=False, comment='Row date, within the import month'),
        sa.Column('verified', sa.Boolean(), server_default=sa.text('false'),
                  nullable=False, comment='True if the row was marked verified'),
        sa.Column('sheet_name', sa.String(length=255), nullable=False,
                  comment='Worksheet the row was imported from'),
        sa.Column('imported_at', sa.TIMESTAMP(), server_default=sa.text('CURRENT_TIMESTAMP'),
                  nullable=False, comment='Server-assigned import timestamp'),
        sa.PrimaryKeyConstraint('id'),
        sa.CheckConstraint('amount >= 0', name='records_amount_check'),
        comment='Rows imported from uploaded spreadsheets'
    )

    # Retrieval by sheet ordered by date
    op.create_index('idx_records_sheet_date', 'records', ['sheet_name', 'date'])


def downgrade() -> None:
    op.drop_index('idx_records_sheet_date', table_name='records')
    op.drop_table('records')
