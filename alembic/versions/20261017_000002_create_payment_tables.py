"""Create payments, deletion_logs and lease_settlements tables

Revision ID: 20261017_000002
Revises: 20261017_000001
Create Date: 2026-10-17

Payments are append-only and soft-deleted; every soft delete writes a
snapshot to deletion_logs. lease_settlements keeps one confirmed settlement
per terminated lease.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '20261017_000002'
down_revision: Union[str, None] = '20261017_000001'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create payment, audit and settlement tables."""
    op.create_table(
        'payments',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('tenant_id', sa.Integer(), nullable=False),
        sa.Column('lease_id', sa.Integer(), nullable=False),
        sa.Column('amount', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('payment_date', sa.Date(), nullable=False),
        sa.Column('rent_months', sa.JSON(), nullable=True),
        sa.Column('receipt_number', sa.String(length=255), nullable=True),
        sa.Column(
            'method',
            sa.Enum('cash', 'bank', 'transfer', name='payment_method'),
            nullable=False,
            server_default='cash'
        ),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column('is_deleted', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('deleted_at', sa.DateTime(), nullable=True),
        sa.Column('deletion_reason', sa.Text(), nullable=True),
        sa.Column('deleted_by', sa.String(length=255), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['tenant_id'], ['tenants.id'], name='fk_payments_tenant_id'),
        sa.ForeignKeyConstraint(['lease_id'], ['leases.id'], name='fk_payments_lease_id'),
    )
    op.create_index('ix_payments_tenant_id', 'payments', ['tenant_id'])
    op.create_index('ix_payments_lease_id', 'payments', ['lease_id'])

    op.create_table(
        'deletion_logs',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('record_type', sa.String(length=50), nullable=False),
        sa.Column('record_id', sa.Integer(), nullable=False),
        sa.Column('record_details', sa.JSON(), nullable=False),
        sa.Column('reason', sa.Text(), nullable=False),
        sa.Column('deleted_by', sa.String(length=255), nullable=True),
        sa.Column('deleted_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_deletion_logs_record_type', 'deletion_logs', ['record_type'])

    op.create_table(
        'lease_settlements',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('lease_id', sa.Integer(), nullable=False),
        sa.Column('this_lease_current_due', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('security_deposit_available', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('security_deposit_applied', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('global_ledger_balance', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('global_ledger_transferred', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('final_amount', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('ledger_fingerprint', sa.String(length=64), nullable=False),
        sa.Column('confirmed_by', sa.String(length=255), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('confirmed_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(
            ['lease_id'],
            ['leases.id'],
            name='fk_lease_settlements_lease_id',
            ondelete='NO ACTION'
        ),
    )
    op.create_index('ix_lease_settlements_lease_id', 'lease_settlements', ['lease_id'], unique=True)


def downgrade() -> None:
    """Drop payment, audit and settlement tables."""
    op.drop_index('ix_lease_settlements_lease_id', table_name='lease_settlements')
    op.drop_table('lease_settlements')
    op.drop_index('ix_deletion_logs_record_type', table_name='deletion_logs')
    op.drop_table('deletion_logs')
    op.drop_index('ix_payments_lease_id', table_name='payments')
    op.drop_index('ix_payments_tenant_id', table_name='payments')
    op.drop_table('payments')
