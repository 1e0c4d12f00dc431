"""Create owners, shops, tenants, leases, rent adjustments and rent invoices

Revision ID: 20261017_000001
Revises: None
Create Date: 2026-10-17

Lease and billing tables. rent_invoices holds one row per lease month;
is_paid / paid_amount are rewritten by FIFO reconciliation.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '20261017_000001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create the lease and billing tables."""
    op.create_table(
        'owners',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('phone', sa.String(length=255), nullable=True),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('address', sa.Text(), nullable=True),
        sa.Column('bank_name', sa.String(length=255), nullable=True),
        sa.Column('bank_account_number', sa.String(length=255), nullable=True),
        sa.Column('bank_branch', sa.String(length=255), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )

    op.create_table(
        'shops',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('shop_number', sa.String(length=50), nullable=False),
        sa.Column('floor', sa.String(length=50), nullable=False),
        sa.Column('square_feet', sa.Numeric(precision=10, scale=2), nullable=True),
        sa.Column(
            'status',
            sa.Enum('vacant', 'occupied', name='shop_status'),
            nullable=False,
            server_default='vacant'
        ),
        sa.Column('owner_id', sa.Integer(), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('is_deleted', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('deleted_at', sa.DateTime(), nullable=True),
        sa.Column('deletion_reason', sa.Text(), nullable=True),
        sa.Column('deleted_by', sa.String(length=255), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['owner_id'], ['owners.id'], name='fk_shops_owner_id'),
    )

    op.create_table(
        'tenants',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('phone', sa.String(length=50), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('business_name', sa.String(length=255), nullable=True),
        sa.Column('nid_passport', sa.String(length=255), nullable=True),
        sa.Column('permanent_address', sa.Text(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column('is_deleted', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('deleted_at', sa.DateTime(), nullable=True),
        sa.Column('deletion_reason', sa.Text(), nullable=True),
        sa.Column('deleted_by', sa.String(length=255), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )

    op.create_table(
        'leases',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('tenant_id', sa.Integer(), nullable=False),
        sa.Column('shop_id', sa.Integer(), nullable=False),
        sa.Column('start_date', sa.Date(), nullable=False),
        sa.Column('end_date', sa.Date(), nullable=False),
        sa.Column('monthly_rent', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('opening_due_balance', sa.Numeric(precision=12, scale=2), nullable=False, server_default='0'),
        sa.Column('security_deposit', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('security_deposit_used', sa.Numeric(precision=12, scale=2), nullable=False, server_default='0'),
        sa.Column(
            'status',
            sa.Enum('active', 'expiring_soon', 'expired', 'terminated', name='lease_status'),
            nullable=False,
            server_default='active'
        ),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('termination_notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['tenant_id'], ['tenants.id'], name='fk_leases_tenant_id'),
        sa.ForeignKeyConstraint(['shop_id'], ['shops.id'], name='fk_leases_shop_id'),
    )
    op.create_index('ix_leases_tenant_id', 'leases', ['tenant_id'])
    op.create_index('ix_leases_shop_id', 'leases', ['shop_id'])
    op.create_index('ix_leases_status', 'leases', ['status'])

    op.create_table(
        'rent_adjustments',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('lease_id', sa.Integer(), nullable=False),
        sa.Column('previous_rent', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('new_rent', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('adjustment_amount', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('effective_date', sa.Date(), nullable=False),
        sa.Column('agreement_terms', sa.Text(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(
            ['lease_id'],
            ['leases.id'],
            name='fk_rent_adjustments_lease_id',
            ondelete='CASCADE'
        ),
    )
    op.create_index('ix_rent_adjustments_lease_id', 'rent_adjustments', ['lease_id'])

    op.create_table(
        'rent_invoices',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('lease_id', sa.Integer(), nullable=False),
        sa.Column('tenant_id', sa.Integer(), nullable=False),
        sa.Column('year', sa.Integer(), nullable=False),
        sa.Column('month', sa.Integer(), nullable=False),
        sa.Column('amount', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('due_date', sa.Date(), nullable=False),
        sa.Column('is_paid', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('paid_amount', sa.Numeric(precision=12, scale=2), nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(
            ['lease_id'],
            ['leases.id'],
            name='fk_rent_invoices_lease_id',
            ondelete='CASCADE'
        ),
        sa.ForeignKeyConstraint(['tenant_id'], ['tenants.id'], name='fk_rent_invoices_tenant_id'),
        sa.UniqueConstraint('lease_id', 'year', 'month', name='uq_rent_invoices_lease_month'),
    )
    op.create_index('ix_rent_invoices_lease_id', 'rent_invoices', ['lease_id'])
    op.create_index('ix_rent_invoices_tenant_id', 'rent_invoices', ['tenant_id'])
    op.create_index('ix_rent_invoices_due_date', 'rent_invoices', ['due_date'])


def downgrade() -> None:
    """Drop the lease and billing tables."""
    op.drop_index('ix_rent_invoices_due_date', table_name='rent_invoices')
    op.drop_index('ix_rent_invoices_tenant_id', table_name='rent_invoices')
    op.drop_index('ix_rent_invoices_lease_id', table_name='rent_invoices')
    op.drop_table('rent_invoices')
    op.drop_index('ix_rent_adjustments_lease_id', table_name='rent_adjustments')
    op.drop_table('rent_adjustments')
    op.drop_index('ix_leases_status', table_name='leases')
    op.drop_index('ix_leases_shop_id', table_name='leases')
    op.drop_index('ix_leases_tenant_id', table_name='leases')
    op.drop_table('leases')
    op.drop_table('tenants')
    op.drop_table('shops')
    op.drop_table('owners')
