"""report record tables

Revision ID: 0001_report_records
Revises:
Create Date: 2026-10-19
"""
from __future__ import annotations
from alembic import op
import sqlalchemy as sa

revision = '0001_report_records'
down_revision = None
branch_labels = None
depends_on = None


def _updated_at():
    return sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=True)


def upgrade():
    op.create_table('sales_records',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.String(length=64), nullable=False),
        sa.Column('manager_id', sa.String(length=64), nullable=True),
        sa.Column('territory', sa.String(length=64), nullable=False),
        sa.Column('customer_name', sa.String(length=128), nullable=False),
        sa.Column('amount_cents', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('team_comparison', sa.JSON(), nullable=True),
        sa.Column('manager_notes', sa.Text(), nullable=True),
        _updated_at(),
    )
    op.create_index('ix_sales_records_user_id', 'sales_records', ['user_id'])
    op.create_index('ix_sales_records_manager_id', 'sales_records', ['manager_id'])
    op.create_index('ix_sales_records_territory', 'sales_records', ['territory'])

    op.create_table('service_tickets',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('technician_id', sa.String(length=64), nullable=True),
        sa.Column('assigned_manager_id', sa.String(length=64), nullable=True),
        sa.Column('territory', sa.String(length=64), nullable=False),
        sa.Column('customer_name', sa.String(length=128), nullable=False),
        sa.Column('summary', sa.String(length=255), nullable=False, server_default=''),
        sa.Column('status', sa.String(length=32), nullable=False, server_default='OPEN'),
        _updated_at(),
    )
    op.create_index('ix_service_tickets_technician_id', 'service_tickets', ['technician_id'])
    op.create_index('ix_service_tickets_assigned_manager_id', 'service_tickets', ['assigned_manager_id'])
    op.create_index('ix_service_tickets_territory', 'service_tickets', ['territory'])

    op.create_table('customers',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(length=128), nullable=False),
        sa.Column('owner_id', sa.String(length=64), nullable=True),
        sa.Column('territory', sa.String(length=64), nullable=False),
        sa.Column('profit_margin', sa.Integer(), nullable=True),
        sa.Column('credit_score', sa.Integer(), nullable=True),
        sa.Column('internal_notes', sa.Text(), nullable=True),
        _updated_at(),
    )
    op.create_index('ix_customers_name', 'customers', ['name'])
    op.create_index('ix_customers_owner_id', 'customers', ['owner_id'])
    op.create_index('ix_customers_territory', 'customers', ['territory'])

    op.create_table('payments',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('customer_name', sa.String(length=128), nullable=False),
        sa.Column('territory', sa.String(length=64), nullable=False),
        sa.Column('amount_cents', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('detailed_financials', sa.JSON(), nullable=True),
        sa.Column('credit_limit_cents', sa.Integer(), nullable=True),
        _updated_at(),
    )
    op.create_index('ix_payments_territory', 'payments', ['territory'])


def downgrade():
    for table in ('payments', 'customers', 'service_tickets', 'sales_records'):
        op.drop_table(table)
