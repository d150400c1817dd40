"""initial schema: catalog, reservations, payments, users, audit logs

Revision ID: 0001_initial
Revises:
Create Date: 2025-11-20
"""

from alembic import op
import sqlalchemy as sa

revision = '0001_initial'
down_revision = None
branch_labels = None
depends_on = None


def _catalog_table(name: str):
    op.create_table(
        name,
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('name', sa.String(length=200), nullable=False),
        sa.Column('city', sa.String(length=100), nullable=False, server_default=''),
        sa.Column('price', sa.Numeric(10, 2), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
    )


def upgrade():
    op.create_table(
        'users',
        sa.Column('id', sa.String(length=36), primary_key=True),
        sa.Column('email', sa.String(length=320), nullable=False),
        sa.Column('full_name', sa.String(length=200), nullable=False, server_default=''),
        sa.Column('role', sa.String(length=30), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)
    op.create_index('ix_users_role', 'users', ['role'])

    for name in ('artisans', 'sejours', 'caravanes'):
        _catalog_table(name)

    op.create_table(
        'reservations',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('customer_email', sa.String(length=320), nullable=False),
        sa.Column('customer_phone', sa.String(length=40), nullable=False),
        sa.Column('item_type', sa.String(length=20), nullable=False),
        sa.Column('item_id', sa.Integer(), nullable=False),
        sa.Column('item_name', sa.String(length=200), nullable=False),
        sa.Column('item_price', sa.Numeric(10, 2), nullable=False),
        sa.Column('check_in', sa.Date(), nullable=False),
        sa.Column('check_out', sa.Date(), nullable=False),
        sa.Column('guests', sa.Integer(), nullable=False),
        sa.Column('days', sa.Integer(), nullable=False),
        sa.Column('special_requests', sa.Text(), nullable=True),
        sa.Column('subtotal', sa.Numeric(10, 2), nullable=False),
        sa.Column('service_fee', sa.Numeric(10, 2), nullable=False),
        sa.Column('taxes', sa.Numeric(10, 2), nullable=False),
        sa.Column('total_price', sa.Numeric(10, 2), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='pending'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint('subtotal >= 0 AND service_fee >= 0 AND taxes >= 0 AND total_price >= 0', name='ck_reservations_amounts_non_negative'),
    )
    op.create_index('ix_reservations_customer_email', 'reservations', ['customer_email'])
    op.create_index('ix_reservations_item_type', 'reservations', ['item_type'])
    op.create_index('ix_reservations_item_id', 'reservations', ['item_id'])
    op.create_index('ix_reservations_status', 'reservations', ['status'])

    op.create_table(
        'payments',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('reservation_id', sa.Integer(), sa.ForeignKey('reservations.id', ondelete='CASCADE'), nullable=False),
        sa.Column('transaction_id', sa.String(length=40), nullable=False),
        sa.Column('receipt_number', sa.String(length=30), nullable=False),
        sa.Column('payment_method', sa.String(length=20), nullable=False, server_default='card'),
        sa.Column('card_last_four', sa.String(length=4), nullable=False),
        sa.Column('card_holder', sa.String(length=200), nullable=False),
        sa.Column('billing_address', sa.Text(), nullable=True),
        sa.Column('amount', sa.Numeric(10, 2), nullable=False),
        sa.Column('currency', sa.String(length=3), nullable=False, server_default='MAD'),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='paid'),
        sa.Column('receipt_object_id', sa.String(length=512), nullable=True),
        sa.Column('receipt_storage', sa.String(length=16), nullable=False, server_default='local'),
        sa.Column('receipt_status', sa.String(length=20), nullable=False, server_default='pending'),
        sa.Column('receipt_attempts', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('receipt_error', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index('ix_payments_reservation_id', 'payments', ['reservation_id'], unique=True)
    op.create_index('ix_payments_transaction_id', 'payments', ['transaction_id'], unique=True)
    op.create_index('ix_payments_receipt_number', 'payments', ['receipt_number'], unique=True)
    op.create_index('ix_payments_receipt_status', 'payments', ['receipt_status'])

    op.create_table(
        'audit_logs',
        sa.Column('id', sa.String(length=36), primary_key=True),
        sa.Column('actor_user_id', sa.String(length=36), nullable=False),
        sa.Column('action', sa.String(length=80), nullable=False),
        sa.Column('entity_type', sa.String(length=40), nullable=False),
        sa.Column('entity_id', sa.String(length=40), nullable=False),
        sa.Column('details_json', sa.Text(), nullable=False, server_default='{}'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index('ix_audit_logs_actor_user_id', 'audit_logs', ['actor_user_id'])
    op.create_index('ix_audit_logs_action', 'audit_logs', ['action'])
    op.create_index('ix_audit_logs_entity_type', 'audit_logs', ['entity_type'])
    op.create_index('ix_audit_logs_entity_id', 'audit_logs', ['entity_id'])


def downgrade():
    op.drop_table('audit_logs')
    op.drop_table('payments')
    op.drop_table('reservations')
    for name in ('caravanes', 'sejours', 'artisans'):
        op.drop_table(name)
    op.drop_table('users')
