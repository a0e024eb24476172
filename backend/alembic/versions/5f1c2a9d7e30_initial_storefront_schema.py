"""initial storefront schema

Revision ID: 5f1c2a9d7e30
Revises:
Create Date: 2026-10-17 00:00:00.000000

"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

revision: str = '5f1c2a9d7e30'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

withdrawal_status = sa.Enum('pending', 'processing', 'completed', 'failed', name='withdrawalstatus')


def upgrade() -> None:
    op.create_table(
        'user_addresses',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.String(36), nullable=False),
        sa.Column('currency', sa.String(10), nullable=False),
        sa.Column('address', sa.String(106), nullable=False),
        sa.Column('private_key_encrypted', sa.Text(), nullable=True),
        sa.Column('is_simulated', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint('user_id', 'currency', name='uq_user_addresses_user_currency'),
    )
    op.create_index('ix_user_addresses_user_id', 'user_addresses', ['user_id'])

    op.create_table(
        'wallet_balances',
        sa.Column('user_id', sa.String(36), primary_key=True),
        sa.Column('balance_xmr', sa.Numeric(24, 12), nullable=False, server_default='0'),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    op.create_table(
        'withdrawal_requests',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.String(36), nullable=False),
        sa.Column('amount_eur', sa.Numeric(18, 2), nullable=False),
        sa.Column('currency', sa.String(10), nullable=False),
        sa.Column('destination_address', sa.String(106), nullable=False),
        sa.Column('fee_eur', sa.Numeric(18, 2), nullable=False),
        sa.Column('amount_crypto', sa.Numeric(24, 12), nullable=False),
        sa.Column('status', withdrawal_status, nullable=False, server_default='pending'),
        sa.Column('tx_hash', sa.String(64), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('is_simulated', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('processed_at', sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index('ix_withdrawal_requests_user_id', 'withdrawal_requests', ['user_id'])

    op.create_table(
        'withdrawal_fees',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('currency', sa.String(10), nullable=False, unique=True),
        sa.Column('base_fee_eur', sa.Numeric(18, 2), nullable=False, server_default='0'),
        sa.Column('percentage_fee', sa.Numeric(8, 6), nullable=False, server_default='0'),
    )

    op.create_table(
        'orders',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('user_id', sa.String(36), nullable=False),
        sa.Column('total_amount_eur', sa.Numeric(12, 2), nullable=False),
        sa.Column('status', sa.String(30), nullable=False, server_default='pending'),
        sa.Column('shipping_first_name', sa.String(100)),
        sa.Column('shipping_last_name', sa.String(100)),
        sa.Column('shipping_street', sa.String(200)),
        sa.Column('shipping_house_number', sa.String(20)),
        sa.Column('shipping_postal_code', sa.String(20)),
        sa.Column('shipping_city', sa.String(100)),
        sa.Column('shipping_country', sa.String(100)),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_orders_user_id', 'orders', ['user_id'])

    op.create_table(
        'order_items',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('order_id', sa.String(36), sa.ForeignKey('orders.id'), nullable=False),
        sa.Column('product_id', sa.String(36), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('price_eur', sa.Numeric(12, 2), nullable=False),
    )
    op.create_index('ix_order_items_order_id', 'order_items', ['order_id'])

    op.create_table(
        'news',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('author_id', sa.String(36), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    # Default Monero withdrawal fee: 2 EUR + 1%
    op.execute("INSERT INTO withdrawal_fees (currency, base_fee_eur, percentage_fee) VALUES ('XMR', 2, 0.01)")


def downgrade() -> None:
    op.drop_table('news')
    op.drop_index('ix_order_items_order_id', table_name='order_items')
    op.drop_table('order_items')
    op.drop_index('ix_orders_user_id', table_name='orders')
    op.drop_table('orders')
    op.drop_table('withdrawal_fees')
    op.drop_index('ix_withdrawal_requests_user_id', table_name='withdrawal_requests')
    op.drop_table('withdrawal_requests')
    withdrawal_status.drop(op.get_bind(), checkfirst=True)
    op.drop_table('wallet_balances')
    op.drop_index('ix_user_addresses_user_id', table_name='user_addresses')
    op.drop_table('user_addresses')
