"""Create POS tables and the sync queue

Revision ID: 001
Revises:
Create Date: 2025-11-02 09:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '001'
down_revision = None
branch_labels = None
depends_on = None


def sync_columns():
    """Columns shared by every table devices replicate."""
    return [
        sa.Column('id', sa.String(length=100), nullable=False),
        sa.Column('client_id', sa.String(length=64), nullable=False),
        sa.Column('branch_id', sa.String(length=64), nullable=False),
        sa.Column('is_deleted', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('server_updated_at', sa.DateTime(), nullable=False),
        sa.Column('sync_version', sa.Integer(), nullable=False, server_default='1'),
    ]


def money(name, nullable=False):
    return sa.Column(name, sa.Numeric(precision=12, scale=2), nullable=nullable,
                     server_default=None if nullable else '0')


def quantity(name, server_default='0'):
    return sa.Column(name, sa.Numeric(precision=12, scale=3), nullable=False, server_default=server_default)


def create_sync_table(name, *columns, indexes=()):
    """Create a syncable table with its tenant and pull indexes."""
    op.create_table(
        name,
        *sync_columns(),
        *columns,
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(f'ix_{name}_client_id', name, ['client_id'])
    op.create_index(f'ix_{name}_branch_id', name, ['branch_id'])
    op.create_index(f'ix_{name}_server_updated_at', name, ['server_updated_at'])
    # Pull queries filter by tenant and order by server_updated_at
    op.create_index(f'ix_{name}_tenant_server_updated_at', name, ['client_id', 'branch_id', 'server_updated_at'])
    for column in indexes:
        op.create_index(f'ix_{name}_{column}', name, [column])


POS_TABLES = [
    'product_categories', 'products', 'units', 'product_units', 'warehouses', 'product_stock',
    'customers', 'suppliers', 'invoices', 'invoice_items', 'sales_returns', 'payments',
    'purchases', 'purchase_items', 'payment_methods', 'expense_categories', 'expenses',
    'cash_movements', 'shifts', 'employees', 'settings',
]


def upgrade():
    """
    Create POS tables:
    - catalog: product_categories, products, units, product_units, warehouses, product_stock
    - sales: customers, invoices, invoice_items, sales_returns, payments
    - purchasing: suppliers, purchases, purchase_items
    - finance: payment_methods, expense_categories, expenses, cash_movements, shifts
    - store: employees, settings
    - sync_queue: outbound notifications for the fan-out transport
    """

    # Catalog
    create_sync_table(
        'product_categories',
        sa.Column('name', sa.String(length=200), nullable=False),
        sa.Column('name_en', sa.String(length=200), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('color', sa.String(length=20), nullable=True),
        sa.Column('active', sa.Boolean(), nullable=False, server_default='true'),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
    )
    create_sync_table(
        'products',
        sa.Column('name', sa.String(length=200), nullable=False),
        sa.Column('name_en', sa.String(length=200), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('barcode', sa.String(length=100), nullable=True),
        sa.Column('sku', sa.String(length=100), nullable=True),
        sa.Column('category_id', sa.String(length=100), nullable=True),
        sa.Column('unit', sa.String(length=50), nullable=True),
        money('cost_price'),
        money('selling_price'),
        quantity('stock'),
        quantity('min_stock'),
        sa.Column('tax_rate', sa.Numeric(precision=5, scale=2), nullable=False, server_default='0'),
        sa.Column('active', sa.Boolean(), nullable=False, server_default='true'),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        indexes=('barcode', 'category_id')
    )
    create_sync_table(
        'units',
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('symbol', sa.String(length=20), nullable=True),
        sa.Column('active', sa.Boolean(), nullable=False, server_default='true'),
        sa.Column('created_at', sa.DateTime(), nullable=True),
    )
    create_sync_table(
        'product_units',
        sa.Column('product_id', sa.String(length=100), nullable=False),
        sa.Column('unit_id', sa.String(length=100), nullable=False),
        sa.Column('barcode', sa.String(length=100), nullable=True),
        quantity('conversion_factor', server_default='1'),
        money('price', nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        indexes=('product_id',)
    )
    create_sync_table(
        'warehouses',
        sa.Column('name', sa.String(length=200), nullable=False),
        sa.Column('location', sa.String(length=255), nullable=True),
        sa.Column('is_default', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('active', sa.Boolean(), nullable=False, server_default='true'),
        sa.Column('created_at', sa.DateTime(), nullable=True),
    )
    create_sync_table(
        'product_stock',
        sa.Column('product_id', sa.String(length=100), nullable=False),
        sa.Column('warehouse_id', sa.String(length=100), nullable=False),
        quantity('quantity'),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        indexes=('product_id', 'warehouse_id')
    )

    # Sales
    create_sync_table(
        'customers',
        sa.Column('name', sa.String(length=200), nullable=False),
        sa.Column('phone', sa.String(length=50), nullable=True),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('address', sa.String(length=500), nullable=True),
        money('credit_limit'),
        money('balance'),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        indexes=('phone',)
    )
    create_sync_table(
        'invoices',
        sa.Column('invoice_number', sa.String(length=50), nullable=True),
        sa.Column('customer_id', sa.String(length=100), nullable=True),
        sa.Column('shift_id', sa.String(length=100), nullable=True),
        money('total'),
        money('discount'),
        money('tax'),
        money('net_total'),
        money('paid_amount'),
        money('remaining_amount'),
        sa.Column('payment_status', sa.String(length=20), nullable=False, server_default='unpaid'),
        sa.Column('invoice_date', sa.DateTime(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_by', sa.String(length=100), nullable=True),
        indexes=('invoice_number', 'customer_id')
    )
    create_sync_table(
        'invoice_items',
        sa.Column('invoice_id', sa.String(length=100), nullable=False),
        sa.Column('product_id', sa.String(length=100), nullable=False),
        sa.Column('quantity', sa.Numeric(precision=12, scale=3), nullable=False),
        money('unit_price'),
        money('discount'),
        money('tax'),
        money('total'),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        indexes=('invoice_id', 'product_id')
    )
    create_sync_table(
        'sales_returns',
        sa.Column('original_invoice_id', sa.String(length=100), nullable=True),
        sa.Column('customer_id', sa.String(length=100), nullable=True),
        money('total_amount'),
        sa.Column('reason', sa.String(length=500), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='completed'),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        indexes=('original_invoice_id',)
    )
    create_sync_table(
        'payments',
        sa.Column('invoice_id', sa.String(length=100), nullable=True),
        sa.Column('customer_id', sa.String(length=100), nullable=True),
        sa.Column('payment_method_id', sa.String(length=100), nullable=True),
        money('amount'),
        sa.Column('paid_at', sa.DateTime(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        indexes=('invoice_id',)
    )

    # Purchasing
    create_sync_table(
        'suppliers',
        sa.Column('name', sa.String(length=200), nullable=False),
        sa.Column('phone', sa.String(length=50), nullable=True),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('address', sa.String(length=500), nullable=True),
        sa.Column('tax_number', sa.String(length=50), nullable=True),
        money('balance'),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
    )
    create_sync_table(
        'purchases',
        sa.Column('purchase_number', sa.String(length=50), nullable=True),
        sa.Column('supplier_id', sa.String(length=100), nullable=True),
        money('total'),
        money('discount'),
        money('tax'),
        money('net_total'),
        money('paid_amount'),
        money('remaining_amount'),
        sa.Column('payment_status', sa.String(length=20), nullable=False, server_default='unpaid'),
        sa.Column('purchase_date', sa.DateTime(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_by', sa.String(length=100), nullable=True),
        indexes=('purchase_number', 'supplier_id')
    )
    create_sync_table(
        'purchase_items',
        sa.Column('purchase_id', sa.String(length=100), nullable=False),
        sa.Column('product_id', sa.String(length=100), nullable=False),
        sa.Column('quantity', sa.Numeric(precision=12, scale=3), nullable=False),
        money('unit_cost'),
        money('total'),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        indexes=('purchase_id', 'product_id')
    )

    # Finance
    create_sync_table(
        'payment_methods',
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('type', sa.String(length=30), nullable=False, server_default='cash'),
        sa.Column('active', sa.Boolean(), nullable=False, server_default='true'),
        sa.Column('created_at', sa.DateTime(), nullable=True),
    )
    create_sync_table(
        'expense_categories',
        sa.Column('name', sa.String(length=200), nullable=False),
        sa.Column('name_en', sa.String(length=200), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('active', sa.Boolean(), nullable=False, server_default='true'),
        sa.Column('created_at', sa.DateTime(), nullable=True),
    )
    create_sync_table(
        'expenses',
        sa.Column('category_id', sa.String(length=100), nullable=True),
        sa.Column('payment_method_id', sa.String(length=100), nullable=True),
        sa.Column('shift_id', sa.String(length=100), nullable=True),
        money('amount'),
        sa.Column('expense_date', sa.Date(), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('receipt_number', sa.String(length=100), nullable=True),
        indexes=('category_id',)
    )
    create_sync_table(
        'cash_movements',
        sa.Column('shift_id', sa.String(length=100), nullable=True),
        sa.Column('type', sa.String(length=20), nullable=False),
        money('amount'),
        sa.Column('reason', sa.String(length=500), nullable=True),
        sa.Column('created_by', sa.String(length=100), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        indexes=('shift_id',)
    )
    create_sync_table(
        'shifts',
        sa.Column('user_id', sa.String(length=100), nullable=True),
        sa.Column('start_time', sa.DateTime(), nullable=True),
        sa.Column('end_time', sa.DateTime(), nullable=True),
        money('starting_cash'),
        money('ending_cash', nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='open'),
        indexes=('user_id',)
    )

    # Store
    create_sync_table(
        'employees',
        sa.Column('name', sa.String(length=200), nullable=False),
        sa.Column('phone', sa.String(length=50), nullable=True),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('position', sa.String(length=100), nullable=True),
        money('salary'),
        sa.Column('hire_date', sa.Date(), nullable=True),
        sa.Column('active', sa.Boolean(), nullable=False, server_default='true'),
        sa.Column('notes', sa.Text(), nullable=True),
    )
    create_sync_table(
        'settings',
        sa.Column('key', sa.String(length=100), nullable=False),
        sa.Column('value', sa.Text(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        indexes=('key',)
    )

    # Create sync_queue table
    op.create_table(
        'sync_queue',
        sa.Column('id', sa.String(length=64), nullable=False),
        sa.Column('client_id', sa.String(length=64), nullable=False),
        sa.Column('branch_id', sa.String(length=64), nullable=False),
        sa.Column('device_id', sa.String(length=255), nullable=False),
        sa.Column('entity_type', sa.String(length=100), nullable=False),
        sa.Column('entity_id', sa.String(length=100), nullable=False),
        sa.Column('operation', sa.String(length=20), nullable=False),
        sa.Column('payload', sa.JSON(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('processed_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_sync_queue_client_id', 'sync_queue', ['client_id'])
    op.create_index('ix_sync_queue_branch_id', 'sync_queue', ['branch_id'])
    op.create_index('ix_sync_queue_entity_type', 'sync_queue', ['entity_type'])
    op.create_index('ix_sync_queue_created_at', 'sync_queue', ['created_at'])
    op.create_index('ix_sync_queue_processed_at', 'sync_queue', ['processed_at'])


def downgrade():
    """Remove POS tables and the sync queue"""
    op.drop_table('sync_queue')
    for name in reversed(POS_TABLES):
        op.drop_table(name)
