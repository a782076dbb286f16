from alembic import op
import sqlalchemy as sa
from sqlalchemy import inspect

# revision identifiers, used by Alembic.
revision = '0001_initial'
down_revision = None
branch_labels = None
depends_on = None


def table_exists(table_name):
    """Check if a table exists (it may have been created by create_all)."""
    conn = op.get_bind()
    return table_name in inspect(conn).get_table_names()


def upgrade() -> None:
    if not table_exists('users'):
        op.create_table(
            'users',
            sa.Column('id', sa.Integer(), primary_key=True),
            sa.Column('name', sa.String(length=120), nullable=False),
            sa.Column('email', sa.String(length=254), nullable=False, unique=True),
            sa.Column('password_hash', sa.String(length=128), nullable=False),
            sa.Column('role', sa.String(length=16), nullable=False),
            sa.Column('active', sa.Boolean(), nullable=False),
            sa.Column('phone', sa.String(length=40), nullable=True),
            sa.Column('last_login_at', sa.DateTime(timezone=True), nullable=True),
            sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        )

    if not table_exists('packages'):
        op.create_table(
            'packages',
            sa.Column('id', sa.String(length=32), primary_key=True),
            sa.Column('title', sa.String(length=200), nullable=False),
            sa.Column('slug', sa.String(length=220), nullable=False, unique=True),
            sa.Column('description', sa.Text(), nullable=False),
            sa.Column('city', sa.String(length=80), nullable=False),
            sa.Column('country', sa.String(length=80), nullable=False),
            sa.Column('category', sa.String(length=80), nullable=False),
            sa.Column('price', sa.Numeric(12, 2), nullable=False),
            sa.Column('currency', sa.String(length=3), nullable=False),
            sa.Column('duration_hours', sa.Integer(), nullable=False),
            sa.Column('languages', sa.JSON(), nullable=False),
            sa.Column('highlights', sa.JSON(), nullable=False),
            sa.Column('includes', sa.JSON(), nullable=False),
            sa.Column('excludes', sa.JSON(), nullable=False),
            sa.Column('media', sa.JSON(), nullable=False),
            sa.Column('latitude', sa.Numeric(8, 6), nullable=True),
            sa.Column('longitude', sa.Numeric(9, 6), nullable=True),
            sa.Column('is_promo', sa.Boolean(), nullable=False),
            sa.Column('promo_percent', sa.Numeric(5, 2), nullable=True),
            sa.Column('promo_price', sa.Numeric(12, 2), nullable=True),
            sa.Column('promo_start_at', sa.DateTime(timezone=True), nullable=True),
            sa.Column('promo_end_at', sa.DateTime(timezone=True), nullable=True),
            sa.Column('active', sa.Boolean(), nullable=False),
            sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
            sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        )
        op.create_index('ix_packages_active_created', 'packages', ['active', 'created_at'])
        op.create_index('ix_packages_city_category_created', 'packages', ['city', 'category', 'created_at'])
        op.create_index('ix_packages_promo_window', 'packages', ['is_promo', 'promo_start_at', 'promo_end_at'])

    if not table_exists('bookings'):
        op.create_table(
            'bookings',
            sa.Column('id', sa.String(length=32), primary_key=True),
            # No foreign key: bookings outlive deleted packages
            sa.Column('package_id', sa.String(length=32), nullable=False),
            sa.Column('status', sa.String(length=16), nullable=False),
            sa.Column('date', sa.DateTime(timezone=True), nullable=False),
            sa.Column('adults', sa.Integer(), nullable=False),
            sa.Column('children', sa.Integer(), nullable=False),
            sa.Column('customer_name', sa.String(length=100), nullable=False),
            sa.Column('customer_email', sa.String(length=254), nullable=False),
            sa.Column('customer_phone', sa.String(length=40), nullable=True),
            sa.Column('customer_country', sa.String(length=80), nullable=True),
            sa.Column('customer_language', sa.String(length=10), nullable=False),
            sa.Column('notes', sa.String(length=1000), nullable=True),
            sa.Column('total_price', sa.Numeric(12, 2), nullable=False),
            sa.Column('currency', sa.String(length=3), nullable=False),
            sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
            sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        )
        op.create_index('ix_bookings_package_id', 'bookings', ['package_id'])
        op.create_index('ix_bookings_created', 'bookings', ['created_at'])


def downgrade() -> None:
    for table in ('bookings', 'packages', 'users'):
        if table_exists(table):
            op.drop_table(table)
