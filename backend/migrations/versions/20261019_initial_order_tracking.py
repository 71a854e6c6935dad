"""initial order tracking schema

Revision ID: 20261019_initial
Revises:
Create Date: 2026-10-19 00:00:00.000000

Creates the order tracking schema:
- customers: read-only customer directory
- orders / order_items: customer orders written by checkout
- stocks: on-hand quantity per size + varieties
- stockHistory: append-only stock mutation audit
- sales: one completed-sale record per order
- tracking_orders: staff-visible order projection
"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '20261019_initial'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        "customers",
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("name", sa.String(255), nullable=True),
        sa.Column("first_name", sa.String(128), nullable=True),
        sa.Column("last_name", sa.String(128), nullable=True),
        sa.Column("email", sa.String(255), nullable=True),
        sa.PrimaryKeyConstraint("id", name="pk_customers"),
    )

    # ============================================================================
    # orders: written by checkout, status moved by the transition protocol
    # ============================================================================
    op.create_table(
        "orders",
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("user_id", sa.String(64), nullable=False),
        sa.Column("status", sa.String(32), nullable=False, server_default="Order Placed"),
        sa.Column("payment_method", sa.String(32), nullable=False, server_default="Cash"),
        sa.Column("payment_status", sa.String(16), nullable=True),
        sa.Column("gcash_reference", sa.String(64), nullable=True),
        sa.Column("total_amount_cents", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("pickup_date", sa.String(32), nullable=True),
        sa.Column("pickup_time", sa.String(32), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("(CURRENT_TIMESTAMP)"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("version_id", sa.Integer(), nullable=False, server_default=sa.text("1")),
        sa.PrimaryKeyConstraint("id", name="pk_orders"),
    )
    with op.batch_alter_table("orders", schema=None) as batch_op:
        batch_op.create_index("ix_orders_user_id", ["user_id"], unique=False)
        batch_op.create_index("ix_orders_created_at", ["created_at"], unique=False)
        batch_op.create_index("ix_orders_status", ["status"], unique=False)

    op.create_table(
        "order_items",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("order_id", sa.String(64), nullable=False),
        sa.Column("cart_id", sa.String(64), nullable=True),
        sa.Column("size", sa.String(64), nullable=False),
        sa.Column("varieties", sa.JSON(), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("unit_price_cents", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(["order_id"], ["orders.id"], name="fk_order_items_order_id_orders"),
        sa.PrimaryKeyConstraint("id", name="pk_order_items"),
        sqlite_autoincrement=True,
    )
    with op.batch_alter_table("order_items", schema=None) as batch_op:
        batch_op.create_index("ix_order_items_order_id", ["order_id"], unique=False)

    # ============================================================================
    # stocks + stockHistory: mutable quantity with append-only audit
    # ============================================================================
    op.create_table(
        "stocks",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("size_name", sa.String(64), nullable=False),
        sa.Column("varieties", sa.JSON(), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("last_updated", sa.DateTime(timezone=True), nullable=True),
        sa.Column("version_id", sa.Integer(), nullable=False, server_default=sa.text("1")),
        sa.CheckConstraint("quantity >= 0", name="ck_stocks_quantity_non_negative"),
        sa.PrimaryKeyConstraint("id", name="pk_stocks"),
        sqlite_autoincrement=True,
    )
    with op.batch_alter_table("stocks", schema=None) as batch_op:
        batch_op.create_index("ix_stocks_size_name", ["size_name"], unique=False)

    op.create_table(
        "stockHistory",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("stock_id", sa.Integer(), nullable=False),
        sa.Column("varieties", sa.JSON(), nullable=False),
        sa.Column("size_name", sa.String(64), nullable=False),
        sa.Column("type", sa.String(8), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("previous_stock", sa.Integer(), nullable=False),
        sa.Column("current_stock", sa.Integer(), nullable=False),
        sa.Column("date", sa.DateTime(timezone=True), server_default=sa.text("(CURRENT_TIMESTAMP)"), nullable=False),
        sa.Column("updated_by", sa.String(128), nullable=False, server_default="System"),
        sa.Column("remarks", sa.String(255), nullable=True),
        sa.Column("is_deleted", sa.Boolean(), nullable=False, server_default=sa.text("0")),
        sa.ForeignKeyConstraint(["stock_id"], ["stocks.id"], name="fk_stockHistory_stock_id_stocks"),
        sa.PrimaryKeyConstraint("id", name="pk_stockHistory"),
        sqlite_autoincrement=True,
    )
    with op.batch_alter_table("stockHistory", schema=None) as batch_op:
        batch_op.create_index("ix_stock_history_stock_date", ["stock_id", "date"], unique=False)

    # ============================================================================
    # sales: exactly one row per completed order
    # ============================================================================
    op.create_table(
        "sales",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("order_id", sa.String(64), nullable=False),
        sa.Column("amount_cents", sa.Integer(), nullable=False),
        sa.Column("date", sa.DateTime(timezone=True), server_default=sa.text("(CURRENT_TIMESTAMP)"), nullable=False),
        sa.Column("items", sa.JSON(), nullable=False),
        sa.Column("payment_method", sa.String(32), nullable=False),
        sa.Column("customer_name", sa.String(255), nullable=False, server_default="Unknown"),
        sa.ForeignKeyConstraint(["order_id"], ["orders.id"], name="fk_sales_order_id_orders"),
        sa.PrimaryKeyConstraint("id", name="pk_sales"),
        sa.UniqueConstraint("order_id", name="uq_sales_order_id"),
        sqlite_autoincrement=True,
    )
    with op.batch_alter_table("sales", schema=None) as batch_op:
        batch_op.create_index("ix_sales_date", ["date"], unique=False)

    # ============================================================================
    # tracking_orders: staff-visible projection, one row per order
    # ============================================================================
    op.create_table(
        "tracking_orders",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("order_id", sa.String(64), nullable=False),
        sa.Column("user_id", sa.String(64), nullable=False),
        sa.Column("customer_name", sa.String(255), nullable=False),
        sa.Column("payment_method", sa.String(32), nullable=False),
        sa.Column("payment_status", sa.String(16), nullable=False),
        sa.Column("order_status", sa.String(32), nullable=False),
        sa.Column("order_created_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("pickup_date", sa.String(32), nullable=True),
        sa.Column("pickup_time", sa.String(32), nullable=True),
        sa.Column("total_amount_cents", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("items", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_tracking_orders"),
        sa.UniqueConstraint("order_id", name="uq_tracking_orders_order_id"),
        sqlite_autoincrement=True,
    )


def downgrade():
    op.drop_table("tracking_orders")
    op.drop_table("sales")
    op.drop_table("stockHistory")
    op.drop_table("stocks")
    op.drop_table("order_items")
    op.drop_table("orders")
    op.drop_table("customers")
