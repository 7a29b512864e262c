"""initial_ledger_schema

Products, rate table, sales, returns, return deltas, manual entries and
ledger days.

Revision ID: 3c7d1e9a4b20
Revises:
Create Date: 2026-10-17 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = '3c7d1e9a4b20'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


# SQLAlchemy stores enum member names
channel = postgresql.ENUM("STOREFRONT", "MARKETPLACE", "DIRECT", name="channel", create_type=False)
payment_method = postgresql.ENUM(
    "PLATFORM_PAY", "PROCESSOR", "BANK_TRANSFER", "CASH", name="payment_method", create_type=False
)
rate_condition = postgresql.ENUM(
    "NORMAL", "TRANSFER", "INTEREST_FREE_INSTALLMENTS", name="rate_condition", create_type=False
)
shipping_status = postgresql.ENUM(
    "PENDING", "IN_TRANSIT", "DELIVERED", "RETURNED", "CANCELLED",
    name="shipping_status",
    create_type=False,
)
return_status = postgresql.ENUM(
    "PENDING",
    "IN_TRANSIT",
    "DELIVERED_REFUND",
    "DELIVERED_EXCHANGE_SAME",
    "DELIVERED_EXCHANGE_OTHER",
    "DELIVERED_NO_REFUND",
    "REJECTED",
    name="return_status",
    create_type=False,
)
processor_state = postgresql.ENUM("AVAILABLE", "PENDING", name="processor_state", create_type=False)
entry_type = postgresql.ENUM("EXPENSE", "INCOME", name="entry_type", create_type=False)
entry_channel = postgresql.ENUM(
    "STOREFRONT", "MARKETPLACE", "DIRECT", "GENERAL", name="entry_channel", create_type=False
)

ENUMS = [
    channel,
    payment_method,
    rate_condition,
    shipping_status,
    return_status,
    processor_state,
    entry_type,
    entry_channel,
]


def _money(name: str, nullable: bool = False) -> sa.Column:
    if nullable:
        return sa.Column(name, sa.Numeric(14, 2), nullable=True)
    return sa.Column(name, sa.Numeric(14, 2), nullable=False, server_default="0")


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    ]


def upgrade() -> None:
    bind = op.get_bind()
    for enum_type in ENUMS:
        enum_type.create(bind, checkfirst=True)

    op.create_table(
        "products",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("sku", sa.String(64), nullable=False),
        sa.Column("model", sa.String(200), nullable=False),
        _money("unit_cost"),
        _money("sale_price"),
        sa.Column("stock_own", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("stock_fulfillment", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default="true"),
        *_timestamps(),
    )
    op.create_index("ix_products_sku", "products", ["sku"], unique=True)
    op.create_index("ix_products_is_active", "products", ["is_active"])

    op.create_table(
        "rates",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("channel", channel, nullable=False),
        sa.Column("payment_method", payment_method, nullable=False),
        sa.Column("condition", rate_condition, nullable=False),
        sa.Column("commission_pct", sa.Numeric(7, 4), nullable=False, server_default="0"),
        sa.Column("vat_pct", sa.Numeric(7, 4), nullable=False, server_default="0"),
        sa.Column("tax_pct", sa.Numeric(7, 4), nullable=False, server_default="0"),
        _money("fixed_fee"),
        *_timestamps(),
        sa.UniqueConstraint("channel", "payment_method", "condition", name="uq_rate_lookup"),
    )

    op.create_table(
        "sales",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("sale_code", sa.String(40), nullable=False, unique=True),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("buyer", sa.String(200), nullable=False),
        sa.Column("channel", channel, nullable=False),
        sa.Column("payment_method", payment_method, nullable=False),
        sa.Column("condition", rate_condition, nullable=False),
        sa.Column("product_id", sa.Uuid(), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False, server_default="1"),
        _money("gross_price"),
        _money("shipping_cost"),
        _money("commission"),
        _money("vat"),
        _money("tax"),
        _money("net_price"),
        _money("product_cost"),
        _money("margin"),
        sa.Column("margin_on_price", sa.Numeric(9, 4), nullable=False, server_default="0"),
        sa.Column("margin_on_cost", sa.Numeric(9, 4), nullable=False, server_default="0"),
        sa.Column("shipping_status", shipping_status, nullable=False),
        sa.Column("tracking_url", sa.String(500), nullable=True),
        sa.Column("courier", sa.String(100), nullable=True),
        sa.Column("external_order_id", sa.String(100), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["product_id"], ["products.id"]),
    )
    op.create_index("ix_sales_date", "sales", ["date"])
    op.create_index("ix_sales_channel", "sales", ["channel"])
    op.create_index("ix_sales_product_id", "sales", ["product_id"])
    op.create_index("ix_sales_external_order_id", "sales", ["external_order_id"])

    op.create_table(
        "sale_returns",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("sale_id", sa.Uuid(), nullable=False),
        sa.Column("claim_date", sa.Date(), nullable=False),
        sa.Column("completed_date", sa.Date(), nullable=True),
        sa.Column("status", return_status, nullable=False),
        sa.Column("reason", sa.String(255), nullable=True),
        _money("refunded_amount", nullable=True),
        _money("outbound_shipping_cost"),
        _money("return_shipping_cost"),
        _money("new_shipment_cost"),
        sa.Column("product_recoverable", sa.Boolean(), nullable=False, server_default="true"),
        sa.Column("opened_as_claim", sa.Boolean(), nullable=False, server_default="true"),
        sa.Column("processor_state", processor_state, nullable=False),
        sa.Column("processor_retained", sa.Boolean(), nullable=False, server_default="false"),
        sa.Column("notes", sa.Text(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["sale_id"], ["sales.id"]),
    )
    op.create_index("ix_sale_returns_sale_id", "sale_returns", ["sale_id"])
    op.create_index("ix_sale_returns_completed_date", "sale_returns", ["completed_date"])
    op.create_index("ix_sale_returns_status", "sale_returns", ["status"])

    op.create_table(
        "return_ledger_deltas",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("return_id", sa.Uuid(), nullable=False, unique=True),
        sa.Column("date", sa.Date(), nullable=False),
        _money("processor_available"),
        _money("processor_pending"),
        _money("processor_held"),
        _money("platform_pending"),
        _money("realized_loss"),
        sa.Column("computed_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["return_id"], ["sale_returns.id"], ondelete="CASCADE"),
    )
    op.create_index("ix_return_ledger_deltas_date", "return_ledger_deltas", ["date"])

    op.create_table(
        "manual_ledger_entries",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("entry_type", entry_type, nullable=False),
        sa.Column("is_personal", sa.Boolean(), nullable=False, server_default="false"),
        sa.Column("category", sa.String(100), nullable=False),
        sa.Column("description", sa.String(255), nullable=True),
        sa.Column("amount", sa.Numeric(14, 2), nullable=False),
        sa.Column("channel", entry_channel, nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_manual_ledger_entries_date", "manual_ledger_entries", ["date"])
    op.create_index("ix_manual_ledger_entries_entry_type", "manual_ledger_entries", ["entry_type"])

    op.create_table(
        "ledger_days",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("date", sa.Date(), nullable=False),
        _money("processor_available"),
        _money("processor_pending"),
        _money("processor_held"),
        _money("platform_pending"),
        _money("processor_settled_today"),
        _money("platform_settled_today"),
        _money("tax_withheld_today"),
        sa.Column("is_opening_balance", sa.Boolean(), nullable=False, server_default="false"),
        sa.Column("notes", sa.Text(), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_ledger_days_date", "ledger_days", ["date"], unique=True)


def downgrade() -> None:
    op.drop_index("ix_ledger_days_date", table_name="ledger_days")
    op.drop_table("ledger_days")
    op.drop_index("ix_manual_ledger_entries_entry_type", table_name="manual_ledger_entries")
    op.drop_index("ix_manual_ledger_entries_date", table_name="manual_ledger_entries")
    op.drop_table("manual_ledger_entries")
    op.drop_index("ix_return_ledger_deltas_date", table_name="return_ledger_deltas")
    op.drop_table("return_ledger_deltas")
    op.drop_index("ix_sale_returns_status", table_name="sale_returns")
    op.drop_index("ix_sale_returns_completed_date", table_name="sale_returns")
    op.drop_index("ix_sale_returns_sale_id", table_name="sale_returns")
    op.drop_table("sale_returns")
    op.drop_index("ix_sales_external_order_id", table_name="sales")
    op.drop_index("ix_sales_product_id", table_name="sales")
    op.drop_index("ix_sales_channel", table_name="sales")
    op.drop_index("ix_sales_date", table_name="sales")
    op.drop_table("sales")
    op.drop_table("rates")
    op.drop_index("ix_products_is_active", table_name="products")
    op.drop_index("ix_products_sku", table_name="products")
    op.drop_table("products")

    bind = op.get_bind()
    for enum_type in reversed(ENUMS):
        enum_type.drop(bind, checkfirst=True)
