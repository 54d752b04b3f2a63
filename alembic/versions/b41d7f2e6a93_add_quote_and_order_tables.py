"""add quote and order tables

Revision ID: b41d7f2e6a93
Revises: 7e3a1c5b9d20
Create Date: 2026-10-19 14:03:27.905114

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = 'b41d7f2e6a93'
down_revision: Union[str, Sequence[str], None] = '7e3a1c5b9d20'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


FIGURES = (
    "token_amount_g1",
    "usd_from_usd_investment",
    "usd_from_g1_investment",
    "usd_from_mvu",
    "usd_from_time",
    "equivalent_usd_invested",
    "gx_before_mvu",
    "gx_mvu_effect",
    "gx_time_effect",
    "gx_usd_exchange_rate",
    "standard_gx_usd_exchange_rate",
    "discount_received",
    "gx_received",
    "token_amount",
)


def _quote_columns() -> list[sa.Column]:
    return [
        sa.Column("user_telegram_id", sa.String(length=64), nullable=True),
        sa.Column("quote_id", sa.String(length=128), nullable=True),
        *[sa.Column(name, sa.String(length=78), nullable=True) for name in FIGURES],
        sa.Column("chain_id", sa.String(length=32), nullable=True),
        sa.Column("token_address", sa.String(length=64), nullable=True),
    ]


def upgrade() -> None:
    op.create_table(
        "gx_quotes",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True, nullable=False),
        *_quote_columns(),
        sa.Column("date", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_gx_quotes_user_telegram_id", "gx_quotes", ["user_telegram_id"])
    op.create_index("ix_gx_quotes_quote_id", "gx_quotes", ["quote_id"])

    op.create_table(
        "orders",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True, nullable=False),
        sa.Column("event_id", sa.String(length=128), nullable=True),
        sa.Column("status", sa.String(length=32), nullable=False),
        sa.Column("transaction_hash", sa.String(length=66), nullable=True),
        sa.Column("user_op_hash", sa.String(length=66), nullable=True),
        sa.Column("date_added", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        *_quote_columns(),
        sa.Column("order_type", sa.String(length=16), nullable=True),
    )
    op.create_index("ix_orders_event_id", "orders", ["event_id"])
    op.create_index("ix_orders_user_telegram_id", "orders", ["user_telegram_id"])
    op.create_index("ix_orders_quote_id", "orders", ["quote_id"])


def downgrade() -> None:
    op.drop_index("ix_orders_quote_id", table_name="orders")
    op.drop_index("ix_orders_user_telegram_id", table_name="orders")
    op.drop_index("ix_orders_event_id", table_name="orders")
    op.drop_table("orders")
    op.drop_index("ix_gx_quotes_quote_id", table_name="gx_quotes")
    op.drop_index("ix_gx_quotes_user_telegram_id", table_name="gx_quotes")
    op.drop_table("gx_quotes")
