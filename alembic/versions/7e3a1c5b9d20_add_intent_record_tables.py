"""add intent record tables

Revision ID: 7e3a1c5b9d20
Revises:
Create Date: 2026-10-19 09:12:44.310582

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = '7e3a1c5b9d20'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _lifecycle_columns() -> list[sa.Column]:
    return [
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True, nullable=False),
        sa.Column("event_id", sa.String(length=128), nullable=True),
        sa.Column("status", sa.String(length=32), nullable=False),
        sa.Column("transaction_hash", sa.String(length=66), nullable=True),
        sa.Column("user_op_hash", sa.String(length=66), nullable=True),
        sa.Column("date_added", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True, nullable=False),
        sa.Column("user_telegram_id", sa.String(length=64), nullable=False, unique=True),
        sa.Column("response_path", sa.String(), nullable=True),
        sa.Column("user_handle", sa.String(), nullable=True),
        sa.Column("user_name", sa.String(), nullable=True),
        sa.Column("patchwallet", sa.String(length=64), nullable=True),
        sa.Column("date_added", sa.DateTime(timezone=True), nullable=False),
    )

    op.create_table(
        "rewards",
        *_lifecycle_columns(),
        sa.Column("reason", sa.String(length=64), nullable=False),
        sa.Column("user_telegram_id", sa.String(length=64), nullable=False),
        sa.Column("sponsored_user_telegram_id", sa.String(length=64), nullable=True),
        sa.Column("parent_transaction_hash", sa.String(length=66), nullable=True),
        sa.Column("new_user_address", sa.String(length=64), nullable=True),
        sa.Column("response_path", sa.String(), nullable=True),
        sa.Column("user_handle", sa.String(), nullable=True),
        sa.Column("user_name", sa.String(), nullable=True),
        sa.Column("wallet_address", sa.String(length=64), nullable=True),
        sa.Column("amount", sa.String(length=78), nullable=True),
        sa.Column("message", sa.String(), nullable=True),
        sa.Column("token_address", sa.String(length=64), nullable=True),
        sa.Column("chain_id", sa.String(length=32), nullable=True),
    )
    op.create_index("ix_rewards_event_id", "rewards", ["event_id"])
    op.create_index("ix_rewards_user_telegram_id", "rewards", ["user_telegram_id"])

    op.create_table(
        "transfers",
        *_lifecycle_columns(),
        sa.Column("chain_id", sa.String(length=32), nullable=True),
        sa.Column("token_symbol", sa.String(length=32), nullable=True),
        sa.Column("token_address", sa.String(length=64), nullable=True),
        sa.Column("sender_tg_id", sa.String(length=64), nullable=True),
        sa.Column("sender_wallet", sa.String(length=64), nullable=True),
        sa.Column("sender_name", sa.String(), nullable=True),
        sa.Column("sender_handle", sa.String(), nullable=True),
        sa.Column("recipient_tg_id", sa.String(length=64), nullable=True),
        sa.Column("recipient_wallet", sa.String(length=64), nullable=True),
        sa.Column("token_amount", sa.String(length=78), nullable=True),
        sa.Column("message", sa.String(), nullable=True),
    )
    op.create_index("ix_transfers_event_id", "transfers", ["event_id"])
    op.create_index("ix_transfers_sender_tg_id", "transfers", ["sender_tg_id"])
    op.create_index("ix_transfers_recipient_tg_id", "transfers", ["recipient_tg_id"])

    op.create_table(
        "vestings",
        *_lifecycle_columns(),
        sa.Column("chain_id", sa.String(length=32), nullable=True),
        sa.Column("token_symbol", sa.String(length=32), nullable=True),
        sa.Column("token_address", sa.String(length=64), nullable=True),
        sa.Column("sender_tg_id", sa.String(length=64), nullable=True),
        sa.Column("sender_wallet", sa.String(length=64), nullable=True),
        sa.Column("sender_name", sa.String(), nullable=True),
        sa.Column("sender_handle", sa.String(), nullable=True),
        sa.Column("recipients", postgresql.JSONB(), nullable=True),
    )
    op.create_index("ix_vestings_event_id", "vestings", ["event_id"])
    op.create_index("ix_vestings_sender_tg_id", "vestings", ["sender_tg_id"])

    op.create_table(
        "swaps",
        *_lifecycle_columns(),
        sa.Column("chain_id", sa.String(length=32), nullable=True),
        sa.Column("user_telegram_id", sa.String(length=64), nullable=True),
        sa.Column("user_wallet", sa.String(length=64), nullable=True),
        sa.Column("user_name", sa.String(), nullable=True),
        sa.Column("user_handle", sa.String(), nullable=True),
        sa.Column("token_in", sa.String(length=64), nullable=True),
        sa.Column("amount_in", sa.String(length=78), nullable=True),
        sa.Column("token_out", sa.String(length=64), nullable=True),
        sa.Column("amount_out", sa.String(length=78), nullable=True),
        sa.Column("price_impact", sa.String(length=32), nullable=True),
        sa.Column("gas", sa.String(length=78), nullable=True),
        sa.Column("from_address", sa.String(length=64), nullable=True),
        sa.Column("to_address", sa.String(length=64), nullable=True),
        sa.Column("token_in_symbol", sa.String(length=32), nullable=True),
        sa.Column("token_out_symbol", sa.String(length=32), nullable=True),
        sa.Column("chain_in", sa.String(length=32), nullable=True),
        sa.Column("chain_out", sa.String(length=32), nullable=True),
    )
    op.create_index("ix_swaps_event_id", "swaps", ["event_id"])
    op.create_index("ix_swaps_user_telegram_id", "swaps", ["user_telegram_id"])


def downgrade() -> None:
    op.drop_index("ix_swaps_user_telegram_id", table_name="swaps")
    op.drop_index("ix_swaps_event_id", table_name="swaps")
    op.drop_table("swaps")
    op.drop_index("ix_vestings_sender_tg_id", table_name="vestings")
    op.drop_index("ix_vestings_event_id", table_name="vestings")
    op.drop_table("vestings")
    op.drop_index("ix_transfers_recipient_tg_id", table_name="transfers")
    op.drop_index("ix_transfers_sender_tg_id", table_name="transfers")
    op.drop_index("ix_transfers_event_id", table_name="transfers")
    op.drop_table("transfers")
    op.drop_index("ix_rewards_user_telegram_id", table_name="rewards")
    op.drop_index("ix_rewards_event_id", table_name="rewards")
    op.drop_table("rewards")
    op.drop_table("users")
