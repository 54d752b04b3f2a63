from __future__ import annotations

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base
from db.models.lifecycle import LifecycleMixin


class Swap(LifecycleMixin, Base):
    __tablename__ = "swaps"

    chain_id: Mapped[str | None] = mapped_column(String(32), nullable=True)

    user_telegram_id: Mapped[str | None] = mapped_column(String(64), nullable=True, index=True)
    user_wallet: Mapped[str | None] = mapped_column(String(64), nullable=True)
    user_name: Mapped[str | None] = mapped_column(String, nullable=True)
    user_handle: Mapped[str | None] = mapped_column(String, nullable=True)

    token_in: Mapped[str | None] = mapped_column(String(64), nullable=True)
    amount_in: Mapped[str | None] = mapped_column(String(78), nullable=True)
    token_out: Mapped[str | None] = mapped_column(String(64), nullable=True)
    amount_out: Mapped[str | None] = mapped_column(String(78), nullable=True)
    price_impact: Mapped[str | None] = mapped_column(String(32), nullable=True)
    gas: Mapped[str | None] = mapped_column(String(78), nullable=True)

    from_address: Mapped[str | None] = mapped_column(String(64), nullable=True)
    to_address: Mapped[str | None] = mapped_column(String(64), nullable=True)
    token_in_symbol: Mapped[str | None] = mapped_column(String(32), nullable=True)
    token_out_symbol: Mapped[str | None] = mapped_column(String(32), nullable=True)
    chain_in: Mapped[str | None] = mapped_column(String(32), nullable=True)
    chain_out: Mapped[str | None] = mapped_column(String(32), nullable=True)
