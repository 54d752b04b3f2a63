from __future__ import annotations

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base
from db.models.lifecycle import LifecycleMixin


class Transfer(LifecycleMixin, Base):
    __tablename__ = "transfers"

    chain_id: Mapped[str | None] = mapped_column(String(32), nullable=True)
    token_symbol: Mapped[str | None] = mapped_column(String(32), nullable=True)
    token_address: Mapped[str | None] = mapped_column(String(64), nullable=True)

    sender_tg_id: Mapped[str | None] = mapped_column(String(64), nullable=True, index=True)
    sender_wallet: Mapped[str | None] = mapped_column(String(64), nullable=True)
    sender_name: Mapped[str | None] = mapped_column(String, nullable=True)
    sender_handle: Mapped[str | None] = mapped_column(String, nullable=True)

    recipient_tg_id: Mapped[str | None] = mapped_column(String(64), nullable=True, index=True)
    recipient_wallet: Mapped[str | None] = mapped_column(String(64), nullable=True)

    token_amount: Mapped[str | None] = mapped_column(String(78), nullable=True)
    message: Mapped[str | None] = mapped_column(String, nullable=True)
