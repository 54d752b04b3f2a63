from __future__ import annotations

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base
from db.models.lifecycle import LifecycleMixin
from db.utils import JSONType


class Vesting(LifecycleMixin, Base):
    __tablename__ = "vestings"

    chain_id: Mapped[str | None] = mapped_column(String(32), nullable=True)
    token_symbol: Mapped[str | None] = mapped_column(String(32), nullable=True)
    token_address: Mapped[str | None] = mapped_column(String(64), nullable=True)

    sender_tg_id: Mapped[str | None] = mapped_column(String(64), nullable=True, index=True)
    sender_wallet: Mapped[str | None] = mapped_column(String(64), nullable=True)
    sender_name: Mapped[str | None] = mapped_column(String, nullable=True)
    sender_handle: Mapped[str | None] = mapped_column(String, nullable=True)

    # [{"recipientAddress": "0x..", "amount": "100"}, ...]
    recipients: Mapped[list | None] = mapped_column(JSONType(), nullable=True)
