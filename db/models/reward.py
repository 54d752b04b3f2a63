from __future__ import annotations

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base
from db.models.lifecycle import LifecycleMixin


class Reward(LifecycleMixin, Base):
    __tablename__ = "rewards"

    reason: Mapped[str] = mapped_column(String(64), nullable=False)
    user_telegram_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)

    # referral link: the new user brought in by user_telegram_id
    sponsored_user_telegram_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    # referral: the transfer that introduced the new user
    parent_transaction_hash: Mapped[str | None] = mapped_column(String(66), nullable=True)
    new_user_address: Mapped[str | None] = mapped_column(String(64), nullable=True)

    response_path: Mapped[str | None] = mapped_column(String, nullable=True)
    user_handle: Mapped[str | None] = mapped_column(String, nullable=True)
    user_name: Mapped[str | None] = mapped_column(String, nullable=True)
    wallet_address: Mapped[str | None] = mapped_column(String(64), nullable=True)
    amount: Mapped[str | None] = mapped_column(String(78), nullable=True)
    message: Mapped[str | None] = mapped_column(String, nullable=True)
    token_address: Mapped[str | None] = mapped_column(String(64), nullable=True)
    chain_id: Mapped[str | None] = mapped_column(String(32), nullable=True)
