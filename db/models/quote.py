from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import DateTime, String
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base
from db.utils import UUIDType, utcnow


class QuoteFigures:
    """G1/GX pricing figures, stored on the quote and copied onto its order."""

    user_telegram_id: Mapped[str | None] = mapped_column(String(64), nullable=True, index=True)
    quote_id: Mapped[str | None] = mapped_column(String(128), nullable=True, index=True)

    token_amount_g1: Mapped[str | None] = mapped_column(String(78), nullable=True)
    usd_from_usd_investment: Mapped[str | None] = mapped_column(String(78), nullable=True)
    usd_from_g1_investment: Mapped[str | None] = mapped_column(String(78), nullable=True)
    usd_from_mvu: Mapped[str | None] = mapped_column(String(78), nullable=True)
    usd_from_time: Mapped[str | None] = mapped_column(String(78), nullable=True)
    equivalent_usd_invested: Mapped[str | None] = mapped_column(String(78), nullable=True)
    gx_before_mvu: Mapped[str | None] = mapped_column(String(78), nullable=True)
    gx_mvu_effect: Mapped[str | None] = mapped_column(String(78), nullable=True)
    gx_time_effect: Mapped[str | None] = mapped_column(String(78), nullable=True)
    gx_usd_exchange_rate: Mapped[str | None] = mapped_column(String(78), nullable=True)
    standard_gx_usd_exchange_rate: Mapped[str | None] = mapped_column(String(78), nullable=True)
    discount_received: Mapped[str | None] = mapped_column(String(78), nullable=True)
    gx_received: Mapped[str | None] = mapped_column(String(78), nullable=True)

    # what a USD order actually pays, in `token_address` on `chain_id`
    token_amount: Mapped[str | None] = mapped_column(String(78), nullable=True)
    chain_id: Mapped[str | None] = mapped_column(String(32), nullable=True)
    token_address: Mapped[str | None] = mapped_column(String(64), nullable=True)


QUOTE_FIGURE_FIELDS = (
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
    "chain_id",
    "token_address",
)


class Quote(QuoteFigures, Base):
    __tablename__ = "gx_quotes"

    id: Mapped[uuid.UUID] = mapped_column(
        UUIDType(),
        primary_key=True,
        default=uuid.uuid4,
    )

    date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        nullable=False,
    )
