from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import DateTime, String
from sqlalchemy.orm import Mapped, mapped_column

from app.domain.tx_status import TxStatus
from db.utils import UUIDType, utcnow


class LifecycleMixin:
    """
    Columns shared by every intent table: business dedup key, status,
    the on-chain hash and the provider handle used to resolve it.
    """

    id: Mapped[uuid.UUID] = mapped_column(
        UUIDType(),
        primary_key=True,
        default=uuid.uuid4,
    )

    event_id: Mapped[str | None] = mapped_column(String(128), nullable=True, index=True)

    status: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        default=TxStatus.PENDING.value,
    )

    transaction_hash: Mapped[str | None] = mapped_column(String(66), nullable=True)
    user_op_hash: Mapped[str | None] = mapped_column(String(66), nullable=True)

    date_added: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        nullable=False,
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        onupdate=utcnow,
        nullable=False,
    )
