from __future__ import annotations

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base
from db.models.lifecycle import LifecycleMixin
from db.models.quote import QuoteFigures


class Order(LifecycleMixin, QuoteFigures, Base):
    __tablename__ = "orders"

    order_type: Mapped[str | None] = mapped_column(String(16), nullable=True)
