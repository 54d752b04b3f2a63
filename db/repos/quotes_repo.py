from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session

from db.models import Quote


def get_quote(db: Session, user_telegram_id: str, quote_id: str) -> Quote | None:
    return db.execute(
        select(Quote).where(Quote.user_telegram_id == user_telegram_id, Quote.quote_id == quote_id)
    ).scalars().first()
