from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session

from db.models import User


def get_user(db: Session, user_telegram_id: str) -> User | None:
    return db.execute(
        select(User).where(User.user_telegram_id == user_telegram_id)
    ).scalar_one_or_none()


def save_user(
    db: Session,
    *,
    user_telegram_id: str,
    patchwallet: str,
    response_path: str | None = None,
    user_handle: str | None = None,
    user_name: str | None = None,
) -> User:
    user = get_user(db, user_telegram_id)
    if user is None:
        user = User(user_telegram_id=user_telegram_id)

    user.patchwallet = patchwallet
    if response_path is not None:
        user.response_path = response_path
    if user_handle is not None:
        user.user_handle = user_handle
    if user_name is not None:
        user.user_name = user_name

    db.add(user)
    db.commit()
    db.refresh(user)
    return user
