from __future__ import annotations

from typing import Any, Mapping

from sqlalchemy import and_, or_, select
from sqlalchemy.orm import Session

from app.domain.intents import IntentKind, OrderType
from app.domain.tx_status import TxStatus, assert_valid_transition
from db.models import Order, Reward, Swap, Transfer, Vesting

MODELS = {
    IntentKind.REWARD: Reward,
    IntentKind.TRANSFER: Transfer,
    IntentKind.VESTING: Vesting,
    IntentKind.SWAP: Swap,
    IntentKind.ORDER: Order,
}


class RecordNotFoundError(Exception):
    pass


def model_for(kind: IntentKind):
    try:
        return MODELS[IntentKind(kind)]
    except (KeyError, ValueError) as e:
        raise ValueError(f"Unknown intent kind: {kind}") from e


def _identity_clauses(model, key: Mapping[str, Any]) -> list:
    clauses = []
    for field, value in key.items():
        column = getattr(model, field)
        clauses.append(column.is_(None) if value is None else column == value)
    return clauses


def find_by_identity(db: Session, kind: IntentKind, key: Mapping[str, Any]):
    model = model_for(kind)
    stmt = select(model).where(*_identity_clauses(model, key)).order_by(model.date_added).limit(1)
    return db.execute(stmt).scalars().first()


def find_other_event(db: Session, kind: IntentKind, key: Mapping[str, Any], event_id: str | None):
    """
    Record for the same business identity filed under a different (or no)
    event id. Used to stop one payout being issued twice through two events.
    """
    model = model_for(kind)
    stmt = select(model).where(*_identity_clauses(model, key))
    if event_id is not None:
        stmt = stmt.where(or_(model.event_id.is_(None), model.event_id != event_id))
    else:
        stmt = stmt.where(model.event_id.is_not(None))
    return db.execute(stmt.limit(1)).scalars().first()


def upsert(
    db: Session,
    kind: IntentKind,
    key: Mapping[str, Any],
    patch: Mapping[str, Any],
    *,
    on_insert: Mapping[str, Any] | None = None,
):
    """
    Merge `patch` into the record matching `key`, creating it when absent.

    Fields missing from `patch` are left untouched. A `status` in the patch
    is checked against the transition table; `on_insert` values are only
    applied when the row is created.
    """
    model = model_for(kind)
    record = find_by_identity(db, kind, key)

    to_status = patch.get("status")
    if to_status is not None:
        current = TxStatus(record.status) if record is not None else None
        assert_valid_transition(current, TxStatus(to_status))

    if record is None:
        record = model(**dict(key))
        for field, value in (on_insert or {}).items():
            setattr(record, field, value)

    for field, value in patch.items():
        if isinstance(value, TxStatus):
            value = value.value
        setattr(record, field, value)

    db.add(record)
    db.commit()
    db.refresh(record)
    return record


def transition(
    db: Session,
    kind: IntentKind,
    key: Mapping[str, Any],
    *,
    to_status: TxStatus,
    transaction_hash: str | None = None,
    user_op_hash: str | None = None,
    clear_user_op_hash: bool = False,
):
    record = find_by_identity(db, kind, key)
    if record is None:
        raise RecordNotFoundError(f"{IntentKind(kind).value} record not found: {dict(key)}")

    patch: dict[str, Any] = {"status": to_status}
    if transaction_hash is not None:
        patch["transaction_hash"] = transaction_hash
    if user_op_hash is not None:
        patch["user_op_hash"] = user_op_hash
    elif clear_user_op_hash:
        patch["user_op_hash"] = None
    return upsert(db, kind, key, patch)


def list_transfers_to(db: Session, recipient_tg_id: str, *, exclude_sender: str | None = None) -> list[Transfer]:
    stmt = select(Transfer).where(Transfer.recipient_tg_id == recipient_tg_id)
    if exclude_sender is not None:
        stmt = stmt.where(Transfer.sender_tg_id != exclude_sender)
    return list(db.execute(stmt.order_by(Transfer.date_added)).scalars().all())


def has_successful_order(
    db: Session,
    *,
    user_telegram_id: str,
    event_id: str,
    order_type: str,
    quote_id: str,
) -> bool:
    """
    A user settles at most one order per type, and one quote across types:
    any SUCCESS order of the same type under another event, or of the other
    type for another quote, blocks a new one.
    """
    other_type = OrderType.USD.value if order_type == OrderType.G1.value else OrderType.G1.value
    stmt = select(Order.id).where(
        Order.user_telegram_id == user_telegram_id,
        Order.status == TxStatus.SUCCESS.value,
        or_(
            and_(
                Order.order_type == order_type,
                or_(Order.event_id.is_(None), Order.event_id != event_id),
            ),
            and_(
                Order.order_type == other_type,
                or_(Order.quote_id.is_(None), Order.quote_id != quote_id),
            ),
        ),
    )
    return db.execute(stmt.limit(1)).first() is not None
