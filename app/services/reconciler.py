from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Any, Iterable

from sqlalchemy.orm import Session

from app.config import get_settings
from app.core.context import event_context
from app.domain.intents import IntentKind
from app.domain.tx_status import TxStatus, is_terminal
from app.services.notifications import Notification, Notifier
from db.repos import records_repo
from db.utils import as_utc, utcnow
from wallet.client import WalletGatewayClient, WalletGatewayError, WalletRejectedError
from wallet.encoding import Submission

logger = logging.getLogger(__name__)


class IntentSpec:
    """
    Capabilities one intent kind plugs into the engine.

    Subclasses set `kind` and implement `identity`, `snapshot`,
    `build_submission` and `notification`. `superseded` lets a kind declare
    that the same payout already exists under another event id.
    """

    kind: IntentKind

    def __init__(self, event_id: str | None):
        self.event_id = event_id

    def identity(self) -> dict[str, Any]:
        raise NotImplementedError

    def snapshot(self) -> dict[str, Any]:
        return {}

    def build_submission(self) -> Submission:
        raise NotImplementedError

    def notification(self, record) -> Notification | None:
        return None

    def superseded(self, db: Session) -> bool:
        return False

    def describe(self) -> str:
        return f"{self.kind.value} {self.identity()}"


def _log(level: int, msg: str, spec: IntentSpec, *args: Any, **extra: Any) -> None:
    logger.log(level, msg, *args, extra={"kind": spec.kind.value, **extra})


def _dispatch(spec: IntentSpec, record, notifier: Notifier) -> None:
    # Only called once the SUCCESS write has been committed.
    try:
        notification = spec.notification(record)
        if notification is not None:
            notifier.notify(notification)
    except Exception:
        logger.exception("notification dispatch failed for %s", spec.describe())


def _mark(db: Session, spec: IntentSpec, to_status: TxStatus, **kwargs: Any):
    record = records_repo.transition(db, spec.kind, spec.identity(), to_status=to_status, **kwargs)
    _log(
        logging.INFO,
        "%s -> %s",
        spec,
        spec.describe(),
        to_status.value,
        status=to_status.value,
        tx_hash=record.transaction_hash,
        user_op_hash=record.user_op_hash,
    )
    return record


def _submit(db: Session, spec: IntentSpec, *, gateway, notifier: Notifier, now: datetime) -> bool:
    try:
        submission = spec.build_submission()
    except ValueError as e:
        # Malformed input: nothing is persisted.
        _log(logging.ERROR, "cannot build submission for %s: %s", spec, spec.describe(), e)
        return True

    patch = {k: v for k, v in spec.snapshot().items() if v is not None}
    patch["status"] = TxStatus.PENDING
    records_repo.upsert(db, spec.kind, spec.identity(), patch, on_insert={"date_added": now})

    try:
        result = gateway.submit(submission)
    except WalletRejectedError as e:
        _log(logging.WARNING, "wallet rejected %s: %s", spec, spec.describe(), e)
        _mark(db, spec, TxStatus.FAILURE)
        return True
    except WalletGatewayError as e:
        _log(logging.WARNING, "wallet submit failed for %s: %s", spec, spec.describe(), e)
        return False

    if result.tx_hash:
        record = _mark(
            db,
            spec,
            TxStatus.SUCCESS,
            transaction_hash=result.tx_hash,
            clear_user_op_hash=True,
        )
        _dispatch(spec, record, notifier)
        return True

    if result.user_op_hash:
        _mark(db, spec, TxStatus.PENDING_HASH, user_op_hash=result.user_op_hash)
        return False

    _log(logging.WARNING, "wallet returned neither hash nor handle for %s", spec, spec.describe())
    return False


def _resolve(db: Session, spec: IntentSpec, record, *, gateway, notifier: Notifier, now: datetime) -> bool:
    if not record.user_op_hash:
        # Predates handle issuance: closed as a success with no hash.
        record = _mark(db, spec, TxStatus.SUCCESS)
        _dispatch(spec, record, notifier)
        return True

    try:
        result = gateway.tx_status(record.user_op_hash)
    except WalletRejectedError as e:
        _log(logging.WARNING, "wallet rejected operation for %s: %s", spec, spec.describe(), e)
        _mark(db, spec, TxStatus.FAILURE)
        return True
    except WalletGatewayError as e:
        _log(logging.WARNING, "status poll failed for %s: %s", spec, spec.describe(), e)
        return False

    if result.tx_hash:
        record = _mark(db, spec, TxStatus.SUCCESS, transaction_hash=result.tx_hash)
        _dispatch(spec, record, notifier)
        return True

    timeout = timedelta(minutes=get_settings().pending_hash_timeout_minutes)
    started = as_utc(record.date_added) or now
    if now - started >= timeout:
        _log(logging.WARNING, "gave up resolving %s after %s", spec, spec.describe(), now - started)
        _mark(db, spec, TxStatus.FAILURE)
        return True

    return False


def reconcile(
    db: Session,
    spec: IntentSpec,
    *,
    gateway: WalletGatewayClient | None = None,
    notifier: Notifier | None = None,
    now: datetime | None = None,
) -> bool:
    """
    Drive one intent one step closer to a terminal outcome.

    True means nothing more to do (confirmed success, confirmed failure, or
    already handled). False means a retryable condition: re-invoke later.
    """
    gateway = gateway or WalletGatewayClient()
    notifier = notifier or Notifier()
    now = now or utcnow()

    with event_context(spec.event_id):
        record = records_repo.find_by_identity(db, spec.kind, spec.identity())

        if record is not None and is_terminal(record.status):
            return True

        # A handle already issued for this event is always driven to an outcome.
        if record is not None and TxStatus(record.status) == TxStatus.PENDING_HASH:
            return _resolve(db, spec, record, gateway=gateway, notifier=notifier, now=now)

        if spec.superseded(db):
            _log(logging.INFO, "%s already handled under another event", spec, spec.describe())
            return True

        return _submit(db, spec, gateway=gateway, notifier=notifier, now=now)


def reconcile_many(
    db: Session,
    specs: Iterable[IntentSpec],
    *,
    gateway: WalletGatewayClient | None = None,
    notifier: Notifier | None = None,
    now: datetime | None = None,
) -> bool:
    """Fan-out: every spec is reconciled, results are AND-ed."""
    gateway = gateway or WalletGatewayClient()
    notifier = notifier or Notifier()
    results = [reconcile(db, spec, gateway=gateway, notifier=notifier, now=now) for spec in specs]
    return all(results)
