from __future__ import annotations

import pytest

from app.domain.intents import IntentKind
from app.domain.tx_status import TxStatus
from db.models import Transfer
from db.repos import records_repo


def test_upsert_creates_then_merges(db):
    key = {"event_id": "ev-1"}
    created = records_repo.upsert(
        db,
        IntentKind.TRANSFER,
        key,
        {"status": TxStatus.PENDING, "sender_tg_id": "alice", "token_amount": "10"},
    )
    assert created.status == "pending"
    assert created.date_added is not None

    merged = records_repo.upsert(db, IntentKind.TRANSFER, key, {"status": TxStatus.PENDING, "message": "hi"})

    assert merged.id == created.id
    assert merged.sender_tg_id == "alice"
    assert merged.token_amount == "10"
    assert merged.message == "hi"
    assert db.query(Transfer).count() == 1


def test_on_insert_only_applies_to_new_rows(db):
    key = {"event_id": "ev-2"}
    first = records_repo.upsert(db, IntentKind.TRANSFER, key, {"status": TxStatus.PENDING}, on_insert={"message": "first"})
    again = records_repo.upsert(db, IntentKind.TRANSFER, key, {"status": TxStatus.PENDING}, on_insert={"message": "second"})

    assert first.id == again.id
    assert again.message == "first"


def test_find_by_identity_matches_null_fields(db):
    records_repo.upsert(
        db,
        IntentKind.REWARD,
        {"event_id": None, "reason": "user_sign_up", "user_telegram_id": "u1"},
        {"status": TxStatus.PENDING},
    )

    found = records_repo.find_by_identity(
        db, IntentKind.REWARD, {"event_id": None, "reason": "user_sign_up", "user_telegram_id": "u1"}
    )
    assert found is not None
    assert records_repo.find_by_identity(
        db, IntentKind.REWARD, {"event_id": "ev", "reason": "user_sign_up", "user_telegram_id": "u1"}
    ) is None


def test_find_other_event_includes_legacy_rows_without_event(db):
    records_repo.upsert(
        db,
        IntentKind.REWARD,
        {"event_id": None, "reason": "user_sign_up", "user_telegram_id": "u1"},
        {"status": TxStatus.PENDING},
    )
    key = {"reason": "user_sign_up", "user_telegram_id": "u1"}

    assert records_repo.find_other_event(db, IntentKind.REWARD, key, "ev-new") is not None


def test_find_other_event_ignores_same_event(db):
    records_repo.upsert(
        db,
        IntentKind.REWARD,
        {"event_id": "ev-1", "reason": "user_sign_up", "user_telegram_id": "u1"},
        {"status": TxStatus.PENDING},
    )
    key = {"reason": "user_sign_up", "user_telegram_id": "u1"}

    assert records_repo.find_other_event(db, IntentKind.REWARD, key, "ev-1") is None
    assert records_repo.find_other_event(db, IntentKind.REWARD, key, "ev-2") is not None


def test_transition_rejects_terminal_mutation(db):
    key = {"event_id": "ev-3"}
    records_repo.upsert(db, IntentKind.SWAP, key, {"status": TxStatus.PENDING})
    records_repo.transition(db, IntentKind.SWAP, key, to_status=TxStatus.SUCCESS, transaction_hash="0xH")

    with pytest.raises(ValueError):
        records_repo.transition(db, IntentKind.SWAP, key, to_status=TxStatus.FAILURE)
    with pytest.raises(ValueError):
        records_repo.upsert(db, IntentKind.SWAP, key, {"status": TxStatus.PENDING})


def test_transition_on_missing_record(db):
    with pytest.raises(records_repo.RecordNotFoundError):
        records_repo.transition(db, IntentKind.VESTING, {"event_id": "nope"}, to_status=TxStatus.FAILURE)


def test_list_transfers_to_excludes_self_sends(db):
    for event_id, sender in (("t1", "alice"), ("t2", "bob"), ("t3", "new-user")):
        records_repo.upsert(
            db,
            IntentKind.TRANSFER,
            {"event_id": event_id},
            {"status": TxStatus.PENDING, "sender_tg_id": sender, "recipient_tg_id": "new-user"},
        )

    transfers = records_repo.list_transfers_to(db, "new-user", exclude_sender="new-user")

    assert sorted(t.sender_tg_id for t in transfers) == ["alice", "bob"]


def test_unknown_kind_is_rejected(db):
    with pytest.raises(ValueError):
        records_repo.find_by_identity(db, "orders", {"event_id": "x"})
