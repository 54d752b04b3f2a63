from __future__ import annotations

import pytest
from eth_abi import decode

from app.config import get_settings
from app.domain.intents import IntentKind, VestingIntent, VestingRecipient
from app.domain.tx_status import TxStatus
from app.services.vestings_service import handle_new_vesting
from db.repos import records_repo, users_repo

SENDER_WALLET = "0x1111111111111111111111111111111111111111"
RECIPIENT_A = "0x95222290dd7278aa3ddd389cc1e1d165cc4bafe5"
RECIPIENT_B = "0x2222222222222222222222222222222222222222"

PLAN = "(address,uint256,uint256,uint256,uint256)[]"


@pytest.fixture(autouse=True)
def sender(db):
    return users_repo.save_user(db, user_telegram_id="alice", patchwallet=SENDER_WALLET, user_name="Alice")


def _intent(**kwargs) -> VestingIntent:
    base = dict(
        event_id="vest-1",
        sender_tg_id="alice",
        recipients=[
            VestingRecipient(recipient_address=RECIPIENT_A, amount="100"),
            VestingRecipient(recipient_address=RECIPIENT_B, amount="50"),
        ],
    )
    base.update(kwargs)
    return VestingIntent(**base)


def test_lockup_plans_are_submitted_to_batch_planner(db, make_gateway, notifier):
    settings = get_settings()
    gateway = make_gateway(submit=[{"txHash": "0xHASH"}])

    assert handle_new_vesting(db, _intent(), gateway=gateway, notifier=notifier) is True

    submission = gateway.submissions[0]
    assert submission.sender_tg_id == "alice"
    assert submission.to[0].lower() == settings.hedgey_batch_planner_address.lower()
    assert submission.value == ["0x00"]

    locker, token, total, plans, period, mint_type = decode(
        ["address", "address", "uint256", PLAN, "uint256", "uint8"],
        bytes.fromhex(submission.data[0][10:]),
    )
    assert locker.lower() == settings.hedgey_lockup_locker.lower()
    assert token.lower() == settings.default_token_address.lower()
    assert total == 150 * 10**18
    assert (period, mint_type) == (1, 5)

    start = settings.vesting_start_timestamp
    first = plans[0]
    assert first[0].lower() == RECIPIENT_A
    assert first[1:4] == (100 * 10**18, start, start)
    assert first[4] == -(-100 * 10**18 // settings.token_lock_term_s)


def test_vesting_plans_use_admin_and_vesting_locker(db, make_gateway, notifier):
    settings = get_settings()
    gateway = make_gateway(submit=[{"txHash": "0xHASH"}])

    handle_new_vesting(db, _intent(use_vesting=True), gateway=gateway, notifier=notifier)

    locker, _, total, _, period, admin, admin_transfer, mint_type = decode(
        ["address", "address", "uint256", PLAN, "uint256", "address", "bool", "uint8"],
        bytes.fromhex(gateway.submissions[0].data[0][10:]),
    )
    assert locker.lower() == settings.hedgey_vesting_locker.lower()
    assert admin.lower() == settings.vesting_admin_address.lower()
    assert (total, period, admin_transfer, mint_type) == (150 * 10**18, 1, True, 4)


def test_vesting_record_and_notification(db, make_gateway, notifier):
    gateway = make_gateway(submit=[{"txHash": "0xHASH"}])

    handle_new_vesting(db, _intent(), gateway=gateway, notifier=notifier)

    record = records_repo.find_by_identity(db, IntentKind.VESTING, {"event_id": "vest-1"})
    assert record.status == TxStatus.SUCCESS.value
    assert record.sender_name == "Alice"
    assert record.recipients == [
        {"recipientAddress": RECIPIENT_A, "amount": "100"},
        {"recipientAddress": RECIPIENT_B, "amount": "50"},
    ]
    [sent] = notifier.sent
    assert sent.analytics_event == "Vesting"
    assert sent.analytics_properties["recipients"] == record.recipients


def test_unknown_sender_is_noop(db, make_gateway, notifier):
    gateway = make_gateway()

    assert handle_new_vesting(db, _intent(sender_tg_id="mallory"), gateway=gateway, notifier=notifier) is True
    assert gateway.submissions == []


def test_empty_recipients_is_noop(db, make_gateway, notifier):
    gateway = make_gateway()

    assert handle_new_vesting(db, _intent(recipients=[]), gateway=gateway, notifier=notifier) is True
    assert gateway.submissions == []


def test_rejected_vesting_is_final(db, make_gateway, notifier, rejected):
    gateway = make_gateway(submit=[rejected, {"txHash": "0xHASH"}])

    assert handle_new_vesting(db, _intent(), gateway=gateway, notifier=notifier) is True
    assert handle_new_vesting(db, _intent(), gateway=gateway, notifier=notifier) is True

    assert len(gateway.submissions) == 1
    record = records_repo.find_by_identity(db, IntentKind.VESTING, {"event_id": "vest-1"})
    assert record.status == TxStatus.FAILURE.value
    assert notifier.sent == []
