from __future__ import annotations

import pytest
from eth_abi import decode
from web3 import Web3

from app.config import get_settings
from app.domain.intents import IntentKind, OrderIntent
from app.domain.tx_status import TxStatus
from app.services.orders_service import handle_new_order
from db.models import Quote
from db.repos import records_repo, users_repo

USER_WALLET = "0x1111111111111111111111111111111111111111"
TREASURY = "0x95222290dd7278aa3ddd389cc1e1d165cc4bafe5"
G1 = "0xe36bd65609c08cd17b53520293523cf4560533d0"
USDC = "0x833589fcd6edb6e08f4c7c32d4f71b54bda02913"


@pytest.fixture(autouse=True)
def user(db, monkeypatch):
    monkeypatch.setenv("SOURCE_WALLET_ADDRESS", TREASURY)
    monkeypatch.setenv("FLOWXO_NEW_ORDER_WEBHOOK", "https://hooks.test/order")
    get_settings.cache_clear()
    return users_repo.save_user(db, user_telegram_id="alice", patchwallet=USER_WALLET)


@pytest.fixture(autouse=True)
def quotes(db):
    db.add_all(
        [
            Quote(
                quote_id="q-g1",
                user_telegram_id="alice",
                token_amount_g1="5",
                usd_from_usd_investment="1",
                equivalent_usd_invested="1",
                gx_usd_exchange_rate="1",
                gx_received="1",
            ),
            Quote(
                quote_id="q-usd",
                user_telegram_id="alice",
                token_amount_g1="0",
                usd_from_usd_investment="2.5",
                gx_received="40",
                token_amount="2.5",
                chain_id="eip155:8453",
                token_address=USDC,
            ),
            Quote(
                quote_id="q-no-usd",
                user_telegram_id="alice",
                token_amount_g1="3",
                usd_from_usd_investment="0.00",
            ),
        ]
    )
    db.commit()


def _intent(**kwargs) -> OrderIntent:
    base = dict(event_id="order-1", user_telegram_id="alice", quote_id="q-g1", order_type="g1")
    base.update(kwargs)
    return OrderIntent(**base)


def _record(db, event_id="order-1"):
    db.expire_all()
    return records_repo.find_by_identity(db, IntentKind.ORDER, {"event_id": event_id})


def _settled_order(db, *, event_id, order_type, quote_id):
    key = {"event_id": event_id}
    records_repo.upsert(
        db,
        IntentKind.ORDER,
        key,
        {"status": TxStatus.PENDING, "user_telegram_id": "alice", "order_type": order_type, "quote_id": quote_id},
    )
    records_repo.transition(db, IntentKind.ORDER, key, to_status=TxStatus.SUCCESS, transaction_hash="0xOLD")


def test_g1_order_pays_treasury_in_default_token(db, make_gateway, notifier):
    gateway = make_gateway(submit=[{"txHash": "0xHASH"}])

    assert handle_new_order(db, _intent(), gateway=gateway, notifier=notifier) is True

    submission = gateway.submissions[0]
    assert submission.sender_tg_id == "alice"
    assert submission.chain_name == "matic"
    assert submission.to == [Web3.to_checksum_address(G1)]
    recipient, amount = decode(["address", "uint256"], bytes.fromhex(submission.data[0][10:]))
    assert recipient.lower() == TREASURY
    assert amount == 5 * 10**18

    record = _record(db)
    assert record.status == TxStatus.SUCCESS.value
    assert record.transaction_hash == "0xHASH"
    assert (record.order_type, record.quote_id, record.token_amount_g1) == ("g1", "q-g1", "5")
    assert record.token_address is None

    sent = notifier.sent[0]
    assert sent.webhook_url == "https://hooks.test/order"
    assert sent.webhook_payload["quoteId"] == "q-g1"
    assert sent.webhook_payload["orderType"] == "g1"
    assert sent.webhook_payload["GxUsdExchangeRate"] == "1"
    assert sent.webhook_payload["status"] == "success"
    assert sent.analytics_event == "Order"


def test_usd_order_pays_quote_token_on_quote_chain(db, make_gateway, notifier):
    gateway = make_gateway(submit=[{"txHash": "0xHASH"}])

    intent = _intent(event_id="order-2", quote_id="q-usd", order_type="usd")
    assert handle_new_order(db, intent, gateway=gateway, notifier=notifier) is True

    submission = gateway.submissions[0]
    assert submission.chain_name == "base"
    assert submission.to == [Web3.to_checksum_address(USDC)]
    recipient, amount = decode(["address", "uint256"], bytes.fromhex(submission.data[0][10:]))
    assert recipient.lower() == TREASURY
    assert amount == 25 * 10**17

    record = _record(db, "order-2")
    assert (record.chain_id, record.token_address, record.token_amount) == ("eip155:8453", USDC, "2.5")


def test_usd_order_without_usd_investment_is_noop(db, make_gateway, notifier):
    gateway = make_gateway(submit=[{"txHash": "0xHASH"}])

    intent = _intent(quote_id="q-no-usd", order_type="usd")
    assert handle_new_order(db, intent, gateway=gateway, notifier=notifier) is True
    assert gateway.submissions == []
    assert _record(db) is None


@pytest.mark.parametrize(
    "overrides",
    [
        {"user_telegram_id": "mallory"},
        {"quote_id": "q-missing"},
        {"order_type": "btc"},
        {"event_id": ""},
    ],
)
def test_unusable_order_is_noop(db, make_gateway, notifier, overrides):
    gateway = make_gateway(submit=[{"txHash": "0xHASH"}])

    assert handle_new_order(db, _intent(**overrides), gateway=gateway, notifier=notifier) is True
    assert gateway.submissions == []


def test_second_g1_order_is_skipped(db, make_gateway, notifier):
    _settled_order(db, event_id="order-0", order_type="g1", quote_id="q-old")
    gateway = make_gateway(submit=[{"txHash": "0xHASH"}])

    assert handle_new_order(db, _intent(), gateway=gateway, notifier=notifier) is True
    assert gateway.submissions == []
    assert _record(db) is None


def test_usd_order_for_other_quote_blocks_g1_order(db, make_gateway, notifier):
    _settled_order(db, event_id="order-0", order_type="usd", quote_id="q-old")
    gateway = make_gateway(submit=[{"txHash": "0xHASH"}])

    assert handle_new_order(db, _intent(), gateway=gateway, notifier=notifier) is True
    assert gateway.submissions == []


def test_usd_order_for_same_quote_allows_g1_order(db, make_gateway, notifier):
    _settled_order(db, event_id="order-0", order_type="usd", quote_id="q-g1")
    gateway = make_gateway(submit=[{"txHash": "0xHASH"}])

    assert handle_new_order(db, _intent(), gateway=gateway, notifier=notifier) is True
    assert len(gateway.submissions) == 1
    assert _record(db).status == TxStatus.SUCCESS.value


def test_pending_hash_order_resolves_after_another_order_settles(db, make_gateway, notifier):
    gateway = make_gateway(submit=[{"userOpHash": "0xOP"}], status=[{"txHash": "0xHASH"}])

    assert handle_new_order(db, _intent(), gateway=gateway, notifier=notifier) is False
    assert _record(db).status == TxStatus.PENDING_HASH.value

    _settled_order(db, event_id="order-0", order_type="g1", quote_id="q-other")

    assert handle_new_order(db, _intent(), gateway=gateway, notifier=notifier) is True
    record = _record(db)
    assert record.status == TxStatus.SUCCESS.value
    assert record.transaction_hash == "0xHASH"
    assert gateway.status_calls == ["0xOP"]
    assert len(gateway.submissions) == 1
    assert len(notifier.sent) == 1


def test_missing_treasury_wallet_is_retryable(db, make_gateway, notifier, monkeypatch):
    monkeypatch.setenv("SOURCE_WALLET_ADDRESS", "")
    get_settings.cache_clear()
    gateway = make_gateway(submit=[{"txHash": "0xHASH"}])

    assert handle_new_order(db, _intent(), gateway=gateway, notifier=notifier) is False
    assert gateway.submissions == []
    assert _record(db) is None
