from __future__ import annotations

import logging
from typing import Any

from sqlalchemy.orm import Session

from app.config import Settings, get_settings
from app.domain.intents import IntentKind, Routing, TransferIntent, is_positive_amount, resolve_routing
from app.services.notifications import Notification, Notifier
from app.services.reconciler import IntentSpec, reconcile
from db.models import User
from db.repos import records_repo, users_repo
from wallet.client import WalletGatewayClient, WalletGatewayError
from wallet.encoding import Submission, token_transfer

logger = logging.getLogger(__name__)


class TransferSpec(IntentSpec):
    """User-to-user transfer signed by the sender's custodial account."""

    kind = IntentKind.TRANSFER

    def __init__(
        self,
        intent: TransferIntent,
        *,
        sender: User,
        recipient_wallet: str,
        routing: Routing,
        settings: Settings,
    ):
        super().__init__(intent.event_id)
        self.intent = intent
        self.sender = sender
        self.recipient_wallet = recipient_wallet
        self.routing = routing
        self.settings = settings

    def identity(self) -> dict[str, Any]:
        return {"event_id": self.event_id}

    def snapshot(self) -> dict[str, Any]:
        return {
            "chain_id": self.routing.chain_id,
            "token_symbol": self.routing.token_symbol,
            "token_address": self.routing.token_address,
            "sender_tg_id": self.sender.user_telegram_id,
            "sender_wallet": self.sender.patchwallet,
            "sender_name": self.sender.user_name,
            "sender_handle": self.sender.user_handle,
            "recipient_tg_id": self.intent.recipient_tg_id,
            "recipient_wallet": self.recipient_wallet,
            "token_amount": self.intent.amount,
            "message": self.intent.message,
        }

    def build_submission(self) -> Submission:
        return token_transfer(
            sender_tg_id=self.sender.user_telegram_id,
            chain_name=self.routing.chain_name,
            token_address=self.routing.token_address,
            recipient=self.recipient_wallet,
            amount=self.intent.amount,
            decimals=self.routing.token_decimals,
            native=self.settings.is_native_token(self.routing.token_address),
        )

    def notification(self, record) -> Notification | None:
        properties = {
            "chainId": record.chain_id,
            "tokenSymbol": record.token_symbol,
            "tokenAddress": record.token_address,
            "senderTgId": record.sender_tg_id,
            "senderWallet": record.sender_wallet,
            "senderName": record.sender_name,
            "senderHandle": record.sender_handle,
            "recipientTgId": record.recipient_tg_id,
            "recipientWallet": record.recipient_wallet,
            "tokenAmount": record.token_amount,
            "transactionHash": record.transaction_hash,
            "eventId": record.event_id,
        }
        payload = dict(properties)
        payload.update(
            {
                "senderResponsePath": self.sender.response_path,
                "message": record.message,
                "status": record.status,
            }
        )
        return Notification(
            webhook_url=self.settings.flowxo_new_transaction_webhook or None,
            webhook_payload=payload,
            analytics_user_id=record.sender_tg_id,
            analytics_event="Transfer",
            analytics_properties=properties,
            timestamp=record.updated_at,
        )


def handle_new_transaction(
    db: Session,
    intent: TransferIntent,
    *,
    gateway: WalletGatewayClient | None = None,
    notifier: Notifier | None = None,
) -> bool:
    if not (intent.event_id and intent.sender_tg_id and intent.recipient_tg_id and is_positive_amount(intent.amount)):
        logger.info("transfer skipped: missing event, sender, recipient or amount")
        return True

    settings = get_settings()
    gateway = gateway or WalletGatewayClient()
    notifier = notifier or Notifier()

    sender = users_repo.get_user(db, intent.sender_tg_id)
    if sender is None:
        logger.error("sender %s is not a user", intent.sender_tg_id)
        return True

    existing = records_repo.find_by_identity(db, IntentKind.TRANSFER, {"event_id": intent.event_id})
    recipient_wallet = existing.recipient_wallet if existing is not None else None
    if not recipient_wallet:
        try:
            recipient_wallet = gateway.resolve_address(intent.recipient_tg_id)
        except WalletGatewayError as e:
            logger.warning("could not resolve wallet for recipient %s: %s", intent.recipient_tg_id, e)
            return False

    routing = resolve_routing(
        settings,
        chain_id=intent.chain_id,
        token_address=intent.token_address,
        token_symbol=intent.token_symbol,
        token_decimals=intent.token_decimals,
    )
    spec = TransferSpec(
        intent,
        sender=sender,
        recipient_wallet=recipient_wallet,
        routing=routing,
        settings=settings,
    )
    return reconcile(db, spec, gateway=gateway, notifier=notifier)
