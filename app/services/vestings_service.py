from __future__ import annotations

import logging
from typing import Any

from sqlalchemy.orm import Session

from app.config import Settings, get_settings
from app.domain.intents import IntentKind, Routing, VestingIntent, is_positive_amount, resolve_routing
from app.services.notifications import Notification, Notifier
from app.services.reconciler import IntentSpec, reconcile
from db.models import User
from db.repos import users_repo
from wallet.client import WalletGatewayClient
from wallet.encoding import Submission, hedgey_batch, hedgey_plans

logger = logging.getLogger(__name__)


class VestingSpec(IntentSpec):
    """Hedgey batch plan created from the sender's account for many recipients."""

    kind = IntentKind.VESTING

    def __init__(self, intent: VestingIntent, *, sender: User, routing: Routing, settings: Settings):
        super().__init__(intent.event_id)
        self.intent = intent
        self.sender = sender
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
            "recipients": [r.as_dict() for r in self.intent.recipients],
        }

    def build_submission(self) -> Submission:
        s = self.settings
        total, plans = hedgey_plans(
            [r.as_dict() for r in self.intent.recipients],
            decimals=self.routing.token_decimals,
            start=s.vesting_start_timestamp,
            lock_term_s=s.token_lock_term_s,
        )
        return hedgey_batch(
            sender_tg_id=self.sender.user_telegram_id,
            chain_name=self.routing.chain_name,
            batch_planner=s.hedgey_batch_planner_address,
            locker=s.hedgey_vesting_locker if self.intent.use_vesting else s.hedgey_lockup_locker,
            token_address=self.routing.token_address,
            total_amount=total,
            plans=plans,
            use_vesting=self.intent.use_vesting,
            vesting_admin=s.vesting_admin_address or None,
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
            "recipients": record.recipients,
            "transactionHash": record.transaction_hash,
            "eventId": record.event_id,
        }
        payload = dict(properties)
        payload["senderResponsePath"] = self.sender.response_path
        payload["status"] = record.status
        return Notification(
            webhook_url=self.settings.flowxo_new_vesting_webhook or None,
            webhook_payload=payload,
            analytics_user_id=record.sender_tg_id,
            analytics_event="Vesting",
            analytics_properties=properties,
            timestamp=record.updated_at,
        )


def handle_new_vesting(
    db: Session,
    intent: VestingIntent,
    *,
    gateway: WalletGatewayClient | None = None,
    notifier: Notifier | None = None,
) -> bool:
    if not (intent.event_id and intent.sender_tg_id and intent.recipients):
        logger.info("vesting skipped: missing event, sender or recipients")
        return True
    if not all(r.recipient_address and is_positive_amount(r.amount) for r in intent.recipients):
        logger.info("vesting skipped: recipient without address or amount")
        return True

    settings = get_settings()

    sender = users_repo.get_user(db, intent.sender_tg_id)
    if sender is None:
        logger.error("sender %s is not a user", intent.sender_tg_id)
        return True

    routing = resolve_routing(
        settings,
        chain_id=intent.chain_id,
        token_address=intent.token_address,
        token_symbol=intent.token_symbol,
        token_decimals=intent.token_decimals,
    )
    spec = VestingSpec(intent, sender=sender, routing=routing, settings=settings)
    return reconcile(db, spec, gateway=gateway, notifier=notifier)
