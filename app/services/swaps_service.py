from __future__ import annotations

import logging
from typing import Any

from sqlalchemy.orm import Session

from app.config import Settings, get_settings
from app.domain.intents import IntentKind, SwapIntent
from app.services.notifications import Notification, Notifier
from app.services.reconciler import IntentSpec, reconcile
from db.models import User
from db.repos import users_repo
from wallet.client import WalletGatewayClient
from wallet.encoding import Submission, passthrough

logger = logging.getLogger(__name__)


class SwapSpec(IntentSpec):
    """Aggregator route executed from the user's account on the input chain."""

    kind = IntentKind.SWAP

    def __init__(self, intent: SwapIntent, *, user: User, settings: Settings):
        super().__init__(intent.event_id)
        self.intent = intent
        self.user = user
        self.settings = settings

    @property
    def chain_in(self) -> str:
        return self.intent.chain_in or self.intent.chain_id or self.settings.default_chain_id

    def identity(self) -> dict[str, Any]:
        return {"event_id": self.event_id}

    def snapshot(self) -> dict[str, Any]:
        i = self.intent
        return {
            "chain_id": i.chain_id or self.chain_in,
            "user_telegram_id": self.user.user_telegram_id,
            "user_wallet": i.user_wallet or self.user.patchwallet,
            "user_name": i.user_name or self.user.user_name,
            "user_handle": i.user_handle or self.user.user_handle,
            "token_in": i.token_in,
            "amount_in": i.amount_in,
            "token_out": i.token_out,
            "amount_out": i.amount_out,
            "price_impact": i.price_impact,
            "gas": i.gas,
            "from_address": i.from_address,
            "to_address": i.to,
            "token_in_symbol": i.token_in_symbol,
            "token_out_symbol": i.token_out_symbol,
            "chain_in": self.chain_in,
            "chain_out": i.chain_out or self.chain_in,
        }

    def build_submission(self) -> Submission:
        return passthrough(
            sender_tg_id=self.user.user_telegram_id,
            chain_name=self.settings.chain_name(self.chain_in),
            to=self.intent.to,
            value=self.intent.value,
            data=self.intent.data,
            delegatecall=self.intent.delegatecall,
        )

    def notification(self, record) -> Notification | None:
        properties = {
            "eventId": record.event_id,
            "chainId": record.chain_id,
            "userTelegramID": record.user_telegram_id,
            "tokenIn": record.token_in,
            "amountIn": record.amount_in,
            "tokenOut": record.token_out,
            "amountOut": record.amount_out,
            "priceImpact": record.price_impact,
            "gas": record.gas,
            "status": record.status,
            "transactionHash": record.transaction_hash,
            "to": record.to_address,
            "from": record.from_address,
            "tokenInSymbol": record.token_in_symbol,
            "tokenOutSymbol": record.token_out_symbol,
            "chainIn": record.chain_in,
            "chainOut": record.chain_out,
        }
        payload = dict(properties)
        payload.update(
            {
                "userResponsePath": self.user.response_path,
                "userWallet": record.user_wallet,
                "userName": record.user_name,
                "userHandle": record.user_handle,
            }
        )
        return Notification(
            webhook_url=self.settings.flowxo_new_swap_webhook or None,
            webhook_payload=payload,
            analytics_user_id=record.user_telegram_id,
            analytics_event="Swap",
            analytics_properties=properties,
            timestamp=record.updated_at,
        )


def handle_swap(
    db: Session,
    intent: SwapIntent,
    *,
    gateway: WalletGatewayClient | None = None,
    notifier: Notifier | None = None,
) -> bool:
    if not (intent.event_id and intent.user_telegram_id and intent.to and intent.data):
        logger.info("swap skipped: missing event, user or route")
        return True

    user = users_repo.get_user(db, intent.user_telegram_id)
    if user is None:
        logger.error("swap requested by unknown user %s", intent.user_telegram_id)
        return True

    spec = SwapSpec(intent, user=user, settings=get_settings())
    return reconcile(db, spec, gateway=gateway, notifier=notifier)
