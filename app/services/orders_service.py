from __future__ import annotations

import logging
from typing import Any

from sqlalchemy.orm import Session

from app.config import Settings, get_settings
from app.domain.intents import IntentKind, OrderIntent, OrderType, Routing, is_positive_amount, resolve_routing
from app.services.notifications import Notification, Notifier
from app.services.reconciler import IntentSpec, reconcile
from db.models import Quote, User
from db.models.quote import QUOTE_FIGURE_FIELDS
from db.repos import quotes_repo, records_repo, users_repo
from wallet.client import WalletGatewayClient
from wallet.encoding import Submission, token_transfer

logger = logging.getLogger(__name__)


class OrderSpec(IntentSpec):
    """
    Settlement of a stored GX quote. The user's account pays the treasury
    wallet: G1 orders in the default token, USD orders in the quote's token
    on the quote's chain.
    """

    kind = IntentKind.ORDER

    def __init__(self, intent: OrderIntent, *, user: User, quote: Quote, settings: Settings):
        super().__init__(intent.event_id)
        self.intent = intent
        self.user = user
        self.quote = quote
        self.settings = settings

    @property
    def is_usd(self) -> bool:
        return self.intent.order_type == OrderType.USD.value

    def routing(self) -> Routing:
        if self.is_usd:
            return resolve_routing(
                self.settings,
                chain_id=self.quote.chain_id,
                token_address=self.quote.token_address,
            )
        return resolve_routing(self.settings)

    def identity(self) -> dict[str, Any]:
        return {"event_id": self.event_id}

    def snapshot(self) -> dict[str, Any]:
        snap = {name: getattr(self.quote, name) for name in QUOTE_FIGURE_FIELDS}
        snap.update(
            {
                "quote_id": self.quote.quote_id,
                "order_type": self.intent.order_type,
                "user_telegram_id": self.user.user_telegram_id,
            }
        )
        return snap

    def build_submission(self) -> Submission:
        routing = self.routing()
        amount = self.quote.token_amount if self.is_usd else self.quote.token_amount_g1
        return token_transfer(
            sender_tg_id=self.user.user_telegram_id,
            chain_name=routing.chain_name,
            token_address=routing.token_address,
            recipient=self.settings.source_wallet_address,
            amount=amount or "",
            decimals=routing.token_decimals,
            native=self.settings.is_native_token(routing.token_address),
        )

    def superseded(self, db: Session) -> bool:
        return records_repo.has_successful_order(
            db,
            user_telegram_id=self.user.user_telegram_id,
            event_id=self.event_id,
            order_type=self.intent.order_type,
            quote_id=self.quote.quote_id,
        )

    def notification(self, record) -> Notification | None:
        payload = {
            "quoteId": record.quote_id,
            "orderType": record.order_type,
            "tokenAmountG1": record.token_amount_g1,
            "usdFromUsdInvestment": record.usd_from_usd_investment,
            "usdFromG1Investment": record.usd_from_g1_investment,
            "usdFromMvu": record.usd_from_mvu,
            "usdFromTime": record.usd_from_time,
            "equivalentUsdInvested": record.equivalent_usd_invested,
            "gxBeforeMvu": record.gx_before_mvu,
            "gxMvuEffect": record.gx_mvu_effect,
            "gxTimeEffect": record.gx_time_effect,
            "GxUsdExchangeRate": record.gx_usd_exchange_rate,
            "standardGxUsdExchangeRate": record.standard_gx_usd_exchange_rate,
            "discountReceived": record.discount_received,
            "gxReceived": record.gx_received,
            "userTelegramID": record.user_telegram_id,
            "eventId": record.event_id,
            "transactionHash": record.transaction_hash,
            "status": record.status,
            "tokenAddress": record.token_address,
            "tokenAmount": record.token_amount,
            "chainId": record.chain_id,
        }
        return Notification(
            webhook_url=self.settings.flowxo_new_order_webhook or None,
            webhook_payload=payload,
            analytics_user_id=record.user_telegram_id,
            analytics_event="Order",
            analytics_properties=dict(payload),
            timestamp=record.updated_at,
        )


def handle_new_order(
    db: Session,
    intent: OrderIntent,
    *,
    gateway: WalletGatewayClient | None = None,
    notifier: Notifier | None = None,
) -> bool:
    if not (intent.event_id and intent.user_telegram_id and intent.quote_id):
        logger.info("order skipped: missing event, user or quote")
        return True
    if intent.order_type not in {t.value for t in OrderType}:
        logger.error("unknown order type %s", intent.order_type)
        return True

    settings = get_settings()

    user = users_repo.get_user(db, intent.user_telegram_id)
    if user is None:
        logger.error("sender %s is not a user", intent.user_telegram_id)
        return True

    quote = quotes_repo.get_quote(db, intent.user_telegram_id, intent.quote_id)
    if quote is None:
        logger.error("no quote %s for user %s", intent.quote_id, intent.user_telegram_id)
        return True

    if intent.order_type == OrderType.USD.value and not is_positive_amount(quote.usd_from_usd_investment):
        logger.info("usd order skipped: quote %s has no usd investment", intent.quote_id)
        return True

    if not settings.source_wallet_address:
        logger.error("SOURCE_WALLET_ADDRESS is not configured; order %s deferred", intent.event_id)
        return False

    spec = OrderSpec(intent, user=user, quote=quote, settings=settings)
    return reconcile(db, spec, gateway=gateway, notifier=notifier)
