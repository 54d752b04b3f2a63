from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any

from sqlalchemy.orm import Session

from app.config import Settings, get_settings
from app.domain.intents import (
    IntentKind,
    RewardIntent,
    RewardReason,
    Routing,
    UserProfile,
    is_positive_amount,
    resolve_routing,
)
from app.services.notifications import Notification, Notifier
from app.services.reconciler import IntentSpec, reconcile, reconcile_many
from db.repos import records_repo, users_repo
from wallet.client import WalletGatewayClient, WalletGatewayError
from wallet.encoding import Submission, token_transfer

logger = logging.getLogger(__name__)

SIGNUP_MESSAGE = "Sign up reward"
REFERRAL_MESSAGE = "Referral reward"
LINK_MESSAGE = "Referral link"


class RewardSpec(IntentSpec):
    """
    A payout from the bot treasury (`source_tg_id`) to `recipient`.
    Subclasses decide the identity fields and the FlowXO webhook.
    """

    kind = IntentKind.REWARD
    webhook_setting = ""

    def __init__(
        self,
        *,
        event_id: str | None,
        reason: str,
        recipient: UserProfile,
        amount: str,
        message: str,
        routing: Routing,
        settings: Settings,
    ):
        super().__init__(event_id)
        self.reason = reason
        self.recipient = recipient
        self.amount = amount
        self.message = message
        self.routing = routing
        self.settings = settings

    def snapshot(self) -> dict[str, Any]:
        return {
            "response_path": self.recipient.response_path,
            "user_handle": self.recipient.user_handle,
            "user_name": self.recipient.user_name,
            "wallet_address": self.recipient.patchwallet,
            "amount": self.amount,
            "message": self.message,
            "token_address": self.routing.token_address,
            "chain_id": self.routing.chain_id,
        }

    def build_submission(self) -> Submission:
        return token_transfer(
            sender_tg_id=self.settings.SOURCE_TG_ID,
            chain_name=self.routing.chain_name,
            token_address=self.routing.token_address,
            recipient=self.recipient.patchwallet,
            amount=self.amount,
            decimals=self.routing.token_decimals,
            native=self.settings.is_native_token(self.routing.token_address),
        )

    def webhook_payload(self, record) -> dict[str, Any]:
        return {
            "userTelegramID": record.user_telegram_id,
            "responsePath": record.response_path,
            "walletAddress": record.wallet_address,
            "reason": record.reason,
            "userHandle": record.user_handle,
            "userName": record.user_name,
            "amount": record.amount,
            "message": record.message,
            "transactionHash": record.transaction_hash,
            "status": record.status,
        }

    def notification(self, record) -> Notification | None:
        return Notification(
            webhook_url=getattr(self.settings, self.webhook_setting, "") or None,
            webhook_payload=self.webhook_payload(record),
            timestamp=record.updated_at,
        )


class SignupRewardSpec(RewardSpec):
    webhook_setting = "flowxo_new_signup_reward_webhook"

    def identity(self) -> dict[str, Any]:
        return {
            "user_telegram_id": self.recipient.user_telegram_id,
            "event_id": self.event_id,
            "reason": self.reason,
        }

    def superseded(self, db: Session) -> bool:
        other = records_repo.find_other_event(
            db,
            self.kind,
            {"user_telegram_id": self.recipient.user_telegram_id, "reason": self.reason},
            self.event_id,
        )
        return other is not None


class IsolatedRewardSpec(SignupRewardSpec):
    webhook_setting = "flowxo_new_isolated_reward_webhook"


class LinkRewardSpec(RewardSpec):
    """Reward to a referent whose referral link brought in `sponsored_user_telegram_id`."""

    webhook_setting = "flowxo_new_link_reward_webhook"

    def __init__(self, *, sponsored_user_telegram_id: str, **kwargs: Any):
        super().__init__(**kwargs)
        self.sponsored_user_telegram_id = sponsored_user_telegram_id

    def identity(self) -> dict[str, Any]:
        return {
            "event_id": self.event_id,
            "reason": self.reason,
            "user_telegram_id": self.recipient.user_telegram_id,
            "sponsored_user_telegram_id": self.sponsored_user_telegram_id,
        }

    def superseded(self, db: Session) -> bool:
        other = records_repo.find_other_event(
            db,
            self.kind,
            {"sponsored_user_telegram_id": self.sponsored_user_telegram_id, "reason": self.reason},
            self.event_id,
        )
        return other is not None

    def webhook_payload(self, record) -> dict[str, Any]:
        payload = super().webhook_payload(record)
        payload["sponsoredUserTelegramID"] = record.sponsored_user_telegram_id
        return payload


class ReferralRewardSpec(RewardSpec):
    """Reward to the sender of a transfer that introduced the new user."""

    webhook_setting = "flowxo_new_referral_reward_webhook"

    def __init__(self, *, new_user: UserProfile, parent_transaction_hash: str | None, **kwargs: Any):
        super().__init__(**kwargs)
        self.new_user = new_user
        self.parent_transaction_hash = parent_transaction_hash

    def identity(self) -> dict[str, Any]:
        return {
            "event_id": self.event_id,
            "reason": self.reason,
            "user_telegram_id": self.recipient.user_telegram_id,
            "new_user_address": self.new_user.patchwallet,
        }

    def snapshot(self) -> dict[str, Any]:
        snap = super().snapshot()
        snap["parent_transaction_hash"] = self.parent_transaction_hash
        return snap

    def superseded(self, db: Session) -> bool:
        other = records_repo.find_other_event(
            db,
            self.kind,
            {
                "reason": self.reason,
                "user_telegram_id": self.recipient.user_telegram_id,
                "new_user_address": self.new_user.patchwallet,
            },
            self.event_id,
        )
        return other is not None

    def webhook_payload(self, record) -> dict[str, Any]:
        payload = super().webhook_payload(record)
        payload.update(
            {
                "parentTransactionHash": record.parent_transaction_hash,
                "newUserTgId": self.new_user.user_telegram_id,
                "newUserResponsePath": self.new_user.response_path,
                "newUserUserHandle": self.new_user.user_handle,
                "newUserUserName": self.new_user.user_name,
                "newUserPatchwallet": self.new_user.patchwallet,
            }
        )
        return payload


def _deps(gateway, notifier):
    return gateway or WalletGatewayClient(), notifier or Notifier()


def _routing(intent: RewardIntent, settings: Settings) -> Routing:
    return resolve_routing(settings, chain_id=intent.chain_id, token_address=intent.token_address)


def _wallet_of(user, gateway) -> str:
    if user.patchwallet:
        return user.patchwallet
    return gateway.resolve_address(user.user_telegram_id)


def _profile_with_wallet(db: Session, intent: RewardIntent, gateway) -> UserProfile | None:
    """The intent's user with a wallet filled in from the users table or the resolver."""
    profile = intent.profile()
    if profile.patchwallet:
        return profile
    user = users_repo.get_user(db, intent.user_telegram_id)
    try:
        profile.patchwallet = _wallet_of(user or profile, gateway)
    except WalletGatewayError as e:
        logger.warning("could not resolve wallet for %s: %s", intent.user_telegram_id, e)
        return None
    return profile


def handle_signup_reward(
    db: Session,
    intent: RewardIntent,
    *,
    gateway: WalletGatewayClient | None = None,
    notifier: Notifier | None = None,
) -> bool:
    settings = get_settings()
    gateway, notifier = _deps(gateway, notifier)

    recipient = _profile_with_wallet(db, intent, gateway)
    if recipient is None:
        return False

    spec = SignupRewardSpec(
        event_id=intent.event_id,
        reason=RewardReason.SIGNUP.value,
        recipient=recipient,
        amount=settings.signup_reward_amount,
        message=SIGNUP_MESSAGE,
        routing=_routing(intent, settings),
        settings=settings,
    )
    return reconcile(db, spec, gateway=gateway, notifier=notifier)


def handle_isolated_reward(
    db: Session,
    intent: RewardIntent,
    *,
    gateway: WalletGatewayClient | None = None,
    notifier: Notifier | None = None,
) -> bool:
    """Ad-hoc reward with caller-supplied reason, amount and message."""
    if not (intent.user_telegram_id and intent.event_id and intent.reason and is_positive_amount(intent.amount)):
        logger.info("isolated reward skipped: missing user, event, reason or amount")
        return True

    settings = get_settings()
    gateway, notifier = _deps(gateway, notifier)

    recipient = _profile_with_wallet(db, intent, gateway)
    if recipient is None:
        return False

    spec = IsolatedRewardSpec(
        event_id=intent.event_id,
        reason=intent.reason,
        recipient=recipient,
        amount=intent.amount,
        message=intent.message or "",
        routing=_routing(intent, settings),
        settings=settings,
    )
    return reconcile(db, spec, gateway=gateway, notifier=notifier)


def handle_link_reward(
    db: Session,
    intent: RewardIntent,
    *,
    gateway: WalletGatewayClient | None = None,
    notifier: Notifier | None = None,
) -> bool:
    settings = get_settings()
    gateway, notifier = _deps(gateway, notifier)

    referent = users_repo.get_user(db, intent.referent_user_telegram_id or "")
    if referent is None:
        logger.info("link reward skipped: referent %s is not a user", intent.referent_user_telegram_id)
        return True

    try:
        wallet = _wallet_of(referent, gateway)
    except WalletGatewayError as e:
        logger.warning("could not resolve wallet for referent %s: %s", referent.user_telegram_id, e)
        return False

    spec = LinkRewardSpec(
        event_id=intent.event_id,
        reason=RewardReason.LINK.value,
        recipient=UserProfile(
            user_telegram_id=referent.user_telegram_id,
            response_path=referent.response_path,
            user_handle=referent.user_handle,
            user_name=referent.user_name,
            patchwallet=wallet,
        ),
        amount=settings.link_reward_amount,
        message=LINK_MESSAGE,
        routing=_routing(intent, settings),
        settings=settings,
        sponsored_user_telegram_id=intent.user_telegram_id,
    )
    return reconcile(db, spec, gateway=gateway, notifier=notifier)


def eligible_parent_transfers(db: Session, user_telegram_id: str) -> list[tuple[Any, Any]]:
    """
    Transfers received by the new user from other users, as (transfer, referent)
    pairs. Duplicate (hash, sender) pairs collapse, unknown senders are dropped,
    and each referent keeps only its earliest transfer.
    """
    seen_pairs: set[tuple[str | None, str]] = set()
    seen_referents: set[str] = set()
    out = []
    for transfer in records_repo.list_transfers_to(db, user_telegram_id, exclude_sender=user_telegram_id):
        sender = transfer.sender_tg_id
        if not sender:
            continue
        pair = (transfer.transaction_hash, sender)
        if pair in seen_pairs or sender in seen_referents:
            continue
        seen_pairs.add(pair)

        referent = users_repo.get_user(db, sender)
        if referent is None:
            continue
        seen_referents.add(sender)
        out.append((transfer, referent))
    return out


def handle_referral_reward(
    db: Session,
    intent: RewardIntent,
    *,
    gateway: WalletGatewayClient | None = None,
    notifier: Notifier | None = None,
) -> bool:
    settings = get_settings()
    gateway, notifier = _deps(gateway, notifier)
    routing = _routing(intent, settings)
    candidates = eligible_parent_transfers(db, intent.user_telegram_id)
    if not candidates:
        logger.info("no referral to reward for new user %s", intent.user_telegram_id)
        return True

    new_user = _profile_with_wallet(db, intent, gateway)
    if new_user is None:
        return False

    specs = []
    unresolved = 0
    for transfer, referent in candidates:
        try:
            wallet = _wallet_of(referent, gateway)
        except WalletGatewayError as e:
            logger.warning("could not resolve wallet for referent %s: %s", referent.user_telegram_id, e)
            unresolved += 1
            continue
        specs.append(
            ReferralRewardSpec(
                event_id=intent.event_id,
                reason=RewardReason.REFERRAL.value,
                recipient=UserProfile(
                    user_telegram_id=referent.user_telegram_id,
                    response_path=referent.response_path,
                    user_handle=referent.user_handle,
                    user_name=referent.user_name,
                    patchwallet=wallet,
                ),
                amount=settings.referral_reward_amount,
                message=REFERRAL_MESSAGE,
                routing=routing,
                settings=settings,
                new_user=new_user,
                parent_transaction_hash=transfer.transaction_hash,
            )
        )

    # Resolvable referents are still paid; the rest are retried on the next call.
    done = reconcile_many(db, specs, gateway=gateway, notifier=notifier)
    return done and unresolved == 0


def handle_new_reward(
    db: Session,
    intent: RewardIntent,
    *,
    gateway: WalletGatewayClient | None = None,
    notifier: Notifier | None = None,
) -> bool:
    """
    New-user onboarding: sign-up, referral and link rewards, then the user
    is persisted and identified in analytics. A user already on file means
    onboarding happened before.
    """
    gateway, notifier = _deps(gateway, notifier)

    if users_repo.get_user(db, intent.user_telegram_id) is not None:
        logger.info("user %s already exists", intent.user_telegram_id)
        return True

    wallet = intent.patchwallet
    if not wallet:
        try:
            wallet = gateway.resolve_address(intent.user_telegram_id)
        except WalletGatewayError as e:
            logger.warning("could not resolve wallet for %s: %s", intent.user_telegram_id, e)
            return False
    intent = replace(intent, patchwallet=wallet)

    if intent.is_signup_reward and not handle_signup_reward(db, intent, gateway=gateway, notifier=notifier):
        return False

    if intent.is_referral_reward and not handle_referral_reward(db, intent, gateway=gateway, notifier=notifier):
        return False

    if (
        intent.is_link_reward
        and intent.referent_user_telegram_id
        and not handle_link_reward(db, intent, gateway=gateway, notifier=notifier)
    ):
        return False

    user = users_repo.save_user(
        db,
        user_telegram_id=intent.user_telegram_id,
        patchwallet=wallet,
        response_path=intent.response_path,
        user_handle=intent.user_handle,
        user_name=intent.user_name,
    )
    notifier.identify(
        user.user_telegram_id,
        {
            "responsePath": user.response_path,
            "userHandle": user.user_handle,
            "userName": user.user_name,
            "patchwallet": user.patchwallet,
        },
        user.date_added,
    )
    return True
