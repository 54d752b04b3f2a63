from __future__ import annotations

import enum
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation

from app.config import Settings


class IntentKind(str, enum.Enum):
    REWARD = "reward"
    TRANSFER = "transfer"
    VESTING = "vesting"
    SWAP = "swap"
    ORDER = "order"


class OrderType(str, enum.Enum):
    G1 = "g1"
    USD = "usd"


class RewardReason(str, enum.Enum):
    SIGNUP = "user_sign_up"
    REFERRAL = "2x_reward"
    LINK = "referral_link"


@dataclass(frozen=True)
class Routing:
    chain_id: str
    chain_name: str
    token_address: str
    token_symbol: str
    token_decimals: int


def resolve_routing(
    settings: Settings,
    *,
    chain_id: str | None = None,
    token_address: str | None = None,
    token_symbol: str | None = None,
    token_decimals: int | None = None,
) -> Routing:
    """
    Per-call routing with explicit fallback to the configured defaults
    (Polygon / G1 unless overridden in settings).
    """
    resolved_chain = chain_id or settings.default_chain_id
    return Routing(
        chain_id=resolved_chain,
        chain_name=settings.chain_name(resolved_chain),
        token_address=token_address or settings.default_token_address,
        token_symbol=token_symbol or settings.default_token_symbol,
        token_decimals=token_decimals if token_decimals is not None else settings.default_token_decimals,
    )


@dataclass
class UserProfile:
    user_telegram_id: str
    response_path: str | None = None
    user_handle: str | None = None
    user_name: str | None = None
    patchwallet: str | None = None


@dataclass
class RewardIntent:
    user_telegram_id: str
    event_id: str | None = None
    response_path: str | None = None
    user_handle: str | None = None
    user_name: str | None = None
    patchwallet: str | None = None
    reason: str | None = None
    message: str | None = None
    amount: str | None = None
    referent_user_telegram_id: str | None = None
    chain_id: str | None = None
    token_address: str | None = None
    is_signup_reward: bool = True
    is_referral_reward: bool = True
    is_link_reward: bool = True

    def profile(self) -> UserProfile:
        return UserProfile(
            user_telegram_id=self.user_telegram_id,
            response_path=self.response_path,
            user_handle=self.user_handle,
            user_name=self.user_name,
            patchwallet=self.patchwallet,
        )


@dataclass
class TransferIntent:
    event_id: str
    sender_tg_id: str
    recipient_tg_id: str
    amount: str
    chain_id: str | None = None
    token_address: str | None = None
    token_symbol: str | None = None
    token_decimals: int | None = None
    message: str | None = None


@dataclass
class VestingRecipient:
    recipient_address: str
    amount: str

    def as_dict(self) -> dict[str, str]:
        return {"recipientAddress": self.recipient_address, "amount": self.amount}


@dataclass
class VestingIntent:
    event_id: str
    sender_tg_id: str
    recipients: list[VestingRecipient] = field(default_factory=list)
    chain_id: str | None = None
    token_address: str | None = None
    token_symbol: str | None = None
    token_decimals: int | None = None
    use_vesting: bool = False


@dataclass
class SwapIntent:
    event_id: str
    user_telegram_id: str
    to: str
    data: str
    value: str = "0x00"
    delegatecall: int = 0
    user_wallet: str | None = None
    user_name: str | None = None
    user_handle: str | None = None
    token_in: str | None = None
    amount_in: str | None = None
    token_out: str | None = None
    amount_out: str | None = None
    price_impact: str | None = None
    gas: str | None = None
    from_address: str | None = None
    token_in_symbol: str | None = None
    token_out_symbol: str | None = None
    chain_id: str | None = None
    chain_in: str | None = None
    chain_out: str | None = None


@dataclass
class OrderIntent:
    """Settles a stored quote: the user pays the treasury wallet."""

    event_id: str
    user_telegram_id: str
    quote_id: str
    order_type: str = OrderType.G1.value


def is_positive_amount(amount: str | None) -> bool:
    if amount is None:
        return False
    try:
        dec = Decimal(str(amount))
    except (InvalidOperation, ValueError):
        return False
    return dec.is_finite() and dec > 0
