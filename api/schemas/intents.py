from __future__ import annotations

from pydantic import BaseModel, Field

from app.domain.intents import (
    OrderIntent,
    OrderType,
    RewardIntent,
    SwapIntent,
    TransferIntent,
    VestingIntent,
    VestingRecipient,
)


class IntentResponse(BaseModel):
    ok: bool


class RewardRequest(BaseModel):
    userTelegramID: str = Field(..., min_length=1, max_length=64)
    eventId: str | None = Field(default=None, max_length=128)
    responsePath: str | None = None
    userHandle: str | None = None
    userName: str | None = None
    patchwallet: str | None = Field(default=None, max_length=64)
    reason: str | None = None
    message: str | None = None
    amount: str | None = None
    referentUserTelegramID: str | None = None
    chainId: str | None = None
    tokenAddress: str | None = None
    isSignupReward: bool = True
    isReferralReward: bool = True
    isLinkReward: bool = True

    def to_intent(self) -> RewardIntent:
        return RewardIntent(
            user_telegram_id=self.userTelegramID,
            event_id=self.eventId,
            response_path=self.responsePath,
            user_handle=self.userHandle,
            user_name=self.userName,
            patchwallet=self.patchwallet,
            reason=self.reason,
            message=self.message,
            amount=self.amount,
            referent_user_telegram_id=self.referentUserTelegramID,
            chain_id=self.chainId,
            token_address=self.tokenAddress,
            is_signup_reward=self.isSignupReward,
            is_referral_reward=self.isReferralReward,
            is_link_reward=self.isLinkReward,
        )


class TransferRequest(BaseModel):
    eventId: str = Field(..., min_length=1, max_length=128)
    senderTgId: str = Field(..., min_length=1, max_length=64)
    recipientTgId: str = Field(..., min_length=1, max_length=64)
    amount: str
    chainId: str | None = None
    tokenAddress: str | None = None
    tokenSymbol: str | None = None
    tokenDecimals: int | None = Field(default=None, ge=0, le=36)
    message: str | None = None

    def to_intent(self) -> TransferIntent:
        return TransferIntent(
            event_id=self.eventId,
            sender_tg_id=self.senderTgId,
            recipient_tg_id=self.recipientTgId,
            amount=self.amount,
            chain_id=self.chainId,
            token_address=self.tokenAddress,
            token_symbol=self.tokenSymbol,
            token_decimals=self.tokenDecimals,
            message=self.message,
        )


class VestingRecipientIn(BaseModel):
    recipientAddress: str = Field(..., min_length=3, max_length=64)
    amount: str


class VestingRequest(BaseModel):
    eventId: str = Field(..., min_length=1, max_length=128)
    senderTgId: str = Field(..., min_length=1, max_length=64)
    recipients: list[VestingRecipientIn] = Field(default_factory=list)
    chainId: str | None = None
    tokenAddress: str | None = None
    tokenSymbol: str | None = None
    tokenDecimals: int | None = Field(default=None, ge=0, le=36)
    useVesting: bool = False

    def to_intent(self) -> VestingIntent:
        return VestingIntent(
            event_id=self.eventId,
            sender_tg_id=self.senderTgId,
            recipients=[
                VestingRecipient(recipient_address=r.recipientAddress, amount=r.amount)
                for r in self.recipients
            ],
            chain_id=self.chainId,
            token_address=self.tokenAddress,
            token_symbol=self.tokenSymbol,
            token_decimals=self.tokenDecimals,
            use_vesting=self.useVesting,
        )


class SwapRequest(BaseModel):
    eventId: str = Field(..., min_length=1, max_length=128)
    userTelegramID: str = Field(..., min_length=1, max_length=64)
    to: str
    data: str
    value: str = "0x00"
    delegatecall: int = Field(default=0, ge=0, le=1)
    userWallet: str | None = None
    userName: str | None = None
    userHandle: str | None = None
    tokenIn: str | None = None
    amountIn: str | None = None
    tokenOut: str | None = None
    amountOut: str | None = None
    priceImpact: str | None = None
    gas: str | None = None
    # "from" is a keyword; accepted on the wire through the alias
    fromAddress: str | None = Field(default=None, alias="from")
    tokenInSymbol: str | None = None
    tokenOutSymbol: str | None = None
    chainId: str | None = None
    chainIn: str | None = None
    chainOut: str | None = None

    model_config = {"populate_by_name": True}

    def to_intent(self) -> SwapIntent:
        return SwapIntent(
            event_id=self.eventId,
            user_telegram_id=self.userTelegramID,
            to=self.to,
            data=self.data,
            value=self.value,
            delegatecall=self.delegatecall,
            user_wallet=self.userWallet,
            user_name=self.userName,
            user_handle=self.userHandle,
            token_in=self.tokenIn,
            amount_in=self.amountIn,
            token_out=self.tokenOut,
            amount_out=self.amountOut,
            price_impact=self.priceImpact,
            gas=self.gas,
            from_address=self.fromAddress,
            token_in_symbol=self.tokenInSymbol,
            token_out_symbol=self.tokenOutSymbol,
            chain_id=self.chainId,
            chain_in=self.chainIn,
            chain_out=self.chainOut,
        )


class OrderRequest(BaseModel):
    eventId: str = Field(..., min_length=1, max_length=128)
    userTelegramID: str = Field(..., min_length=1, max_length=64)
    quoteId: str = Field(..., min_length=1, max_length=128)
    orderType: OrderType = OrderType.G1

    def to_intent(self) -> OrderIntent:
        return OrderIntent(
            event_id=self.eventId,
            user_telegram_id=self.userTelegramID,
            quote_id=self.quoteId,
            order_type=self.orderType.value,
        )
