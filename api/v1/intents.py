from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from api.schemas.intents import (
    IntentResponse,
    OrderRequest,
    RewardRequest,
    SwapRequest,
    TransferRequest,
    VestingRequest,
)
from app.core.context import set_event_id
from app.services.orders_service import handle_new_order
from app.services.rewards_service import (
    handle_isolated_reward,
    handle_link_reward,
    handle_new_reward,
    handle_referral_reward,
    handle_signup_reward,
)
from app.services.swaps_service import handle_swap
from app.services.transfers_service import handle_new_transaction
from app.services.vestings_service import handle_new_vesting
from db.deps import get_db

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/intents", tags=["intents"])


@router.post("/rewards/new-user", response_model=IntentResponse)
def new_user_reward(payload: RewardRequest, db: Session = Depends(get_db)) -> IntentResponse:
    set_event_id(payload.eventId)
    return IntentResponse(ok=handle_new_reward(db, payload.to_intent()))


@router.post("/rewards/signup", response_model=IntentResponse)
def signup_reward(payload: RewardRequest, db: Session = Depends(get_db)) -> IntentResponse:
    set_event_id(payload.eventId)
    return IntentResponse(ok=handle_signup_reward(db, payload.to_intent()))


@router.post("/rewards/referral", response_model=IntentResponse)
def referral_reward(payload: RewardRequest, db: Session = Depends(get_db)) -> IntentResponse:
    set_event_id(payload.eventId)
    return IntentResponse(ok=handle_referral_reward(db, payload.to_intent()))


@router.post("/rewards/link", response_model=IntentResponse)
def link_reward(payload: RewardRequest, db: Session = Depends(get_db)) -> IntentResponse:
    set_event_id(payload.eventId)
    return IntentResponse(ok=handle_link_reward(db, payload.to_intent()))


@router.post("/rewards/isolated", response_model=IntentResponse)
def isolated_reward(payload: RewardRequest, db: Session = Depends(get_db)) -> IntentResponse:
    set_event_id(payload.eventId)
    return IntentResponse(ok=handle_isolated_reward(db, payload.to_intent()))


@router.post("/transfers", response_model=IntentResponse)
def new_transaction(payload: TransferRequest, db: Session = Depends(get_db)) -> IntentResponse:
    set_event_id(payload.eventId)
    return IntentResponse(ok=handle_new_transaction(db, payload.to_intent()))


@router.post("/vestings", response_model=IntentResponse)
def new_vesting(payload: VestingRequest, db: Session = Depends(get_db)) -> IntentResponse:
    set_event_id(payload.eventId)
    return IntentResponse(ok=handle_new_vesting(db, payload.to_intent()))


@router.post("/swaps", response_model=IntentResponse)
def swap(payload: SwapRequest, db: Session = Depends(get_db)) -> IntentResponse:
    set_event_id(payload.eventId)
    return IntentResponse(ok=handle_swap(db, payload.to_intent()))


@router.post("/orders", response_model=IntentResponse)
def new_order(payload: OrderRequest, db: Session = Depends(get_db)) -> IntentResponse:
    set_event_id(payload.eventId)
    return IntentResponse(ok=handle_new_order(db, payload.to_intent()))
