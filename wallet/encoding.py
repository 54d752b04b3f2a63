from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation, ROUND_DOWN
from typing import Any

from web3 import Web3

from wallet.abis import ERC20_ABI, HEDGEY_BATCH_PLANNER_ABI

ZERO_VALUE = "0x00"
EMPTY_DATA = "0x"

# Hedgey fixed constants
LINEAR_PERIOD = 1
VESTING_MINT_TYPE = 4
LOCKUP_MINT_TYPE = 5


@dataclass
class Submission:
    """
    One wallet-provider instruction: parallel to/value/data lists executed
    by the custodial account of `sender_tg_id` on `chain_name`.
    """

    sender_tg_id: str
    chain_name: str
    to: list[str]
    value: list[str]
    data: list[str]
    delegatecall: int = 0


def to_base_units(amount: str, decimals: int) -> int:
    try:
        dec = Decimal(str(amount))
    except (InvalidOperation, TypeError) as exc:
        raise ValueError(f"invalid amount: {amount}") from exc
    if not dec.is_finite() or dec <= 0:
        raise ValueError(f"amount must be a positive number: {amount}")
    try:
        scaled = (dec * Decimal(10) ** decimals).to_integral_value(rounding=ROUND_DOWN)
    except ArithmeticError as exc:
        raise ValueError(f"amount out of range: {amount}") from exc
    return int(scaled)


def _contract(address: str | None, abi: list[dict[str, Any]]):
    w3 = Web3()
    if address:
        return w3.eth.contract(address=Web3.to_checksum_address(address), abi=abi)
    return w3.eth.contract(abi=abi)


def erc20_transfer_data(token_address: str, recipient: str, amount_wei: int) -> str:
    contract = _contract(token_address, ERC20_ABI)
    return contract.encode_abi("transfer", args=[Web3.to_checksum_address(recipient), int(amount_wei)])


def erc20_approve_data(token_address: str, spender: str, amount_wei: int) -> str:
    contract = _contract(token_address, ERC20_ABI)
    return contract.encode_abi("approve", args=[Web3.to_checksum_address(spender), int(amount_wei)])


def token_transfer(
    *,
    sender_tg_id: str,
    chain_name: str,
    token_address: str,
    recipient: str,
    amount: str,
    decimals: int = 18,
    native: bool = False,
) -> Submission:
    """
    Native transfers move value directly to the recipient; ERC20 transfers
    call `transfer` on the token contract with zero value.
    """
    if native:
        return Submission(
            sender_tg_id=sender_tg_id,
            chain_name=chain_name,
            to=[Web3.to_checksum_address(recipient)],
            value=[str(to_base_units(amount, 18))],
            data=[EMPTY_DATA],
        )

    amount_wei = to_base_units(amount, decimals)
    return Submission(
        sender_tg_id=sender_tg_id,
        chain_name=chain_name,
        to=[Web3.to_checksum_address(token_address)],
        value=[ZERO_VALUE],
        data=[erc20_transfer_data(token_address, recipient, amount_wei)],
    )


def hedgey_plans(
    recipients: list[dict[str, str]],
    *,
    decimals: int,
    start: int,
    lock_term_s: int,
) -> tuple[int, list[tuple[str, int, int, int, int]]]:
    """
    Build (totalAmount, plans) for the batch planner. Plans have no cliff and
    unlock linearly over `lock_term_s`; the rate is rounded up.
    """
    total = 0
    plans = []
    for item in recipients:
        amount_wei = to_base_units(item["amount"], decimals)
        total += amount_wei
        rate = -(-amount_wei // lock_term_s)
        plans.append(
            (
                Web3.to_checksum_address(item["recipientAddress"]),
                amount_wei,
                int(start),
                int(start),
                rate,
            )
        )
    return total, plans


def hedgey_batch(
    *,
    sender_tg_id: str,
    chain_name: str,
    batch_planner: str,
    locker: str,
    token_address: str,
    total_amount: int,
    plans: list[tuple[str, int, int, int, int]],
    use_vesting: bool = False,
    vesting_admin: str | None = None,
) -> Submission:
    contract = _contract(batch_planner, HEDGEY_BATCH_PLANNER_ABI)
    token = Web3.to_checksum_address(token_address)
    locker_cs = Web3.to_checksum_address(locker)

    if use_vesting:
        if not vesting_admin:
            raise ValueError("vesting admin address is required for vesting plans")
        data = contract.encode_abi(
            "batchVestingPlans",
            args=[
                locker_cs,
                token,
                int(total_amount),
                plans,
                LINEAR_PERIOD,
                Web3.to_checksum_address(vesting_admin),
                True,
                VESTING_MINT_TYPE,
            ],
        )
    else:
        data = contract.encode_abi(
            "batchLockingPlans",
            args=[locker_cs, token, int(total_amount), plans, LINEAR_PERIOD, LOCKUP_MINT_TYPE],
        )

    return Submission(
        sender_tg_id=sender_tg_id,
        chain_name=chain_name,
        to=[Web3.to_checksum_address(batch_planner)],
        value=[ZERO_VALUE],
        data=[data],
    )


def passthrough(
    *,
    sender_tg_id: str,
    chain_name: str,
    to: str,
    value: str,
    data: str,
    delegatecall: int = 0,
) -> Submission:
    """Pre-built call (e.g. an aggregator swap route) forwarded as is."""
    return Submission(
        sender_tg_id=sender_tg_id,
        chain_name=chain_name,
        to=[to],
        value=[value],
        data=[data],
        delegatecall=1 if delegatecall else 0,
    )
