from __future__ import annotations

from typing import Any

ERC20_ABI: list[dict[str, Any]] = [
    {
        "name": "transfer",
        "type": "function",
        "stateMutability": "nonpayable",
        "inputs": [
            {"name": "to", "type": "address"},
            {"name": "amount", "type": "uint256"},
        ],
        "outputs": [{"name": "", "type": "bool"}],
    },
    {
        "name": "approve",
        "type": "function",
        "stateMutability": "nonpayable",
        "inputs": [
            {"name": "spender", "type": "address"},
            {"name": "amount", "type": "uint256"},
        ],
        "outputs": [{"name": "", "type": "bool"}],
    },
]

_PLAN_COMPONENTS = [
    {"name": "recipient", "type": "address"},
    {"name": "amount", "type": "uint256"},
    {"name": "start", "type": "uint256"},
    {"name": "cliff", "type": "uint256"},
    {"name": "rate", "type": "uint256"},
]

HEDGEY_BATCH_PLANNER_ABI: list[dict[str, Any]] = [
    {
        "name": "batchLockingPlans",
        "type": "function",
        "stateMutability": "nonpayable",
        "inputs": [
            {"name": "locker", "type": "address"},
            {"name": "token", "type": "address"},
            {"name": "totalAmount", "type": "uint256"},
            {"name": "plans", "type": "tuple[]", "components": _PLAN_COMPONENTS},
            {"name": "period", "type": "uint256"},
            {"name": "mintType", "type": "uint8"},
        ],
        "outputs": [],
    },
    {
        "name": "batchVestingPlans",
        "type": "function",
        "stateMutability": "nonpayable",
        "inputs": [
            {"name": "locker", "type": "address"},
            {"name": "token", "type": "address"},
            {"name": "totalAmount", "type": "uint256"},
            {"name": "plans", "type": "tuple[]", "components": _PLAN_COMPONENTS},
            {"name": "period", "type": "uint256"},
            {"name": "vestingAdmin", "type": "address"},
            {"name": "adminTransferOBO", "type": "bool"},
            {"name": "mintType", "type": "uint8"},
        ],
        "outputs": [],
    },
]
