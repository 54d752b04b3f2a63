from __future__ import annotations

import enum


class TxStatus(str, enum.Enum):
    PENDING = "pending"
    PENDING_HASH = "pending_hash"
    SUCCESS = "success"
    FAILURE = "failure"


TERMINAL = {
    TxStatus.SUCCESS,
    TxStatus.FAILURE,
}

# None is the implicit "no record yet" state.
ALLOWED = {
    None: {TxStatus.PENDING},
    TxStatus.PENDING: {TxStatus.PENDING, TxStatus.PENDING_HASH, TxStatus.SUCCESS, TxStatus.FAILURE},
    TxStatus.PENDING_HASH: {TxStatus.PENDING_HASH, TxStatus.SUCCESS, TxStatus.FAILURE},
    TxStatus.SUCCESS: set(),
    TxStatus.FAILURE: set(),
}


def is_terminal(status: TxStatus | str | None) -> bool:
    if status is None:
        return False
    return TxStatus(status) in TERMINAL


def assert_valid_transition(frm: TxStatus | None, to: TxStatus) -> None:
    if frm in TERMINAL:
        raise ValueError(f"Cannot transition from terminal status: {frm.value}")

    if to not in ALLOWED.get(frm, set()):
        label = frm.value if frm is not None else "absent"
        raise ValueError(f"Invalid status transition: {label} -> {to.value}")
