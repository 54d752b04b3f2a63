from __future__ import annotations

import pytest

from app.domain.tx_status import TxStatus, assert_valid_transition, is_terminal


def test_first_write_must_be_pending():
    assert_valid_transition(None, TxStatus.PENDING)
    with pytest.raises(ValueError):
        assert_valid_transition(None, TxStatus.SUCCESS)


def test_pending_can_reach_every_state():
    for to in TxStatus:
        assert_valid_transition(TxStatus.PENDING, to)


def test_pending_hash_never_goes_back_to_pending():
    with pytest.raises(ValueError):
        assert_valid_transition(TxStatus.PENDING_HASH, TxStatus.PENDING)


@pytest.mark.parametrize("terminal", [TxStatus.SUCCESS, TxStatus.FAILURE])
def test_terminal_states_are_frozen(terminal):
    assert is_terminal(terminal)
    assert is_terminal(terminal.value)
    with pytest.raises(ValueError):
        assert_valid_transition(terminal, TxStatus.PENDING)


def test_absent_is_not_terminal():
    assert not is_terminal(None)
    assert not is_terminal("pending_hash")
