"""Host Environment — caller binding and event sinks.

Tests cover:
    - RequestCaller resolves only inside bind()
    - bind() releases the caller on exit, even after an exception
    - Nested bind() is refused
    - BufferedEventSink drains in emission order
    - InMemoryEventLog indexes records by every topic account once
"""

import pytest

from tokenledger.core.domain_types import AccountId
from tokenledger.core.errors import CallerUnresolvedError
from tokenledger.core.events import Burn, Mint, Transfer
from tokenledger.infrastructure.host_env import (
    BufferedEventSink, InMemoryEventLog, RequestCaller,
)

ALICE = AccountId("alice")
BOB = AccountId("bob")


def test_request_caller_unbound_raises():
    with pytest.raises(CallerUnresolvedError):
        RequestCaller().current_caller()


def test_request_caller_resolves_inside_bind():
    caller = RequestCaller()
    with caller.bind(ALICE):
        assert caller.current_caller() == ALICE
    with pytest.raises(CallerUnresolvedError):
        caller.current_caller()


def test_request_caller_unbinds_after_error():
    caller = RequestCaller()
    with pytest.raises(RuntimeError, match="boom"):
        with caller.bind(ALICE):
            raise RuntimeError("boom")
    with caller.bind(BOB):
        assert caller.current_caller() == BOB


def test_request_caller_refuses_nested_bind():
    caller = RequestCaller()
    with caller.bind(ALICE):
        with pytest.raises(RuntimeError, match="already bound"):
            with caller.bind(BOB):
                pass
        assert caller.current_caller() == ALICE


def test_buffered_sink_drains_in_order():
    sink = BufferedEventSink()
    first = Mint(from_=ALICE, value=1)
    second = Burn(from_=ALICE, value=1)
    sink.emit(first)
    sink.emit(second)
    assert sink.drain() == (first, second)
    assert sink.drain() == ()


def test_event_log_indexes_topics():
    log = InMemoryEventLog()
    transfer = Transfer(from_=ALICE, to=BOB, value=5)
    mint = Mint(from_=BOB, value=2)
    log.emit(transfer)
    log.emit(mint)
    assert len(log) == 2
    assert log.all() == [transfer, mint]
    assert log.for_account(ALICE) == [transfer]
    assert log.for_account(BOB) == [transfer, mint]
    assert log.for_account(AccountId("nobody")) == []


def test_event_log_self_transfer_indexed_once():
    log = InMemoryEventLog()
    event = Transfer(from_=ALICE, to=ALICE, value=1)
    log.emit(event)
    assert log.for_account(ALICE) == [event]
