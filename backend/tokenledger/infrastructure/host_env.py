"""Host Environment — concrete caller resolution and event sinks for the Ledger.

Invariants:
    - RequestCaller resolves only inside a bind() block; outside it raises
      CallerUnresolvedError (never a stale or default identity)
    - bind() blocks do not nest: the host runs one operation at a time
    - Event sinks preserve emission order
    - InMemoryEventLog indexes every topic account of every record

Design Decisions:
    - Plain classes satisfying core Protocols structurally (no inheritance)
    - BufferedEventSink drains per operation: the service persists exactly the
      records one operation produced, in order
"""

from contextlib import contextmanager
from typing import Iterator

from tokenledger.core.domain_types import AccountId
from tokenledger.core.errors import CallerUnresolvedError
from tokenledger.core.events import LedgerEvent


class RequestCaller:
    """CallerResolver bound to one account for the duration of one operation."""

    def __init__(self) -> None:
        self._account: AccountId | None = None

    @contextmanager
    def bind(self, account: AccountId) -> Iterator[AccountId]:
        if self._account is not None:
            raise RuntimeError("RequestCaller is already bound")
        self._account = account
        try:
            yield account
        finally:
            self._account = None

    def current_caller(self) -> AccountId:
        if self._account is None:
            raise CallerUnresolvedError()
        return self._account


class BufferedEventSink:
    """EventSink that holds records until the host drains them."""

    def __init__(self) -> None:
        self._pending: list[LedgerEvent] = []

    def emit(self, event: LedgerEvent) -> None:
        self._pending.append(event)

    def drain(self) -> tuple[LedgerEvent, ...]:
        events = tuple(self._pending)
        self._pending.clear()
        return events


class InMemoryEventLog:
    """Ordered append-only log with a per-account topic index."""

    def __init__(self) -> None:
        self._records: list[LedgerEvent] = []
        self._by_account: dict[AccountId, list[int]] = {}

    def emit(self, event: LedgerEvent) -> None:
        position = len(self._records)
        self._records.append(event)
        for account in dict.fromkeys(event.topics()):
            self._by_account.setdefault(account, []).append(position)

    def __len__(self) -> int:
        return len(self._records)

    def all(self) -> list[LedgerEvent]:
        return list(self._records)

    def for_account(self, account: AccountId) -> list[LedgerEvent]:
        return [self._records[i] for i in self._by_account.get(account, [])]
