"""Boundary Protocols — contracts between the ledger core and its host.

Invariants:
    - Core NEVER imports from shell; dependency arrows point inward only
    - Caller identity and event delivery reach the Ledger only through these types
    - Implementations provided by the host via constructor injection

Design Decisions:
    - Protocol over ABC: structural subtyping, no inheritance hierarchy
    - CallerResolver / EventSink are synchronous: the core never awaits
    - LedgerStateRepository is async because implementations do IO; the shell
      orchestrates those calls around the pure ledger operations
"""

from typing import Protocol

from tokenledger.core.domain_types import AccountId
from tokenledger.core.events import LedgerEvent
from tokenledger.core.ledger_snapshot import LedgerChange, LedgerSnapshot


class CallerResolver(Protocol):
    """Yields the account the host attributes to the current invocation."""
    def current_caller(self) -> AccountId: ...


class EventSink(Protocol):
    """Accepts event records and appends them to an ordered, observable log."""
    def emit(self, event: LedgerEvent) -> None: ...


class LedgerStateRepository(Protocol):
    """Contract for ledger state persistence — implemented by shell."""
    async def load(self) -> LedgerSnapshot | None: ...
    async def save_genesis(self, snapshot: LedgerSnapshot) -> None: ...
    async def apply(self, change: LedgerChange) -> None: ...
