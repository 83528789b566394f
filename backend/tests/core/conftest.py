"""Core test fixtures — tiny collaborator fakes for the pure Ledger.

Invariants:
    - FakeCaller returns whatever account the test sets (no binding rules)
    - sink is the in-memory event log, so emitted records keep their order

Design Decisions:
    - Hand-written fake over mocks: CallerResolver is one method
"""

import pytest

from tokenledger.core.domain_types import AccountId
from tokenledger.core.ledger import Ledger
from tokenledger.infrastructure.host_env import InMemoryEventLog

ALICE = AccountId("alice")


class FakeCaller:
    def __init__(self, account: AccountId):
        self.account = account

    def current_caller(self) -> AccountId:
        return self.account


@pytest.fixture
def caller():
    return FakeCaller(ALICE)


@pytest.fixture
def sink():
    return InMemoryEventLog()


@pytest.fixture
def ledger(caller, sink):
    """Ledger created by alice with 1000 units."""
    return Ledger(1000, ALICE, caller=caller, events=sink)
