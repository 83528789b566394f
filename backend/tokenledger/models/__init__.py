"""ORM Models — SQLAlchemy declarative models for persisted ledger state.

Invariants:
    - All models inherit from Base (db/base.py)
    - Persisted state is exactly: one supply scalar, balances, allowances;
      ledger_events is the external event log

Design Decisions:
    - One file per table for locality
    - All models imported here so Base.metadata is complete before create_all
"""

from tokenledger.models.ledger_supply import LedgerSupply  # noqa: F401
from tokenledger.models.balance import BalanceRow  # noqa: F401
from tokenledger.models.allowance import AllowanceRow  # noqa: F401
from tokenledger.models.ledger_event import LedgerEventRow  # noqa: F401
