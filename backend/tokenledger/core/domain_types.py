"""Domain Types — rich types that replace bare primitives across the ledger.

Invariants:
    - AccountId is opaque: the core only compares and hashes it
    - Balance is an unsigned integer bounded by MAX_BALANCE (u128 width)
    - All valid event kinds encoded as an Enum, no raw string matching

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - Python int for Balance: arbitrary precision, so overflow is an explicit
      range check against MAX_BALANCE instead of a machine wrap
    - str Enums: serialize to JSON without custom encoders
"""

from enum import Enum
from typing import NewType


# ─── Identity Types ──────────────────────────────────────────────

AccountId = NewType("AccountId", str)


# ─── Value Types ─────────────────────────────────────────────────

Balance = NewType("Balance", int)           # 0 – MAX_BALANCE

BALANCE_BITS = 128
MAX_BALANCE = Balance(2**BALANCE_BITS - 1)


# ─── Enums ───────────────────────────────────────────────────────

class LedgerEventKind(str, Enum):
    """Event records emitted on successful mutation."""
    TRANSFER = "transfer"
    BURN = "burn"
    MINT = "mint"


class LedgerOperation(str, Enum):
    """Mutating operations — used for logging and error context."""
    TRANSFER = "transfer"
    TRANSFER_FROM = "transfer_from"
    BURN = "burn"
    MINT = "mint"


def require_balance(value: int, name: str = "value") -> Balance:
    """Boundary check for amounts handed to the core.

    Raises ValueError (a programming error, not a business rule) when the
    value is not an int in [0, MAX_BALANCE]. bool is rejected explicitly.
    """
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{name} must be an int, got {type(value).__name__}")
    if value < 0 or value > MAX_BALANCE:
        raise ValueError(f"{name} out of range [0, 2**{BALANCE_BITS} - 1]: {value}")
    return Balance(value)
