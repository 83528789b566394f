"""Column Types — exact storage for u128 amounts.

Invariants:
    - AmountType round-trips every int in [0, 2**128 - 1] exactly
    - Stored as canonical decimal text (no sign, no leading zeros)

Design Decisions:
    - Text over Numeric: SQLite coerces large NUMERIC values to REAL and
      BigInteger stops at 2**63 - 1
"""

from sqlalchemy import String
from sqlalchemy.types import TypeDecorator

AMOUNT_DIGITS = 39  # len(str(2**128 - 1))


class AmountType(TypeDecorator):
    """Non-negative integer amount persisted as decimal text."""
    impl = String(AMOUNT_DIGITS)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        if isinstance(value, bool) or not isinstance(value, int) or value < 0:
            raise ValueError(f"amount must be a non-negative int, got {value!r}")
        return str(value)

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return int(value)
