"""LedgerEvent ORM — ordered, append-only log of emitted records.

Invariants:
    - sequence is monotonically increasing in emission order
    - from_account / to_account are indexed topics for external lookup
    - to_account is NULL for Burn and Mint

Design Decisions:
    - Log table, not state: balances are never recomputed from it
    - Autoincrement integer key over UUID: order is the point of the log
"""

from datetime import datetime, timezone

from sqlalchemy import BigInteger, Integer, String, DateTime
from sqlalchemy.orm import Mapped, mapped_column

from tokenledger.db.base import Base
from tokenledger.db.types import AmountType


class LedgerEventRow(Base):
    """One emitted Transfer / Burn / Mint record."""
    __tablename__ = "ledger_events"

    sequence: Mapped[int] = mapped_column(
        BigInteger().with_variant(Integer, "sqlite"),
        primary_key=True, autoincrement=True,
    )
    kind: Mapped[str] = mapped_column(String(16), nullable=False)
    from_account: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    to_account: Mapped[str | None] = mapped_column(String(128), nullable=True, index=True)
    value: Mapped[int] = mapped_column(AmountType, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
