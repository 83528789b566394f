"""LedgerSupply ORM — the single total-supply row.

Invariants:
    - Exactly one row (id == SUPPLY_ROW_ID) once genesis has been saved
    - total_supply equals the sum of balances.amount after every commit

Design Decisions:
    - Single-row table over a key/value settings table: typed column, simple upsert
"""

from datetime import datetime, timezone

from sqlalchemy import Integer, DateTime
from sqlalchemy.orm import Mapped, mapped_column

from tokenledger.db.base import Base
from tokenledger.db.types import AmountType

SUPPLY_ROW_ID = 1


class LedgerSupply(Base):
    """Total supply scalar."""
    __tablename__ = "ledger_supply"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, default=SUPPLY_ROW_ID)
    total_supply: Mapped[int] = mapped_column(AmountType, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )
