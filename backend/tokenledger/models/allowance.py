"""Allowance ORM — amount an owner lets a spender move.

Invariants:
    - (owner, spender) is the composite primary key (ordered pair, unique)
    - Absent row means allowance 0
"""

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from tokenledger.db.base import Base
from tokenledger.db.types import AmountType


class AllowanceRow(Base):
    """Allowance table entry."""
    __tablename__ = "allowances"

    owner: Mapped[str] = mapped_column(String(128), primary_key=True)
    spender: Mapped[str] = mapped_column(String(128), primary_key=True)
    amount: Mapped[int] = mapped_column(AmountType, nullable=False)
