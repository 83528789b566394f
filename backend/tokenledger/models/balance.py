"""Balance ORM — one row per account ever credited.

Invariants:
    - account is the primary key (keys unique)
    - Absent row means balance 0; rows are never deleted

Design Decisions:
    - String account column: AccountId is opaque text
"""

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from tokenledger.db.base import Base
from tokenledger.db.types import AmountType


class BalanceRow(Base):
    """Balance table entry."""
    __tablename__ = "balances"

    account: Mapped[str] = mapped_column(String(128), primary_key=True)
    amount: Mapped[int] = mapped_column(AmountType, nullable=False)
