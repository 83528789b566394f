"""Ledger Schemas — Pydantic models with field-level validation for API boundaries.

Invariants:
    - Amounts: int or ASCII decimal string, 0 <= value <= MAX_BALANCE
    - Accounts: 1-128 chars, stripped, non-empty
    - Responses render amounts as decimal strings (u128 exceeds JSON-safe ints)

Design Decisions:
    - Annotated validator types shared by every request model (DRY over per-field validators)
    - `from` is a keyword: TransferFromRequest exposes it via alias
"""

from typing import Annotated

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field

from tokenledger.core.domain_types import MAX_BALANCE
from tokenledger.core.events import LedgerEvent


def _parse_amount(v: object) -> object:
    """Accept ASCII decimal strings so clients can send values above 2**53."""
    if isinstance(v, str):
        v = v.strip()
        if not (v.isascii() and v.isdigit()):
            raise ValueError("amount must be a non-negative decimal integer")
        return int(v)
    if isinstance(v, bool):
        raise ValueError("amount must be an integer")
    return v


def _strip_account(v: object) -> object:
    if isinstance(v, str):
        v = v.strip()
        if not v:
            raise ValueError("account cannot be empty or whitespace")
    return v


Amount = Annotated[int, BeforeValidator(_parse_amount), Field(ge=0, le=MAX_BALANCE)]
Account = Annotated[str, BeforeValidator(_strip_account), Field(min_length=1, max_length=128)]


class TransferRequest(BaseModel):
    """Move value from the caller to `to`."""
    to: Account
    value: Amount


class TransferFromRequest(BaseModel):
    """Move value from `from` to `to` using the caller's allowance."""
    model_config = ConfigDict(populate_by_name=True)

    from_: Account = Field(alias="from")
    to: Account
    value: Amount


class SupplyChangeRequest(BaseModel):
    """Burn or mint value on the caller's own balance."""
    value: Amount


class EventPayload(BaseModel):
    """Serialized event record."""
    model_config = ConfigDict(populate_by_name=True)

    kind: str
    from_: str = Field(serialization_alias="from")
    to: str | None = None
    value: str
    sequence: int | None = None

    @classmethod
    def from_event(cls, event: LedgerEvent, sequence: int | None = None) -> "EventPayload":
        payload = event.to_payload()
        return cls(
            kind=payload["kind"], from_=payload["from"], to=payload.get("to"),
            value=payload["value"], sequence=sequence,
        )


class OperationResponse(BaseModel):
    """Result of a successful mutating operation."""
    status: str = "ok"
    events: list[EventPayload]
