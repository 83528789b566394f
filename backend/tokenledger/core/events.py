"""Event Records — immutable notifications emitted on successful mutation.

Invariants:
    - Records are frozen: once emitted they never change
    - topics() lists the indexed accounts (from, and to for Transfer) in field order
    - to_payload() is JSON-safe: value rendered as decimal string

Design Decisions:
    - Trailing underscore on from_: `from` is a keyword; payload key stays "from"
    - Plain dataclasses over a tagged union class: kind is a class attribute,
      so isinstance() and kind both work for consumers
"""

from dataclasses import dataclass
from typing import ClassVar, Union

from tokenledger.core.domain_types import AccountId, Balance, LedgerEventKind


@dataclass(frozen=True)
class Transfer:
    """Balance moved from one account to another."""
    kind: ClassVar[LedgerEventKind] = LedgerEventKind.TRANSFER

    from_: AccountId
    to: AccountId
    value: Balance

    def topics(self) -> tuple[AccountId, ...]:
        return (self.from_, self.to)

    def to_payload(self) -> dict:
        return {
            "kind": self.kind.value,
            "from": self.from_,
            "to": self.to,
            "value": str(self.value),
        }


@dataclass(frozen=True)
class Burn:
    """Supply destroyed from the caller's balance."""
    kind: ClassVar[LedgerEventKind] = LedgerEventKind.BURN

    from_: AccountId
    value: Balance

    def topics(self) -> tuple[AccountId, ...]:
        return (self.from_,)

    def to_payload(self) -> dict:
        return {"kind": self.kind.value, "from": self.from_, "value": str(self.value)}


@dataclass(frozen=True)
class Mint:
    """Supply created into the caller's balance."""
    kind: ClassVar[LedgerEventKind] = LedgerEventKind.MINT

    from_: AccountId
    value: Balance

    def topics(self) -> tuple[AccountId, ...]:
        return (self.from_,)

    def to_payload(self) -> dict:
        return {"kind": self.kind.value, "from": self.from_, "value": str(self.value)}


LedgerEvent = Union[Transfer, Burn, Mint]


def event_from_payload(payload: dict) -> LedgerEvent:
    """Rebuild a record from to_payload() output (used when reading the log back)."""
    kind = LedgerEventKind(payload["kind"])
    value = Balance(int(payload["value"]))
    from_ = AccountId(payload["from"])
    if kind is LedgerEventKind.TRANSFER:
        return Transfer(from_=from_, to=AccountId(payload["to"]), value=value)
    if kind is LedgerEventKind.BURN:
        return Burn(from_=from_, value=value)
    return Mint(from_=from_, value=value)
