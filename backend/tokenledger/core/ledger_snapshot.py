"""Ledger Snapshot — immutable copies of ledger state for persistence boundaries.

Invariants:
    - LedgerSnapshot holds exactly the persisted layout: one scalar, two tables
    - Snapshots are detached: mutating the Ledger never changes a snapshot
    - LedgerChange describes ONE applied operation (touched rows + emitted events),
      built by Ledger.pending_change() from the keys the operation wrote
    - to_dict produces a JSON-safe dict (amounts as decimal strings)

Design Decisions:
    - Separate from ledger.py: the shell imports these without touching Ledger
    - MappingProxyType over frozen dicts: stdlib, read-only view over a private copy
    - Allowance keys serialized as "owner/spender" pairs in a list, not joined
      strings: AccountId is opaque and may contain any separator
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping

from tokenledger.core.domain_types import AccountId, Balance
from tokenledger.core.events import LedgerEvent

AllowanceKey = tuple[AccountId, AccountId]


@dataclass(frozen=True)
class LedgerSnapshot:
    """Point-in-time copy of total supply, balances and allowances."""
    total_supply: Balance
    balances: Mapping[AccountId, Balance] = field(default_factory=dict)
    allowances: Mapping[AllowanceKey, Balance] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "balances", MappingProxyType(dict(self.balances)))
        object.__setattr__(self, "allowances", MappingProxyType(dict(self.allowances)))

    @property
    def balance_sum(self) -> int:
        return sum(self.balances.values())

    def to_dict(self) -> dict:
        return {
            "total_supply": str(self.total_supply),
            "balances": {
                account: str(amount)
                for account, amount in sorted(self.balances.items())
            },
            "allowances": [
                {"owner": owner, "spender": spender, "value": str(amount)}
                for (owner, spender), amount in sorted(self.allowances.items())
            ],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "LedgerSnapshot":
        return cls(
            total_supply=Balance(int(data["total_supply"])),
            balances={
                AccountId(account): Balance(int(amount))
                for account, amount in data.get("balances", {}).items()
            },
            allowances={
                (AccountId(row["owner"]), AccountId(row["spender"])): Balance(int(row["value"]))
                for row in data.get("allowances", [])
            },
        )


@dataclass(frozen=True)
class LedgerChange:
    """Rows touched by one successful operation, in the order they must be persisted."""
    total_supply: Balance
    balances: Mapping[AccountId, Balance]
    allowances: Mapping[AllowanceKey, Balance]
    events: tuple[LedgerEvent, ...]
