"""Ledger — fungible-token balances, allowances and total supply.

Invariants:
    - sum(balances) == total_supply between completed operations
    - Every amount lies in [0, MAX_BALANCE]; additions are checked, never wrapped
    - Mutating operations validate ALL preconditions before the first write:
      on error the state is unchanged (no partial debit, credit or allowance)
    - Exactly one event record emitted per successful mutation, none on failure
    - Absent balance / allowance reads as 0 and is never materialized by a read

Design Decisions:
    - Caller and event sink injected at construction (boundary_protocols), never
      globals: the Ledger is testable with two tiny fakes
    - Business-rule failures raise typed LedgerError subclasses; the host maps
      them to responses. Raising before mutation is the atomicity guarantee.
    - No approve(): allowances are readable but nothing here increases them, so
      transfer_from cannot move a nonzero value unless a snapshot seeds one
    - mint() is unrestricted: any caller may mint to itself
    - Pending writes are opt-in (begin_pending): while open, the first write to
      a key records its prior value. Change set and rollback cost O(touched keys)
"""

from dataclasses import dataclass, field

from tokenledger.core.boundary_protocols import CallerResolver, EventSink
from tokenledger.core.domain_types import (
    AccountId, Balance, LedgerOperation, MAX_BALANCE, require_balance,
)
from tokenledger.core.errors import (
    BalanceOverflowError, ErrorContext, InsufficientBalanceError,
    LedgerInvariantError,
)
from tokenledger.core.events import Burn, LedgerEvent, Mint, Transfer
from tokenledger.core.ledger_snapshot import AllowanceKey, LedgerChange, LedgerSnapshot


@dataclass
class _PendingWrites:
    """Prior values of keys written since begin_pending(). None means absent."""
    total_supply: Balance
    balances: dict[AccountId, Balance | None] = field(default_factory=dict)
    allowances: dict[AllowanceKey, Balance | None] = field(default_factory=dict)


class Ledger:
    """Owns total supply, the balance table and the allowance table."""

    def __init__(
        self,
        initial_supply: int,
        creator: AccountId,
        *,
        caller: CallerResolver,
        events: EventSink,
    ):
        supply = require_balance(initial_supply, "initial_supply")
        self._caller = caller
        self._events = events
        self._total_supply: Balance = supply
        self._balances: dict[AccountId, Balance] = {creator: supply}
        self._allowances: dict[AllowanceKey, Balance] = {}
        self._pending: _PendingWrites | None = None

    @classmethod
    def from_snapshot(
        cls,
        snapshot: LedgerSnapshot,
        *,
        caller: CallerResolver,
        events: EventSink,
    ) -> "Ledger":
        """Rebuild a ledger from persisted state. Rejects inconsistent snapshots."""
        ledger = cls.__new__(cls)
        ledger._caller = caller
        ledger._events = events
        ledger._total_supply = snapshot.total_supply
        ledger._balances = dict(snapshot.balances)
        ledger._allowances = dict(snapshot.allowances)
        ledger._pending = None
        ledger.check_invariants()
        return ledger

    # ─── Queries ─────────────────────────────────────────────────

    def total_supply(self) -> Balance:
        return self._total_supply

    def balance_of(self, account: AccountId) -> Balance:
        return self._balances.get(account, Balance(0))

    def allowance_of(self, owner: AccountId, spender: AccountId) -> Balance:
        return self._allowances.get((owner, spender), Balance(0))

    def snapshot(self) -> LedgerSnapshot:
        return LedgerSnapshot(
            total_supply=self._total_supply,
            balances=self._balances,
            allowances=self._allowances,
        )

    # ─── Mutations ───────────────────────────────────────────────

    def transfer(self, to: AccountId, value: int) -> None:
        """Move value from the caller to `to`."""
        amount = require_balance(value)
        caller = self._caller.current_caller()
        self._check_transfer(caller, to, amount, LedgerOperation.TRANSFER)
        self._apply_transfer(caller, to, amount)

    def transfer_from(self, from_: AccountId, to: AccountId, value: int) -> None:
        """Move value from `from_` to `to`, spending the caller's allowance.

        Allowance, source balance and destination headroom are all checked
        before the allowance is decremented.
        """
        amount = require_balance(value)
        spender = self._caller.current_caller()
        allowance = self.allowance_of(from_, spender)
        if allowance < amount:
            raise InsufficientBalanceError(
                amount, allowance,
                _context(LedgerOperation.TRANSFER_FROM, spender),
            )
        self._check_transfer(from_, to, amount, LedgerOperation.TRANSFER_FROM)

        self._write_allowance((from_, spender), Balance(allowance - amount))
        self._apply_transfer(from_, to, amount)

    def burn(self, value: int) -> None:
        """Destroy value from the caller's balance and the total supply."""
        amount = require_balance(value)
        caller = self._caller.current_caller()
        balance = self.balance_of(caller)
        if balance < amount:
            raise InsufficientBalanceError(
                amount, balance, _context(LedgerOperation.BURN, caller),
            )

        self._total_supply = Balance(self._total_supply - amount)
        self._write_balance(caller, Balance(balance - amount))
        self._events.emit(Burn(from_=caller, value=amount))

    def mint(self, value: int) -> None:
        """Create value into the caller's balance. Any caller may mint."""
        amount = require_balance(value)
        caller = self._caller.current_caller()
        ctx = _context(LedgerOperation.MINT, caller)
        new_supply = _checked_add(self._total_supply, amount, ctx)
        new_balance = _checked_add(self.balance_of(caller), amount, ctx)

        self._total_supply = new_supply
        self._write_balance(caller, new_balance)
        self._events.emit(Mint(from_=caller, value=amount))

    # ─── Internals ───────────────────────────────────────────────

    def _check_transfer(
        self, from_: AccountId, to: AccountId, amount: Balance,
        operation: LedgerOperation,
    ) -> None:
        balance = self.balance_of(from_)
        if balance < amount:
            raise InsufficientBalanceError(
                amount, balance, _context(operation, from_),
            )
        if from_ != to:
            _checked_add(self.balance_of(to), amount, _context(operation, to))

    def _apply_transfer(self, from_: AccountId, to: AccountId, amount: Balance) -> None:
        # Read `to` after the debit so a self-transfer nets to zero.
        self._write_balance(from_, Balance(self.balance_of(from_) - amount))
        self._write_balance(to, Balance(self.balance_of(to) + amount))
        self._events.emit(Transfer(from_=from_, to=to, value=amount))

    def _write_balance(self, account: AccountId, amount: Balance) -> None:
        if self._pending is not None:
            self._pending.balances.setdefault(account, self._balances.get(account))
        self._balances[account] = amount

    def _write_allowance(self, key: AllowanceKey, amount: Balance) -> None:
        if self._pending is not None:
            self._pending.allowances.setdefault(key, self._allowances.get(key))
        self._allowances[key] = amount

    # ─── Pending writes ──────────────────────────────────────────

    def begin_pending(self) -> None:
        """Start recording prior values until commit_pending / rollback_pending."""
        if self._pending is not None:
            raise LedgerInvariantError("pending writes already open")
        self._pending = _PendingWrites(total_supply=self._total_supply)

    def pending_change(self, events: tuple[LedgerEvent, ...]) -> LedgerChange:
        """Current values of every key written since begin_pending()."""
        pending = self._require_pending()
        return LedgerChange(
            total_supply=self._total_supply,
            balances={account: self._balances[account] for account in pending.balances},
            allowances={key: self._allowances[key] for key in pending.allowances},
            events=events,
        )

    def commit_pending(self) -> None:
        self._require_pending()
        self._pending = None

    def rollback_pending(self) -> None:
        """Restore every key written since begin_pending() and close it."""
        pending = self._require_pending()
        self._total_supply = pending.total_supply
        _restore(self._balances, pending.balances)
        _restore(self._allowances, pending.allowances)
        self._pending = None

    def committed_total_supply(self) -> Balance:
        if self._pending is None:
            return self._total_supply
        return self._pending.total_supply

    def committed_balance_of(self, account: AccountId) -> Balance:
        """balance_of as of the last commit: ignores open pending writes."""
        if self._pending is None or account not in self._pending.balances:
            return self.balance_of(account)
        return self._pending.balances[account] or Balance(0)

    def committed_allowance_of(self, owner: AccountId, spender: AccountId) -> Balance:
        key = (owner, spender)
        if self._pending is None or key not in self._pending.allowances:
            return self.allowance_of(owner, spender)
        return self._pending.allowances[key] or Balance(0)

    def _require_pending(self) -> _PendingWrites:
        if self._pending is None:
            raise LedgerInvariantError("no pending writes open")
        return self._pending

    def check_invariants(self) -> None:
        """Raise LedgerInvariantError if supply and balances disagree."""
        if not 0 <= self._total_supply <= MAX_BALANCE:
            raise LedgerInvariantError(f"total supply out of range: {self._total_supply}")
        for account, amount in self._balances.items():
            if not 0 <= amount <= MAX_BALANCE:
                raise LedgerInvariantError(
                    f"balance out of range: {amount}",
                    ErrorContext(account=account),
                )
        for (owner, _), amount in self._allowances.items():
            if not 0 <= amount <= MAX_BALANCE:
                raise LedgerInvariantError(
                    f"allowance out of range: {amount}",
                    ErrorContext(account=owner),
                )
        balance_sum = sum(self._balances.values())
        if balance_sum != self._total_supply:
            raise LedgerInvariantError(
                f"balances sum to {balance_sum}, total supply is {self._total_supply}",
            )


def _context(operation: LedgerOperation, account: AccountId) -> ErrorContext:
    return ErrorContext(operation=operation.value, account=account)


def _restore(table: dict, prior: dict) -> None:
    for key, value in prior.items():
        if value is None:
            table.pop(key, None)
        else:
            table[key] = value


def _checked_add(current: Balance, added: Balance, ctx: ErrorContext) -> Balance:
    total = current + added
    if total > MAX_BALANCE:
        raise BalanceOverflowError(current, added, ctx)
    return Balance(total)
