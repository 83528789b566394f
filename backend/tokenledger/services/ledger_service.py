"""Ledger Service — imperative shell around the pure Ledger.

Invariants:
    - One Ledger per process; every mutation runs under one asyncio.Lock,
      held across bind caller → core operation → persist
    - A rejected operation persists nothing and emits nothing
    - Unless persistence completes, the in-memory ledger is rolled back before
      the exception propagates: errors, cancellation and timeouts alike
    - Per-operation cost is O(keys written): change set and rollback come from
      the Ledger's pending writes, never from full-table copies
    - Queries never take the lock and read committed values only: writes of an
      operation still being persisted are invisible to them

Design Decisions:
    - Impureim sandwich: IO (repository) wraps a synchronous core call
    - Repository passed per call: it carries the request's DB session
    - Module-level singleton initialized in lifespan, mirroring db_manager
"""

import asyncio
import logging
from typing import Callable

from tokenledger.core.boundary_protocols import LedgerStateRepository
from tokenledger.core.domain_types import (
    AccountId, Balance, LedgerOperation, require_balance,
)
from tokenledger.core.errors import LedgerError, LedgerNotInitializedError
from tokenledger.core.events import LedgerEvent
from tokenledger.core.ledger import Ledger
from tokenledger.infrastructure.host_env import BufferedEventSink, RequestCaller

logger = logging.getLogger(__name__)


class LedgerService:
    """Serializes ledger operations and persists their effects."""

    def __init__(self, ledger: Ledger, caller: RequestCaller, sink: BufferedEventSink):
        self._ledger = ledger
        self._caller = caller
        self._sink = sink
        self._lock = asyncio.Lock()

    @classmethod
    async def bootstrap(
        cls,
        repository: LedgerStateRepository,
        genesis_supply: int,
        genesis_account: AccountId,
    ) -> "LedgerService":
        """Restore persisted state, or create and persist the genesis ledger."""
        caller = RequestCaller()
        sink = BufferedEventSink()
        snapshot = await repository.load()
        if snapshot is not None:
            ledger = Ledger.from_snapshot(snapshot, caller=caller, events=sink)
            logger.info(
                f"Ledger restored with {len(snapshot.balances)} balances",
                extra={"value": snapshot.total_supply},
            )
        else:
            ledger = Ledger(
                require_balance(genesis_supply, "genesis_supply"),
                genesis_account, caller=caller, events=sink,
            )
            await repository.save_genesis(ledger.snapshot())
            logger.info(
                "Ledger created from genesis settings",
                extra={"account": genesis_account, "value": genesis_supply},
            )
        return cls(ledger, caller, sink)

    # ─── Queries ─────────────────────────────────────────────────

    def total_supply(self) -> Balance:
        return self._ledger.committed_total_supply()

    def balance_of(self, account: AccountId) -> Balance:
        return self._ledger.committed_balance_of(account)

    def allowance_of(self, owner: AccountId, spender: AccountId) -> Balance:
        return self._ledger.committed_allowance_of(owner, spender)

    # ─── Mutations ───────────────────────────────────────────────

    async def transfer(
        self, repository: LedgerStateRepository, caller: AccountId,
        to: AccountId, value: int,
    ) -> tuple[LedgerEvent, ...]:
        return await self._execute(
            repository, caller, LedgerOperation.TRANSFER,
            lambda: self._ledger.transfer(to, value), value,
        )

    async def transfer_from(
        self, repository: LedgerStateRepository, caller: AccountId,
        from_: AccountId, to: AccountId, value: int,
    ) -> tuple[LedgerEvent, ...]:
        return await self._execute(
            repository, caller, LedgerOperation.TRANSFER_FROM,
            lambda: self._ledger.transfer_from(from_, to, value), value,
        )

    async def burn(
        self, repository: LedgerStateRepository, caller: AccountId, value: int,
    ) -> tuple[LedgerEvent, ...]:
        return await self._execute(
            repository, caller, LedgerOperation.BURN,
            lambda: self._ledger.burn(value), value,
        )

    async def mint(
        self, repository: LedgerStateRepository, caller: AccountId, value: int,
    ) -> tuple[LedgerEvent, ...]:
        return await self._execute(
            repository, caller, LedgerOperation.MINT,
            lambda: self._ledger.mint(value), value,
        )

    async def _execute(
        self,
        repository: LedgerStateRepository,
        caller: AccountId,
        operation: LedgerOperation,
        action: Callable[[], None],
        value: int,
    ) -> tuple[LedgerEvent, ...]:
        log_extra = {"account": caller, "operation": operation.value, "value": value}
        async with self._lock:
            self._ledger.begin_pending()
            try:
                events = self._run_core(caller, operation, action, log_extra)
                await self._persist(repository, operation, events, log_extra)
            except BaseException:
                self._ledger.rollback_pending()
                self._sink.drain()
                raise
            self._ledger.commit_pending()
        logger.debug(
            f"Applied {operation.value}",
            extra={**log_extra, "events_emitted": len(events)},
        )
        return events

    def _run_core(
        self,
        caller: AccountId,
        operation: LedgerOperation,
        action: Callable[[], None],
        log_extra: dict,
    ) -> tuple[LedgerEvent, ...]:
        with self._caller.bind(caller):
            try:
                action()
            except LedgerError as e:
                logger.info(
                    f"Rejected {operation.value}: {e.message}",
                    extra={**log_extra, "error_code": e.code},
                )
                raise
        return self._sink.drain()

    async def _persist(
        self,
        repository: LedgerStateRepository,
        operation: LedgerOperation,
        events: tuple[LedgerEvent, ...],
        log_extra: dict,
    ) -> None:
        try:
            await repository.apply(self._ledger.pending_change(events))
        except asyncio.CancelledError:
            logger.warning(
                f"Persisting {operation.value} cancelled; rolling back in memory",
                extra=log_extra,
            )
            raise
        except Exception:
            logger.error(
                f"Persisting {operation.value} failed; rolling back in memory",
                extra=log_extra, exc_info=True,
            )
            raise


# Singleton (initialized on startup)
ledger_service: LedgerService | None = None


async def init_ledger(
    repository: LedgerStateRepository, genesis_supply: int, genesis_account: str,
) -> LedgerService:
    global ledger_service
    ledger_service = await LedgerService.bootstrap(
        repository, genesis_supply, AccountId(genesis_account),
    )
    return ledger_service


def get_ledger_service() -> LedgerService:
    """FastAPI dependency for the process-wide ledger service."""
    if ledger_service is None:
        raise LedgerNotInitializedError()
    return ledger_service
