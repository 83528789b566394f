"""SQL Ledger Repository — persists ledger snapshots, changes and the event log.

Invariants:
    - apply() writes supply, touched balances, touched allowances and events
      in ONE commit: the persisted tables never disagree with each other
    - Event rows inserted in emission order (sequence follows order)
    - load() returns None only when genesis was never saved

Design Decisions:
    - session.merge() for upserts: portable across PostgreSQL and SQLite
    - Repository owns commit: the service treats apply() as one transaction
"""

import logging

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from tokenledger.core.domain_types import AccountId, Balance
from tokenledger.core.events import LedgerEvent, Transfer, event_from_payload
from tokenledger.core.ledger_snapshot import LedgerChange, LedgerSnapshot
from tokenledger.models.allowance import AllowanceRow
from tokenledger.models.balance import BalanceRow
from tokenledger.models.ledger_event import LedgerEventRow
from tokenledger.models.ledger_supply import LedgerSupply, SUPPLY_ROW_ID

logger = logging.getLogger(__name__)


class SqlLedgerRepository:
    """LedgerStateRepository backed by an AsyncSession."""

    def __init__(self, session: AsyncSession):
        self._db = session

    async def load(self) -> LedgerSnapshot | None:
        supply = await self._db.get(LedgerSupply, SUPPLY_ROW_ID)
        if supply is None:
            return None
        balances = await self._db.execute(select(BalanceRow))
        allowances = await self._db.execute(select(AllowanceRow))
        return LedgerSnapshot(
            total_supply=Balance(supply.total_supply),
            balances={
                AccountId(row.account): Balance(row.amount)
                for row in balances.scalars()
            },
            allowances={
                (AccountId(row.owner), AccountId(row.spender)): Balance(row.amount)
                for row in allowances.scalars()
            },
        )

    async def save_genesis(self, snapshot: LedgerSnapshot) -> None:
        await self._db.merge(
            LedgerSupply(id=SUPPLY_ROW_ID, total_supply=snapshot.total_supply),
        )
        for account, amount in snapshot.balances.items():
            await self._db.merge(BalanceRow(account=account, amount=amount))
        for (owner, spender), amount in snapshot.allowances.items():
            await self._db.merge(
                AllowanceRow(owner=owner, spender=spender, amount=amount),
            )
        await self._db.commit()
        logger.info(
            "Ledger genesis persisted",
            extra={"value": snapshot.total_supply},
        )

    async def apply(self, change: LedgerChange) -> None:
        await self._db.merge(
            LedgerSupply(id=SUPPLY_ROW_ID, total_supply=change.total_supply),
        )
        for account, amount in change.balances.items():
            await self._db.merge(BalanceRow(account=account, amount=amount))
        for (owner, spender), amount in change.allowances.items():
            await self._db.merge(
                AllowanceRow(owner=owner, spender=spender, amount=amount),
            )
        self._db.add_all([_event_row(event) for event in change.events])
        await self._db.commit()

    async def list_events(
        self, account: AccountId | None = None, limit: int = 50, offset: int = 0,
    ) -> list[tuple[int, LedgerEvent]]:
        """Events in emission order, optionally filtered by topic account."""
        query = select(LedgerEventRow).order_by(LedgerEventRow.sequence)
        if account is not None:
            query = query.where(or_(
                LedgerEventRow.from_account == account,
                LedgerEventRow.to_account == account,
            ))
        result = await self._db.execute(query.limit(limit).offset(offset))
        return [(row.sequence, _row_event(row)) for row in result.scalars()]


def _event_row(event: LedgerEvent) -> LedgerEventRow:
    return LedgerEventRow(
        kind=event.kind.value,
        from_account=event.from_,
        to_account=event.to if isinstance(event, Transfer) else None,
        value=event.value,
    )


def _row_event(row: LedgerEventRow) -> LedgerEvent:
    payload = {"kind": row.kind, "from": row.from_account, "value": row.value}
    if row.to_account is not None:
        payload["to"] = row.to_account
    return event_from_payload(payload)
