"""Ledger Routes — HTTP surface over the ledger service.

Invariants:
    - Mutating routes require the caller header (settings.caller_header)
    - Business-rule failures propagate as LedgerError → global handler → JSON envelope
    - Amounts leave the API as decimal strings
    - Routes contain no ledger logic: validate, delegate, shape the response

Design Decisions:
    - Caller resolved from a header: the host, not the client body, names the caller
    - Repository built per request from the request's DB session
"""

import logging

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from tokenledger.config import get_settings
from tokenledger.core.domain_types import AccountId
from tokenledger.core.errors import CallerUnresolvedError
from tokenledger.core.events import LedgerEvent
from tokenledger.infrastructure.database import get_db
from tokenledger.schemas.ledger import (
    EventPayload, OperationResponse, SupplyChangeRequest,
    TransferFromRequest, TransferRequest,
)
from tokenledger.services.ledger_repository import SqlLedgerRepository
from tokenledger.services.ledger_service import LedgerService, get_ledger_service

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/ledger", tags=["ledger"])


def resolve_caller(request: Request) -> AccountId:
    """Dependency: caller account from the configured header."""
    header = get_settings().caller_header
    account = (request.headers.get(header) or "").strip()
    if not account:
        raise CallerUnresolvedError(f"Missing or empty {header} header")
    if len(account) > 128:
        raise CallerUnresolvedError(f"{header} exceeds 128 characters")
    return AccountId(account)


def _operation_response(events: tuple[LedgerEvent, ...]) -> OperationResponse:
    return OperationResponse(events=[EventPayload.from_event(e) for e in events])


# ─── Queries ─────────────────────────────────────────────────────

@router.get("/total-supply")
async def total_supply(service: LedgerService = Depends(get_ledger_service)):
    return {"total_supply": str(service.total_supply())}


@router.get("/balances/{account}")
async def balance_of(
    account: str, service: LedgerService = Depends(get_ledger_service),
):
    return {
        "account": account,
        "balance": str(service.balance_of(AccountId(account))),
    }


@router.get("/allowances/{owner}/{spender}")
async def allowance_of(
    owner: str, spender: str,
    service: LedgerService = Depends(get_ledger_service),
):
    return {
        "owner": owner,
        "spender": spender,
        "allowance": str(service.allowance_of(AccountId(owner), AccountId(spender))),
    }


@router.get("/events")
async def list_events(
    account: str | None = Query(None, min_length=1, max_length=128),
    limit: int = Query(50, ge=1, le=500),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_db),
):
    """Persisted event log, optionally filtered by topic account."""
    rows = await SqlLedgerRepository(db).list_events(
        AccountId(account) if account else None, limit, offset,
    )
    return {
        "events": [
            EventPayload.from_event(event, sequence).model_dump(by_alias=True)
            for sequence, event in rows
        ],
        "pagination": {"limit": limit, "offset": offset},
    }


# ─── Mutations ───────────────────────────────────────────────────

@router.post("/transfer", response_model=OperationResponse)
async def transfer(
    body: TransferRequest,
    caller: AccountId = Depends(resolve_caller),
    service: LedgerService = Depends(get_ledger_service),
    db: AsyncSession = Depends(get_db),
):
    events = await service.transfer(
        SqlLedgerRepository(db), caller, AccountId(body.to), body.value,
    )
    return _operation_response(events)


@router.post("/transfer-from", response_model=OperationResponse)
async def transfer_from(
    body: TransferFromRequest,
    caller: AccountId = Depends(resolve_caller),
    service: LedgerService = Depends(get_ledger_service),
    db: AsyncSession = Depends(get_db),
):
    events = await service.transfer_from(
        SqlLedgerRepository(db), caller,
        AccountId(body.from_), AccountId(body.to), body.value,
    )
    return _operation_response(events)


@router.post("/burn", response_model=OperationResponse)
async def burn(
    body: SupplyChangeRequest,
    caller: AccountId = Depends(resolve_caller),
    service: LedgerService = Depends(get_ledger_service),
    db: AsyncSession = Depends(get_db),
):
    events = await service.burn(SqlLedgerRepository(db), caller, body.value)
    return _operation_response(events)


@router.post("/mint", response_model=OperationResponse)
async def mint(
    body: SupplyChangeRequest,
    caller: AccountId = Depends(resolve_caller),
    service: LedgerService = Depends(get_ledger_service),
    db: AsyncSession = Depends(get_db),
):
    events = await service.mint(SqlLedgerRepository(db), caller, body.value)
    return _operation_response(events)
