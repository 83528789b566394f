"""Health Probes — liveness and readiness for the ledger host.

Invariants:
    - GET /health/ is 200 whenever the process can answer
    - GET /health/ready is 200 only when the database answers AND the ledger
      has been bootstrapped; otherwise 503 naming the first failing check

Design Decisions:
    - Singletons read through their modules at request time: init_db() and
      init_ledger() rebind them after this module is imported
"""

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

import tokenledger.infrastructure.database as db_module
import tokenledger.services.ledger_service as ledger_module

SERVICE_NAME = "tokenledger-api"
SERVICE_VERSION = "1.0.0"

router = APIRouter(prefix="/api/v1/health", tags=["health"])


@router.get("/", status_code=status.HTTP_200_OK)
async def liveness():
    return {"status": "healthy", "service": SERVICE_NAME, "version": SERVICE_VERSION}


@router.get("/ready")
async def readiness():
    manager = db_module.db_manager
    if manager is None or not await manager.health_check():
        return _not_ready("database_unavailable")
    if ledger_module.ledger_service is None:
        return _not_ready("ledger_not_initialized")
    return {"status": "ready", "checks": {"database": "healthy", "ledger": "healthy"}}


def _not_ready(reason: str) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"status": "not_ready", "reason": reason},
    )
