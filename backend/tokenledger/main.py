"""Token Ledger API — FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map LedgerError → structured JSON responses
    - CORS configured from settings (not hardcoded)
    - Database and ledger initialized on startup via lifespan context manager

Design Decisions:
    - Lifespan over @app.on_event: FastAPI recommended pattern, cleaner cleanup
    - Ledger bootstrapped after the schema exists: restore persisted state or
      persist genesis, before the first request is served
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from tokenledger.api.error_handlers import register_error_handlers
from tokenledger.api.routes import health, ledger
from tokenledger.config import get_settings
from tokenledger.infrastructure.database import init_db
from tokenledger.infrastructure.observability import setup_logging
from tokenledger.services.ledger_repository import SqlLedgerRepository
from tokenledger.services.ledger_service import init_ledger

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    manager = init_db(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
    )
    await manager.create_schema()
    async with manager.session() as db:
        await init_ledger(
            SqlLedgerRepository(db),
            settings.genesis_supply,
            settings.genesis_account,
        )
    logger.info("Token Ledger API started")
    yield
    logger.info("Token Ledger API shutting down")
    await manager.dispose()


app = FastAPI(
    title="Token Ledger API", version="1.0.0", lifespan=lifespan,
)

# CORS: origins from settings
settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Routes: explicit registration
app.include_router(health.router)
app.include_router(ledger.router)

register_error_handlers(app)
