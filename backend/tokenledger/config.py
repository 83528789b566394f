"""Application Configuration — environment-driven settings via pydantic-settings.

Invariants:
    - genesis_supply within [0, MAX_BALANCE]; genesis_account 1-128 chars after strip
    - Genesis settings only matter on first boot (no persisted ledger yet)
    - get_settings() is cached (lru_cache): single instance per process

Design Decisions:
    - pydantic-settings over raw os.environ: validation, coercion, .env support
    - GENESIS_SUPPLY parsed from its decimal text, so u128 values need no special casing
    - Defaults target local PostgreSQL; tests override DATABASE_URL with aiosqlite
"""

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from tokenledger.core.domain_types import MAX_BALANCE


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Database
    database_url: str = "postgresql+asyncpg://ledger:ledger@db:5432/ledger"
    database_pool_size: int = Field(20, ge=1)
    database_max_overflow: int = Field(10, ge=0)

    # Genesis
    genesis_supply: int = Field(1_000_000, ge=0, le=MAX_BALANCE)
    genesis_account: str = Field("genesis", min_length=1, max_length=128)

    # Host
    caller_header: str = Field("X-Caller-Account", min_length=1)
    cors_origins: list[str] = ["http://localhost:5173"]

    # Observability
    log_level: str = "INFO"
    log_format: str = Field("json", pattern="^(json|text)$")

    @field_validator("database_url", mode="before")
    @classmethod
    def use_asyncpg_driver(cls, v):
        """postgresql:// URLs get the asyncpg driver the engine needs."""
        if isinstance(v, str) and v.startswith("postgresql://"):
            return v.replace("postgresql://", "postgresql+asyncpg://", 1)
        return v

    @field_validator("genesis_account", "caller_header", mode="before")
    @classmethod
    def strip_whitespace(cls, v):
        return v.strip() if isinstance(v, str) else v


@lru_cache
def get_settings() -> Settings:
    return Settings()
