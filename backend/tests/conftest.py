"""Root conftest — shared test configuration."""

import os

# Ensure tests never reach a real database
os.environ.setdefault(
    "DATABASE_URL",
    "sqlite+aiosqlite:///:memory:",
)
os.environ.setdefault("GENESIS_SUPPLY", "1000")
os.environ.setdefault("GENESIS_ACCOUNT", "alice")
