"""Database Infrastructure — SQLAlchemy Base and custom column types.

Invariants:
    - All sessions are async (AsyncSession)
    - Amount columns use AmountType, never Integer/Numeric

Design Decisions:
    - asyncpg driver for PostgreSQL, aiosqlite for tests
"""
