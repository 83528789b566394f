"""Ledger schema — supply scalar, balances, allowances, event log.

Revision ID: 001_ledger_schema
Revises: None
Create Date: 2026-10-18

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "001_ledger_schema"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

# Amounts stored as decimal text: 2**128 - 1 has 39 digits
AMOUNT = sa.String(39)


def upgrade() -> None:
    op.create_table(
        "ledger_supply",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("total_supply", AMOUNT, nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )

    op.create_table(
        "balances",
        sa.Column("account", sa.String(128), primary_key=True),
        sa.Column("amount", AMOUNT, nullable=False),
    )

    op.create_table(
        "allowances",
        sa.Column("owner", sa.String(128), primary_key=True),
        sa.Column("spender", sa.String(128), primary_key=True),
        sa.Column("amount", AMOUNT, nullable=False),
    )

    op.create_table(
        "ledger_events",
        sa.Column("sequence", sa.BigInteger, primary_key=True, autoincrement=True),
        sa.Column("kind", sa.String(16), nullable=False),
        sa.Column("from_account", sa.String(128), nullable=False),
        sa.Column("to_account", sa.String(128), nullable=True),
        sa.Column("value", AMOUNT, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_ledger_events_from_account", "ledger_events", ["from_account"])
    op.create_index("ix_ledger_events_to_account", "ledger_events", ["to_account"])


def downgrade() -> None:
    op.drop_index("ix_ledger_events_to_account", table_name="ledger_events")
    op.drop_index("ix_ledger_events_from_account", table_name="ledger_events")
    op.drop_table("ledger_events")
    op.drop_table("allowances")
    op.drop_table("balances")
    op.drop_table("ledger_supply")
