"""Domain Types — verifies identity/value types, enums and the amount boundary check.

Tests:
    - NewType wrappers are transparent at runtime
    - MAX_BALANCE is the u128 ceiling
    - require_balance accepts [0, MAX_BALANCE] ints and rejects everything else
"""

import pytest

from tokenledger.core.domain_types import (
    AccountId, Balance, MAX_BALANCE, LedgerEventKind, LedgerOperation,
    require_balance,
)


def test_identity_and_value_types_are_transparent():
    assert AccountId("alice") == "alice"
    assert Balance(5) == 5


def test_max_balance_is_u128_ceiling():
    assert MAX_BALANCE == 340282366920938463463374607431768211455


def test_event_kinds_serialize_to_string():
    assert {k.value for k in LedgerEventKind} == {"transfer", "burn", "mint"}


def test_operations_cover_all_mutations():
    assert {op.value for op in LedgerOperation} == {
        "transfer", "transfer_from", "burn", "mint",
    }


@pytest.mark.parametrize("value", [0, 1, MAX_BALANCE])
def test_require_balance_accepts_range(value):
    assert require_balance(value) == value


@pytest.mark.parametrize("value", [-1, MAX_BALANCE + 1])
def test_require_balance_rejects_out_of_range(value):
    with pytest.raises(ValueError, match="out of range"):
        require_balance(value)


@pytest.mark.parametrize("value", [True, 1.0, "1", None])
def test_require_balance_rejects_non_int(value):
    with pytest.raises(ValueError, match="must be an int"):
        require_balance(value)


def test_require_balance_names_the_field():
    with pytest.raises(ValueError, match="initial_supply"):
        require_balance(-5, "initial_supply")
