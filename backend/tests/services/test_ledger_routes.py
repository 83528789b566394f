"""Ledger Routes — HTTP surface, caller header, error envelope.

Invariants:
    - Queries return amounts as decimal strings
    - Mutating routes require X-Caller-Account (401 CALLER_UNRESOLVED otherwise)
    - Business-rule failures return 400 with the LedgerError envelope
    - Invalid bodies return 400 VALIDATION_ERROR before reaching the ledger

Design Decisions:
    - Client fixture bootstraps alice with 1000 (tests/services/conftest.py)
"""

from tokenledger.core.domain_types import MAX_BALANCE

ALICE = {"X-Caller-Account": "alice"}
BOB = {"X-Caller-Account": "bob"}
SPENDER = {"X-Caller-Account": "spender"}


async def test_total_supply(client):
    res = await client.get("/api/v1/ledger/total-supply")
    assert res.status_code == 200
    assert res.json() == {"total_supply": "1000"}


async def test_balance_of_known_and_unknown(client):
    res = await client.get("/api/v1/ledger/balances/alice")
    assert res.json() == {"account": "alice", "balance": "1000"}
    res = await client.get("/api/v1/ledger/balances/nobody")
    assert res.json()["balance"] == "0"


async def test_allowance_defaults_to_zero(client):
    res = await client.get("/api/v1/ledger/allowances/alice/spender")
    assert res.status_code == 200
    assert res.json() == {"owner": "alice", "spender": "spender", "allowance": "0"}


async def test_transfer_success(client):
    res = await client.post(
        "/api/v1/ledger/transfer", json={"to": "bob", "value": 300}, headers=ALICE,
    )
    assert res.status_code == 200
    assert res.json() == {
        "status": "ok",
        "events": [{
            "kind": "transfer", "from": "alice", "to": "bob",
            "value": "300", "sequence": None,
        }],
    }
    res = await client.get("/api/v1/ledger/balances/bob")
    assert res.json()["balance"] == "300"


async def test_transfer_insufficient_balance(client):
    res = await client.post(
        "/api/v1/ledger/transfer", json={"to": "bob", "value": 5000}, headers=ALICE,
    )
    assert res.status_code == 400
    error = res.json()["error"]
    assert error["code"] == "INSUFFICIENT_BALANCE"
    assert error["category"] == "business_rule"
    assert error["context"]["requested"] == "5000"
    assert error["context"]["available"] == "1000"


async def test_transfer_requires_caller_header(client):
    res = await client.post("/api/v1/ledger/transfer", json={"to": "bob", "value": 1})
    assert res.status_code == 401
    assert res.json()["error"]["code"] == "CALLER_UNRESOLVED"


async def test_blank_caller_header_rejected(client):
    res = await client.post(
        "/api/v1/ledger/mint", json={"value": 1},
        headers={"X-Caller-Account": "   "},
    )
    assert res.status_code == 401


async def test_transfer_from_without_allowance(client):
    res = await client.post(
        "/api/v1/ledger/transfer-from",
        json={"from": "alice", "to": "carol", "value": 1},
        headers=SPENDER,
    )
    assert res.status_code == 400
    assert res.json()["error"]["code"] == "INSUFFICIENT_BALANCE"
    res = await client.get("/api/v1/ledger/balances/alice")
    assert res.json()["balance"] == "1000"


async def test_burn_and_mint(client):
    res = await client.post("/api/v1/ledger/burn", json={"value": 200}, headers=ALICE)
    assert res.status_code == 200
    assert res.json()["events"][0]["kind"] == "burn"

    res = await client.post("/api/v1/ledger/mint", json={"value": "50"}, headers=ALICE)
    assert res.status_code == 200
    assert res.json()["events"][0] == {
        "kind": "mint", "from": "alice", "to": None, "value": "50", "sequence": None,
    }

    res = await client.get("/api/v1/ledger/total-supply")
    assert res.json()["total_supply"] == "850"


async def test_mint_overflow(client):
    res = await client.post(
        "/api/v1/ledger/mint", json={"value": str(MAX_BALANCE)}, headers=BOB,
    )
    assert res.status_code == 400
    assert res.json()["error"]["code"] == "BALANCE_OVERFLOW"


async def test_amount_validation(client):
    for bad in (-1, "12a", str(MAX_BALANCE + 1), True, 1.5):
        res = await client.post(
            "/api/v1/ledger/mint", json={"value": bad}, headers=ALICE,
        )
        assert res.status_code == 400, bad
        assert res.json()["error"]["code"] == "VALIDATION_ERROR"


async def test_account_validation(client):
    res = await client.post(
        "/api/v1/ledger/transfer", json={"to": "  ", "value": 1}, headers=ALICE,
    )
    assert res.status_code == 400
    details = res.json()["error"]["details"]
    assert details[0]["field"] == "body.to"


async def test_events_log_filters_by_account(client):
    await client.post("/api/v1/ledger/transfer", json={"to": "bob", "value": 5}, headers=ALICE)
    await client.post("/api/v1/ledger/mint", json={"value": 9}, headers=BOB)
    await client.post("/api/v1/ledger/burn", json={"value": 1}, headers=ALICE)

    res = await client.get("/api/v1/ledger/events")
    events = res.json()["events"]
    assert [e["kind"] for e in events] == ["transfer", "mint", "burn"]
    assert [e["sequence"] for e in events] == sorted(e["sequence"] for e in events)

    res = await client.get("/api/v1/ledger/events", params={"account": "bob"})
    assert [e["kind"] for e in res.json()["events"]] == ["transfer", "mint"]
    assert res.json()["pagination"] == {"limit": 50, "offset": 0}


async def test_documented_scenario_over_http(client):
    await client.post("/api/v1/ledger/transfer", json={"to": "bob", "value": 300}, headers=ALICE)
    res = await client.post(
        "/api/v1/ledger/transfer", json={"to": "bob", "value": 5000}, headers=ALICE,
    )
    assert res.status_code == 400
    await client.post("/api/v1/ledger/burn", json={"value": 200}, headers=ALICE)
    await client.post("/api/v1/ledger/mint", json={"value": 50}, headers=ALICE)

    assert (await client.get("/api/v1/ledger/balances/alice")).json()["balance"] == "550"
    assert (await client.get("/api/v1/ledger/balances/bob")).json()["balance"] == "300"
    assert (await client.get("/api/v1/ledger/total-supply")).json()["total_supply"] == "850"
