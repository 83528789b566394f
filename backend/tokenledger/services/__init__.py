"""Services Layer — ledger service and SQL repository.

Invariants:
    - Services orchestrate IO around the pure core; no ledger rules live here
    - One LedgerService per process (serialization point for mutations)

Design Decisions:
    - Repository separate from service: the service depends on the Protocol only
"""
