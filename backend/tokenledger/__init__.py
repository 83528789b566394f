"""Token Ledger Package — fungible-token ledger core with a FastAPI host.

Invariants:
    - Package root contains no executable code (import side-effects prohibited)

Design Decisions:
    - Empty __init__.py: explicit imports only, no star exports
"""
