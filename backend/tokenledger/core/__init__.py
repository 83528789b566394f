"""Core Layer — pure ledger logic, no IO, no async, no DB.

Invariants:
    - No module in core/ imports from services/, api/, infrastructure/, or db/
    - Collaborators (caller, event sink, repository) reached only via boundary_protocols

Design Decisions:
    - Functional core separated from imperative shell (impureim sandwich)
"""
