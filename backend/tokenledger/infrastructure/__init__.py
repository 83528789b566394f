"""Infrastructure Layer — database access, host collaborators and logging.

Invariants:
    - Infrastructure never imports ledger logic from core/ (types and errors only)
    - All database failures mapped to DatabaseError

Design Decisions:
    - Concrete collaborator classes live here; core sees only Protocols
"""
