"""Infrastructure Layer — database sessions and cross-cutting concerns.

Invariants:
    - Infrastructure never imports from core/ domain logic (errors excepted)
    - All driver failures mapped to DatabaseError

Design Decisions:
    - Session manager owns pooling and rollback so services only commit
"""
