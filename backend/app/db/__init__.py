"""Database Package — declarative Base shared by all ORM models.

Invariants:
    - Engine and sessions live in infrastructure/database.py, not here

Design Decisions:
    - asyncpg driver for PostgreSQL (native async, no thread pool overhead)
"""
