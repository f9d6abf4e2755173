"""Transaction Helpers — conflict classification, bounded retry, keyed locks.

Tests use a fake session (only rollback is awaited) so each failure mode is
injected exactly, without depending on a database to produce it.
"""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.exc import DBAPIError, IntegrityError, OperationalError

from app.core.errors import (
    ConcurrentModificationError, InsufficientVotesError,
)
from app.services.transactions import (
    aggregate_lock, is_write_conflict, run_with_conflict_retry,
)


class DriverError(Exception):
    """Driver exception carrying a SQLSTATE, like asyncpg/psycopg errors."""

    def __init__(self, message, sqlstate=None):
        super().__init__(message)
        self.sqlstate = sqlstate


def _fake_db():
    db = MagicMock()
    db.rollback = AsyncMock()
    return db


def _flaky(failures):
    """Attempt callable raising each of `failures` in turn, then returning 'ok'."""
    calls = {"n": 0}
    pending = list(failures)

    async def attempt():
        calls["n"] += 1
        if pending:
            raise pending.pop(0)
        return "ok"

    return attempt, calls


def _unique_violation():
    return IntegrityError("INSERT", {}, DriverError("duplicate key", "23505"))


# ─── is_write_conflict ───────────────────────────────────────────

def test_unique_violation_is_conflict():
    assert is_write_conflict(_unique_violation())


def test_sqlite_integrity_error_without_sqlstate_is_conflict():
    assert is_write_conflict(IntegrityError("INSERT", {}, Exception("UNIQUE failed")))


def test_foreign_key_violation_is_not_conflict():
    exc = IntegrityError("INSERT", {}, DriverError("fk", "23503"))
    assert not is_write_conflict(exc)


def test_serialization_failure_and_deadlock_are_conflicts():
    for code in ("40001", "40P01"):
        assert is_write_conflict(DBAPIError("UPDATE", {}, DriverError("x", code)))


def test_sqlite_database_locked_is_conflict():
    exc = OperationalError("UPDATE", {}, Exception("database is locked"))
    assert is_write_conflict(exc)


def test_other_operational_error_is_not_conflict():
    exc = OperationalError("SELECT", {}, Exception("disk I/O error"))
    assert not is_write_conflict(exc)


def test_plain_exception_is_not_conflict():
    assert not is_write_conflict(RuntimeError("boom"))


# ─── run_with_conflict_retry ─────────────────────────────────────

async def test_first_attempt_success_needs_no_rollback():
    db = _fake_db()
    attempt, calls = _flaky([])
    assert await run_with_conflict_retry(db, attempt, "op") == "ok"
    assert calls["n"] == 1
    db.rollback.assert_not_awaited()


async def test_conflict_retried_once_then_succeeds():
    db = _fake_db()
    attempt, calls = _flaky([_unique_violation()])
    assert await run_with_conflict_retry(db, attempt, "cast_vote") == "ok"
    assert calls["n"] == 2
    assert db.rollback.await_count == 1


async def test_persistent_conflict_raises_concurrent_modification():
    db = _fake_db()
    attempt, calls = _flaky([_unique_violation(), _unique_violation()])

    with pytest.raises(ConcurrentModificationError) as exc:
        await run_with_conflict_retry(db, attempt, "cast_vote", retries=1)

    assert calls["n"] == 2
    assert exc.value.attempts == 2
    assert exc.value.http_status == 409
    assert db.rollback.await_count == 2


async def test_zero_retries_fails_on_first_conflict():
    db = _fake_db()
    attempt, calls = _flaky([_unique_violation()])
    with pytest.raises(ConcurrentModificationError):
        await run_with_conflict_retry(db, attempt, "apply_boost", retries=0)
    assert calls["n"] == 1


async def test_domain_error_rolls_back_and_is_not_retried():
    db = _fake_db()
    attempt, calls = _flaky([InsufficientVotesError(5, 2)])
    with pytest.raises(InsufficientVotesError):
        await run_with_conflict_retry(db, attempt, "cast_vote")
    assert calls["n"] == 1
    db.rollback.assert_awaited_once()


async def test_non_conflict_database_error_propagates():
    db = _fake_db()
    attempt, calls = _flaky([OperationalError("SELECT", {}, Exception("gone"))])
    with pytest.raises(OperationalError):
        await run_with_conflict_retry(db, attempt, "cast_vote")
    assert calls["n"] == 1
    db.rollback.assert_awaited_once()


async def test_unexpected_error_rolls_back_and_propagates():
    db = _fake_db()
    attempt, calls = _flaky([KeyError("x")])
    with pytest.raises(KeyError):
        await run_with_conflict_retry(db, attempt, "cast_vote")
    db.rollback.assert_awaited_once()


# ─── aggregate_lock ──────────────────────────────────────────────

async def test_same_key_serializes():
    events = []

    async def worker(name):
        async with aggregate_lock("user", "u1"):
            events.append(f"{name}:in")
            await asyncio.sleep(0.01)
            events.append(f"{name}:out")

    await asyncio.gather(worker("a"), worker("b"))
    assert events == ["a:in", "a:out", "b:in", "b:out"]


async def test_different_keys_interleave():
    events = []

    async def worker(key):
        async with aggregate_lock("user", key):
            events.append(f"{key}:in")
            await asyncio.sleep(0.01)
            events.append(f"{key}:out")

    await asyncio.gather(worker("u1"), worker("u2"))
    assert events[:2] == ["u1:in", "u2:in"]
