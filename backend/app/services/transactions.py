"""Transaction Helpers — per-aggregate serialization and write-conflict retry.

Invariants:
    - Every attempt runs in its own transaction; a failed attempt is rolled back
      before the next one starts, so no partial write survives
    - Domain errors (SoundopeError) roll back and propagate immediately, never retried
    - A conflict that survives all retries surfaces as ConcurrentModificationError
    - aggregate_lock serializes writers on the same (resource_type, resource_id)
      within this process; SELECT ... FOR UPDATE does the same across processes

Design Decisions:
    - Keyed asyncio.Lock held in a WeakValueDictionary: a lock lives only while
      some coroutine holds or awaits it, so the registry never grows unbounded
    - Conflict detection by SQLSTATE: 40001 serialization failure, 40P01
      deadlock, 23505 unique violation; SQLite reports "database is locked"
"""

import asyncio
import logging
import weakref
from collections.abc import Awaitable, Callable
from contextlib import asynccontextmanager
from typing import AsyncIterator, TypeVar

from sqlalchemy.exc import DBAPIError, IntegrityError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import (
    ConcurrentModificationError, ErrorContext, SoundopeError,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

_CONFLICT_SQLSTATES = {"40001", "40P01", "23505"}

_locks: "weakref.WeakValueDictionary[str, asyncio.Lock]" = (
    weakref.WeakValueDictionary()
)


@asynccontextmanager
async def aggregate_lock(resource_type: str, resource_id: object) -> AsyncIterator[None]:
    """Hold the in-process lock for one aggregate."""
    key = f"{resource_type}_lock:{resource_id}"
    lock = _locks.get(key)
    if lock is None:
        lock = asyncio.Lock()
        _locks[key] = lock
    async with lock:
        yield


def _sqlstate(exc: DBAPIError) -> str | None:
    orig = getattr(exc, "orig", None)
    return getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)


def is_write_conflict(exc: BaseException) -> bool:
    """True if the error means "another writer got there first"."""
    if isinstance(exc, IntegrityError):
        state = _sqlstate(exc)
        # SQLite gives no SQLSTATE; any integrity failure inside a locked
        # read-check-write can only be a racing insert
        return state is None or state in _CONFLICT_SQLSTATES
    if isinstance(exc, OperationalError):
        if _sqlstate(exc) in _CONFLICT_SQLSTATES:
            return True
        return "database is locked" in str(exc).lower()
    if isinstance(exc, DBAPIError):
        return _sqlstate(exc) in _CONFLICT_SQLSTATES
    return False


async def run_with_conflict_retry(
    db: AsyncSession,
    attempt: Callable[[], Awaitable[T]],
    operation: str,
    retries: int = 1,
    context: ErrorContext | None = None,
) -> T:
    """Run `attempt` (which must commit on success), retrying lost races."""
    total = retries + 1
    for number in range(1, total + 1):
        try:
            return await attempt()
        except SoundopeError:
            await db.rollback()
            raise
        except DBAPIError as e:
            await db.rollback()
            if not is_write_conflict(e):
                raise
            logger.warning(
                f"Write conflict during {operation} "
                f"(attempt {number}/{total}): {e.__class__.__name__}",
                extra={"operation": operation, "attempt": number},
            )
        except Exception:
            await db.rollback()
            raise
    raise ConcurrentModificationError(operation, total, context)
