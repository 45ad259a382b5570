"""Per-(ground, date) locks around check-then-insert.

Two requests for overlapping slots must not both pass the availability check
before either has committed. Every admission for a ground/day runs under the
same asyncio.Lock; admissions for other grounds or days proceed in parallel.

The table is weak-valued, so a lock disappears once no request holds or waits
on it. This serialises within one process only, which matches the
single-process deployment.
"""

import asyncio
import weakref
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import date

_locks: "weakref.WeakValueDictionary[tuple[int, date], asyncio.Lock]" = weakref.WeakValueDictionary()


def _lock_for(ground_number: int, booking_date: date) -> asyncio.Lock:
    key = (ground_number, booking_date)
    lock = _locks.get(key)
    if lock is None:
        lock = asyncio.Lock()
        _locks[key] = lock
    return lock


@asynccontextmanager
async def slot_lock(ground_number: int, booking_date: date) -> AsyncIterator[None]:
    """Hold the exclusive section for one ground on one day."""
    lock = _lock_for(ground_number, booking_date)
    async with lock:
        yield
