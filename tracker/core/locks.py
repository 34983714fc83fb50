"""
In-process serialization points keyed by owner

Read-then-write sequences (next project/task number, signup existence check) run
inside `serialized(...)` so two requests for the same key never interleave. The
database row lock taken inside the block covers other worker processes.

Cascading deletes take the same keys as the creates they must not interleave with.
Lock order is always "project-number" (per user) before "task-number" (per project).
"""

import asyncio
import weakref
from collections.abc import AsyncIterator, Hashable, Iterable
from contextlib import AsyncExitStack, asynccontextmanager

_locks: "weakref.WeakValueDictionary[tuple[Hashable, ...], asyncio.Lock]" = weakref.WeakValueDictionary()


def _lock_for(key: tuple[Hashable, ...]) -> asyncio.Lock:
    lock = _locks.get(key)
    if lock is None:
        lock = asyncio.Lock()
        _locks[key] = lock
    return lock


@asynccontextmanager
async def serialized(*key: Hashable) -> AsyncIterator[None]:
    """Hold the lock for `key` for the duration of the block."""
    lock = _lock_for(key)
    async with lock:
        yield


@asynccontextmanager
async def serialized_all(keys: Iterable[tuple[Hashable, ...]]) -> AsyncIterator[None]:
    """Hold the lock of every key in `keys`, acquired in sorted order."""
    async with AsyncExitStack() as stack:
        for key in sorted(set(keys)):  # type: ignore[type-var]
            await stack.enter_async_context(serialized(*key))
        yield
