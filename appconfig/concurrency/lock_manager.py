"""
Per-key locks that serialize read-modify-write cycles on one entity.

Each key gets its own ``asyncio.Lock``, so work on different keys runs in
parallel. Entries are reference counted and dropped as soon as nobody holds
or waits for them.
"""

import asyncio
import logging
from contextlib import AsyncExitStack, asynccontextmanager
from typing import AsyncIterator, Dict, Iterable

logger = logging.getLogger("appconfig.concurrency.lock_manager")


class _LockEntry:
    __slots__ = ("lock", "users")

    def __init__(self):
        self.lock = asyncio.Lock()
        self.users = 0


class KeyedLockManager:
    """
    Lock manager keyed by arbitrary strings.

    Attributes:
        _locks: Lock entries by key

    Example:
        >>> locks = KeyedLockManager()
        >>> async with locks.lock("app-1:configs"):
        ...     configs = await store.get_attribute("app-1", AttributeFamily.CONFIGS)
        ...     await store.set_attribute("app-1", AttributeFamily.CONFIGS, configs | {"a"})
    """

    def __init__(self):
        self._locks: Dict[str, _LockEntry] = {}

    @asynccontextmanager
    async def lock(self, key: str) -> AsyncIterator[None]:
        """
        Hold the lock for ``key`` for the duration of the context.

        Args:
            key: Lock key
        """
        # Entry bookkeeping must not await: a cancellation there leaks the entry
        entry = self._locks.get(key)
        if entry is None:
            entry = self._locks[key] = _LockEntry()
        entry.users += 1

        try:
            async with entry.lock:
                logger.debug(f"Lock acquired for {key}")
                try:
                    yield
                finally:
                    logger.debug(f"Lock released for {key}")
        finally:
            entry.users -= 1
            if entry.users == 0:
                del self._locks[key]

    @asynccontextmanager
    async def lock_many(self, keys: Iterable[str]) -> AsyncIterator[None]:
        """
        Hold several locks at once.

        Keys are acquired in sorted order so two callers asking for
        overlapping key sets cannot deadlock.

        Args:
            keys: Lock keys
        """
        async with AsyncExitStack() as stack:
            for key in sorted(set(keys)):
                await stack.enter_async_context(self.lock(key))
            yield

    def get_lock_count(self) -> int:
        """Number of keys currently held or awaited."""
        return len(self._locks)

    def is_locked(self, key: str) -> bool:
        """Check whether ``key`` is currently held."""
        entry = self._locks.get(key)
        return entry.lock.locked() if entry else False
