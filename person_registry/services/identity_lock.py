"""Per-identity serialization of multi-step writes."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from ..errors import StorageFailure

logger = logging.getLogger(__name__)


class IdentityLocks:
    """Hands out one ``asyncio.Lock`` per person id.

    Locks are dropped once no request holds or waits for them. Combined
    with row locks in the database this keeps two writers for the same
    person from interleaving their steps.
    """

    def __init__(self, timeout: float | None = None) -> None:
        self._timeout = timeout
        self._locks: dict[int, asyncio.Lock] = {}
        self._users: dict[int, int] = {}

    def __len__(self) -> int:
        return len(self._locks)

    @asynccontextmanager
    async def hold(self, person_id: int) -> AsyncIterator[None]:
        """Hold the lock for ``person_id`` for the duration of the block.

        Raises:
            StorageFailure: if the lock is not acquired within the timeout.
        """
        lock = self._locks.setdefault(person_id, asyncio.Lock())
        self._users[person_id] = self._users.get(person_id, 0) + 1
        try:
            try:
                await asyncio.wait_for(lock.acquire(), timeout=self._timeout)
            except asyncio.TimeoutError:
                logger.warning(
                    "identity_lock.timeout",
                    extra={"person_id": person_id, "timeout": self._timeout},
                )
                raise StorageFailure(
                    f"Timed out waiting for concurrent update of person {person_id}"
                ) from None
            try:
                yield
            finally:
                lock.release()
        finally:
            self._users[person_id] -= 1
            if self._users[person_id] == 0:
                del self._users[person_id]
                del self._locks[person_id]
