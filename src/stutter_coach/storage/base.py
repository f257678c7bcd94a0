"""Store abstractions so in-memory and durable registries are interchangeable."""

import asyncio
from abc import ABC, abstractmethod
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Generic, TypeVar

from stutter_coach.models.coaching import CoachingSession

T = TypeVar("T")


class KeyValueStore(ABC, Generic[T]):
    """Registry of values keyed by string (username, user id)."""

    @abstractmethod
    async def get(self, key: str) -> T | None:
        raise NotImplementedError

    @abstractmethod
    async def put(self, key: str, value: T) -> None:
        raise NotImplementedError

    @abstractmethod
    async def delete(self, key: str) -> bool:
        """Remove a key. Returns True when something was removed."""
        raise NotImplementedError

    @abstractmethod
    async def list_keys(self) -> list[str]:
        raise NotImplementedError

    async def contains(self, key: str) -> bool:
        return await self.get(key) is not None


class SessionLedger(ABC):
    """Append-only record of completed coaching exchanges."""

    @abstractmethod
    async def append(self, **fields) -> CoachingSession:
        """Create an entry with the next id from the given fields."""
        raise NotImplementedError

    @abstractmethod
    async def for_user(self, user_id: str) -> list[CoachingSession]:
        """Entries for one user, most recent first."""
        raise NotImplementedError


class KeyedLocks:
    """One asyncio.Lock per key to serialize mutations of the same record.

    A key's lock only exists while some task holds or waits for it.
    """

    def __init__(self) -> None:
        self._locks: dict[str, asyncio.Lock] = {}
        self._users: dict[str, int] = {}

    def __len__(self) -> int:
        return len(self._locks)

    def __contains__(self, key: str) -> bool:
        return key in self._locks

    @asynccontextmanager
    async def hold(self, key: str) -> AsyncIterator[None]:
        lock = self._locks.get(key)
        if lock is None:
            lock = self._locks[key] = asyncio.Lock()
        self._users[key] = self._users.get(key, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._users[key] -= 1
            if not self._users[key]:
                del self._users[key]
                del self._locks[key]
