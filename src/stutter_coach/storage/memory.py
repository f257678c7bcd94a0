"""Process-memory implementations of the stores."""

from itertools import count
from typing import TypeVar

from stutter_coach.models.coaching import CoachingSession
from stutter_coach.storage.base import KeyValueStore, SessionLedger

T = TypeVar("T")


class InMemoryStore(KeyValueStore[T]):
    """Dict-backed registry. State lives only as long as the process."""

    def __init__(self) -> None:
        self._items: dict[str, T] = {}

    async def get(self, key: str) -> T | None:
        return self._items.get(key)

    async def put(self, key: str, value: T) -> None:
        self._items[key] = value

    async def delete(self, key: str) -> bool:
        return self._items.pop(key, None) is not None

    async def list_keys(self) -> list[str]:
        return list(self._items)


class InMemorySessionLedger(SessionLedger):
    def __init__(self) -> None:
        self._entries: list[CoachingSession] = []
        self._ids = count(1)

    async def append(self, **fields) -> CoachingSession:
        entry = CoachingSession(id=next(self._ids), **fields)
        self._entries.append(entry)
        return entry

    async def for_user(self, user_id: str) -> list[CoachingSession]:
        entries = [e for e in self._entries if e.user_id == user_id]
        return sorted(entries, key=lambda e: (e.created_at, e.id), reverse=True)
