"""Hash-and-compare credential verification."""

import logging

from passlib.context import CryptContext

from stutter_coach.storage.base import KeyValueStore
from stutter_coach.storage.memory import InMemoryStore

logging.getLogger("passlib").setLevel(logging.ERROR)


class CredentialVerifier:
    """Keeps password hashes keyed by username; plaintext is never stored.

    Args:
        store: Registry of password hashes.
        schemes: passlib schemes, the first one is used for new hashes.
    """

    def __init__(
        self,
        store: KeyValueStore[str] | None = None,
        schemes: tuple[str, ...] = ("pbkdf2_sha256",),
    ):
        self.store = store if store is not None else InMemoryStore()
        self._context = CryptContext(schemes=list(schemes), deprecated="auto")

    async def register(self, username: str, password: str) -> None:
        await self.store.put(username, self._context.hash(password))

    async def has_credentials(self, username: str) -> bool:
        return await self.store.contains(username)

    async def verify(self, username: str, password: str) -> bool:
        hashed = await self.store.get(username)
        if hashed is None:
            return False
        return self._context.verify(password, hashed)
