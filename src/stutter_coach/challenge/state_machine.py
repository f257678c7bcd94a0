"""Live "no stutter" challenge driven by successive transcript snapshots."""

import time
from collections.abc import Callable

import structlog

from stutter_coach.errors import ChallengeNotFoundError
from stutter_coach.models.challenge import ChallengeSession, TickResult
from stutter_coach.storage.base import KeyedLocks, KeyValueStore
from stutter_coach.storage.memory import InMemoryStore

logger = structlog.get_logger()

# Stricter than the heuristic lexicon: hesitation sounds fail the challenge outright
CHALLENGE_FILLERS = frozenset({"um", "uh", "like", "hmm", "erm", "aa", "er"})

DEFAULT_SILENCE_TIMEOUT_MS = 3000


def monotonic_ms() -> float:
    return time.monotonic() * 1000


def find_filler(tokens: list[str]) -> str | None:
    for token in tokens:
        if token.lower() in CHALLENGE_FILLERS:
            return token
    return None


def find_repetition(tokens: list[str]) -> tuple[str, str] | None:
    """First pair of adjacent tokens that are equal ignoring case."""
    for prev, token in zip(tokens, tokens[1:]):
        if prev.lower() == token.lower():
            return prev, token
    return None


class ChallengeManager:
    """Owns every user's active challenge.

    Timeouts are detected lazily: silence is only noticed when the next tick
    arrives, there is no background timer.

    Args:
        store: Registry of active challenges keyed by user id.
        silence_timeout_ms: Allowed time without transcript progress once the
            user has started speaking.
        clock: Monotonic clock in milliseconds.
    """

    def __init__(
        self,
        store: KeyValueStore[ChallengeSession] | None = None,
        silence_timeout_ms: int = DEFAULT_SILENCE_TIMEOUT_MS,
        clock: Callable[[], float] = monotonic_ms,
    ):
        self.store = store if store is not None else InMemoryStore()
        self.silence_timeout_ms = silence_timeout_ms
        self._clock = clock
        self._locks = KeyedLocks()

    async def start(self, user_id: str) -> ChallengeSession:
        """Begin a challenge, replacing any challenge already active for the user."""
        async with self._locks.hold(user_id):
            now = self._clock()
            challenge = ChallengeSession(
                user_id=user_id, start_time=now, last_change_time=now
            )
            await self.store.put(user_id, challenge)
        logger.info("challenge_started", user_id=user_id)
        return challenge

    async def stop(self, user_id: str) -> float:
        """Abandon an active challenge.

        Returns:
            Milliseconds elapsed since the challenge started.

        Raises:
            ChallengeNotFoundError: No active challenge for the user.
        """
        async with self._locks.hold(user_id):
            challenge = await self.store.get(user_id)
            if challenge is None:
                raise ChallengeNotFoundError(user_id)
            await self.store.delete(user_id)
            elapsed = self._clock() - challenge.start_time
        logger.info("challenge_stopped", user_id=user_id, elapsed_ms=round(elapsed))
        return elapsed

    async def tick(self, user_id: str, transcript: str | None) -> TickResult:
        """Classify the latest transcript snapshot.

        Raises:
            ChallengeNotFoundError: No active challenge for the user.
        """
        async with self._locks.hold(user_id):
            challenge = await self.store.get(user_id)
            if challenge is None:
                raise ChallengeNotFoundError(user_id)

            result = self._advance(challenge, (transcript or "").strip())
            if result.failed:
                await self.store.delete(user_id)
                logger.info("challenge_failed", user_id=user_id, reason=result.reason)
            else:
                await self.store.put(user_id, challenge)
            return result

    def _advance(self, challenge: ChallengeSession, text: str) -> TickResult:
        now = self._clock()

        if not challenge.is_speaking and text:
            challenge.is_speaking = True
            challenge.last_change_time = now
            challenge.last_transcript = text

        if text:
            tokens = text.split()
            filler = find_filler(tokens)
            if filler is not None:
                return TickResult.fail(f'Stuttered: "{filler}"')
            repeated = find_repetition(tokens)
            if repeated is not None:
                return TickResult.fail(f'Repetition: "{repeated[0]} {repeated[1]}"')

        if challenge.is_speaking:
            if text != challenge.last_transcript:
                challenge.last_change_time = now
                challenge.last_transcript = text
            elif now - challenge.last_change_time > self.silence_timeout_ms:
                seconds = self.silence_timeout_ms / 1000
                return TickResult.fail(f"Silence detected (> {seconds:g}s)")

        return TickResult.ok()
