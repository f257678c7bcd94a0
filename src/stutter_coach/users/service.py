"""User registration, login and profile lookup."""

import structlog

from stutter_coach.errors import AuthError, UserNotFoundError, ValidationError
from stutter_coach.gamification.progression import Badge, utc_today
from stutter_coach.models.user_profile import UserProfile, UserStats
from stutter_coach.storage.base import KeyedLocks, KeyValueStore
from stutter_coach.users.credentials import CredentialVerifier

logger = structlog.get_logger()

DEMO_USERNAME = "Demo User"
DEMO_PASSWORD = "123"


class UserService:
    """Thin layer over the profile registry and the credential verifier.

    Args:
        profiles: Registry of user profiles keyed by username.
        credentials: Password verifier.
        locks: Per-username locks shared with the coaching orchestrator.
    """

    def __init__(
        self,
        profiles: KeyValueStore[UserProfile],
        credentials: CredentialVerifier,
        locks: KeyedLocks | None = None,
    ):
        self.profiles = profiles
        self.credentials = credentials
        self.locks = locks or KeyedLocks()

    async def list_usernames(self) -> list[str]:
        return await self.profiles.list_keys()

    async def get_profile(self, username: str) -> UserProfile:
        profile = await self.profiles.get(username)
        if profile is None:
            raise UserNotFoundError(username)
        return profile

    async def get_or_create_profile(self, username: str) -> UserProfile:
        """Fetch a profile, creating a fresh one for unknown usernames.

        Callers must hold ``self.locks`` for the username.
        """
        profile = await self.profiles.get(username)
        if profile is None:
            # Clients may still hold an identity from before a restart
            profile = UserProfile(username=username)
            await self.profiles.put(username, profile)
            logger.info("profile_created_lazily", username=username)
        return profile

    async def register(self, username: str | None, password: str | None) -> UserProfile:
        clean = (username or "").strip()
        if not clean or not password:
            raise ValidationError("Username and Password required")

        async with self.locks.hold(clean):
            if await self.profiles.contains(clean):
                raise ValidationError("User already exists")
            profile = UserProfile(username=clean)
            await self.credentials.register(clean, password)
            await self.profiles.put(clean, profile)

        logger.info("user_registered", username=clean)
        return profile

    async def login(self, username: str | None, password: str | None) -> None:
        if not username or not await self.profiles.contains(username):
            raise UserNotFoundError(username or "")
        if not await self.credentials.verify(username, password or ""):
            logger.info("login_rejected", username=username)
            raise AuthError("Wrong password")

    async def seed_demo_user(self) -> None:
        """Install the demo account used by clients that never registered."""
        if await self.profiles.contains(DEMO_USERNAME):
            return
        profile = UserProfile(
            username=DEMO_USERNAME,
            xp=120,
            streak=1,
            last_active_date=utc_today(),
            badges=[Badge.FIRST_STEP.value],
            stats=UserStats(total_sessions=5, total_seconds=300, daily_minutes=5),
        )
        await self.credentials.register(DEMO_USERNAME, DEMO_PASSWORD)
        await self.profiles.put(DEMO_USERNAME, profile)
