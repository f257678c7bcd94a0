"""User profile model for tracking speaking progress across sessions."""

from datetime import date, datetime, timezone

from pydantic import Field, computed_field

from stutter_coach.models.base import CamelModel

XP_PER_LEVEL = 100


def level_for_xp(xp: int) -> int:
    """Level is derived from xp, never stored on its own."""
    return xp // XP_PER_LEVEL + 1


class UserStats(CamelModel):
    total_sessions: int = 0
    total_seconds: float = 0
    daily_minutes: float = 0.0


class UserProfile(CamelModel):
    username: str
    xp: int = Field(default=0, ge=0)
    streak: int = Field(default=0, ge=0)
    last_active_date: date | None = None
    badges: list[str] = Field(default_factory=list)
    stats: UserStats = Field(default_factory=UserStats)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @computed_field
    @property
    def level(self) -> int:
        return level_for_xp(self.xp)
