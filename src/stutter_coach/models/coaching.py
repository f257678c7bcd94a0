"""Coaching exchange models: heuristics, AI suggestions and ledger entries."""

from datetime import datetime, timezone

from pydantic import ConfigDict, Field, field_validator

from stutter_coach.models.base import CamelModel
from stutter_coach.models.user_profile import UserProfile


class HeuristicResult(CamelModel):
    """Fluency heuristics for one transcript."""

    model_config = ConfigDict(frozen=True)

    score: int = 100
    repeats: int = 0
    fillers: int = 0


class CoachSuggestion(CamelModel):
    """Structured reply expected from the language coach."""

    fluent_sentence: str
    tips: str = ""
    coach_tone: str = "supportive"
    confidence_score: float | None = Field(default=None, ge=0, le=100)

    @field_validator("tips", "coach_tone", mode="before")
    @classmethod
    def _null_to_default(cls, value, info):
        if value is None:
            return cls.model_fields[info.field_name].default
        return value

    @field_validator("tips", mode="before")
    @classmethod
    def _join_tip_list(cls, value):
        # Models sometimes return tips as a JSON array
        if isinstance(value, list):
            return " ".join(str(v) for v in value)
        return value

    @classmethod
    def fallback(cls, transcript: str, heuristic_score: float) -> "CoachSuggestion":
        """Degraded suggestion used when the coach reply cannot be decoded."""
        return cls(
            fluent_sentence=transcript,
            tips="Keep going!",
            coach_tone="supportive",
            confidence_score=heuristic_score,
        )


class CoachingSession(CamelModel):
    """Immutable ledger entry for one completed coaching exchange."""

    model_config = ConfigDict(frozen=True)

    id: int
    user_id: str
    mode: str
    transcript: str
    score: int
    confidence_score: float
    fluent_sentence: str
    tips: str
    coach_tone: str
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    duration: float = 0


class GamificationResult(CamelModel):
    earned_xp: int
    new_badges: list[str] = Field(default_factory=list)


class CoachResponse(CamelModel):
    session: CoachingSession
    user_profile: UserProfile
    gamification: GamificationResult
