"""Live challenge models."""

from enum import StrEnum

from pydantic import BaseModel

from stutter_coach.models.base import CamelModel


class ChallengeStatus(StrEnum):
    """Outcome of a single challenge tick."""

    OK = "ok"
    FAIL = "fail"


class ChallengeSession(BaseModel):
    """State of one user's active challenge. Times are monotonic milliseconds."""

    user_id: str
    start_time: float
    last_transcript: str = ""
    last_change_time: float
    is_speaking: bool = False


class TickResult(CamelModel):
    status: ChallengeStatus
    reason: str | None = None

    @classmethod
    def ok(cls) -> "TickResult":
        return cls(status=ChallengeStatus.OK)

    @classmethod
    def fail(cls, reason: str) -> "TickResult":
        return cls(status=ChallengeStatus.FAIL, reason=reason)

    @property
    def failed(self) -> bool:
        return self.status == ChallengeStatus.FAIL
