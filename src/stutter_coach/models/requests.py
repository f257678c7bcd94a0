"""HTTP request bodies.

Fields are optional so that missing values surface as 400 from the
services rather than as framework validation errors.
"""

from pydantic import Field

from stutter_coach.models.base import CamelModel


class CredentialsRequest(CamelModel):
    username: str | None = None
    password: str | None = None


class ChallengeStartRequest(CamelModel):
    user_id: str | None = None


class ChallengeTickRequest(CamelModel):
    user_id: str | None = None
    transcript: str | None = None


class CoachRequest(CamelModel):
    transcript: str | None = None
    mode: str = "free_talk"
    user_id: str = "Demo User"
    duration: float = Field(default=0, ge=0)
    language: str = "en"
