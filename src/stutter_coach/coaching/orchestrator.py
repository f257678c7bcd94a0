"""Coaching flow: heuristics, AI suggestion, progression and ledger."""

import structlog

from stutter_coach.analysis.heuristics import analyze
from stutter_coach.coaching.language_coach import LanguageCoach
from stutter_coach.config import language_name
from stutter_coach.errors import DecodeFailure, UpstreamFailure, ValidationError
from stutter_coach.gamification.progression import apply_result
from stutter_coach.models.coaching import CoachResponse, CoachSuggestion
from stutter_coach.storage.base import SessionLedger
from stutter_coach.users.service import UserService

logger = structlog.get_logger()


class CoachingOrchestrator:
    """Composes one coaching exchange for a finished utterance.

    Args:
        users: User service owning the profile registry and its locks.
        ledger: Session ledger the exchange is recorded in.
        language_coach: Suggestion collaborator; None means not configured.
    """

    def __init__(
        self,
        users: UserService,
        ledger: SessionLedger,
        language_coach: LanguageCoach | None,
    ):
        self.users = users
        self.ledger = ledger
        self.language_coach = language_coach

    async def _suggest(
        self, transcript: str, mode: str, language: str, heuristic_score: int
    ) -> CoachSuggestion:
        if self.language_coach is None:
            logger.error("coach_not_configured")
            raise UpstreamFailure("Language coach unavailable")
        try:
            return await self.language_coach.suggest(
                transcript, mode, language_name(language), heuristic_score
            )
        except DecodeFailure as e:
            logger.warning("coach_reply_undecodable", error=str(e))
            return CoachSuggestion.fallback(transcript, heuristic_score)

    async def coach(
        self,
        user_id: str,
        transcript: str | None,
        mode: str = "free_talk",
        duration_seconds: float = 0,
        language: str = "en",
    ) -> CoachResponse:
        """Run a coaching exchange and record it.

        Raises:
            ValidationError: No transcript was given.
            UpstreamFailure: The language coach call itself failed.
        """
        if transcript is None:
            raise ValidationError("Transcript required")

        async with self.users.locks.hold(user_id):
            profile = await self.users.get_or_create_profile(user_id)
            heuristics = analyze(transcript)
            suggestion = await self._suggest(transcript, mode, language, heuristics.score)

            gamification = apply_result(profile, duration_seconds, heuristics.score)
            await self.users.profiles.put(user_id, profile)

            confidence = suggestion.confidence_score
            session = await self.ledger.append(
                user_id=user_id,
                mode=mode,
                transcript=transcript,
                score=heuristics.score,
                confidence_score=heuristics.score if confidence is None else confidence,
                fluent_sentence=suggestion.fluent_sentence,
                tips=suggestion.tips,
                coach_tone=suggestion.coach_tone,
                duration=duration_seconds,
            )

        logger.info(
            "coaching_completed",
            user_id=user_id,
            session_id=session.id,
            score=heuristics.score,
            earned_xp=gamification.earned_xp,
        )
        return CoachResponse(session=session, user_profile=profile, gamification=gamification)
