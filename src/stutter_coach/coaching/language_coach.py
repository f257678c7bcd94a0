"""Language-generation collaborator producing coaching suggestions."""

import json
from abc import ABC, abstractmethod

import pydantic
import structlog
from openai import APIError, AsyncOpenAI

from stutter_coach.coaching.prompts import build_coach_messages
from stutter_coach.errors import DecodeFailure, UpstreamFailure
from stutter_coach.models.coaching import CoachSuggestion

logger = structlog.get_logger()


def parse_suggestion(content: str | None) -> CoachSuggestion:
    """Decode a model reply into a suggestion.

    Raises:
        DecodeFailure: The reply is empty, not JSON, or misses required fields.
    """
    if not content:
        raise DecodeFailure("empty reply")
    try:
        return CoachSuggestion.model_validate(json.loads(content))
    except (json.JSONDecodeError, pydantic.ValidationError) as e:
        raise DecodeFailure(str(e)) from e


class LanguageCoach(ABC):
    """Capability: turn a transcript into a fluent rewrite with tips."""

    @abstractmethod
    async def suggest(
        self,
        transcript: str,
        mode: str,
        language: str,
        heuristic_score: float,
    ) -> CoachSuggestion:
        """Ask for a structured suggestion.

        Args:
            transcript: What the user said.
            mode: Practice mode chosen by the client.
            language: Language name the reply must be written in.
            heuristic_score: Rule-based fluency score of the transcript.

        Raises:
            UpstreamFailure: The service could not be reached or errored.
            DecodeFailure: The reply could not be decoded.
        """
        raise NotImplementedError


class OpenAICoach(LanguageCoach):
    """Chat-completions backed coach.

    Args:
        api_key: OpenAI API key.
        model: Chat model used for suggestions.
        temperature: Sampling temperature.
        timeout_seconds: Upper bound for a single request.
    """

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-4o-mini",
        temperature: float = 0.2,
        timeout_seconds: float = 30.0,
    ):
        self.client = AsyncOpenAI(api_key=api_key, timeout=timeout_seconds, max_retries=0)
        self.model = model
        self.temperature = temperature

    async def suggest(
        self,
        transcript: str,
        mode: str,
        language: str,
        heuristic_score: float,
    ) -> CoachSuggestion:
        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=build_coach_messages(transcript, mode, language, heuristic_score),
                temperature=self.temperature,
                response_format={"type": "json_object"},
            )
        except APIError as e:
            logger.exception("coach_request_failed", model=self.model)
            raise UpstreamFailure("Language coach unavailable") from e

        content = response.choices[0].message.content if response.choices else None
        suggestion = parse_suggestion(content)
        logger.info("coach_suggestion_received", tone=suggestion.coach_tone)
        return suggestion
