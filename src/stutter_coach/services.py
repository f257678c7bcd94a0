"""Wiring of stores, services and external collaborators."""

from dataclasses import dataclass

from stutter_coach.challenge.state_machine import ChallengeManager
from stutter_coach.coaching.language_coach import LanguageCoach, OpenAICoach
from stutter_coach.coaching.orchestrator import CoachingOrchestrator
from stutter_coach.config import Settings
from stutter_coach.models.user_profile import UserProfile
from stutter_coach.storage.base import KeyValueStore, SessionLedger
from stutter_coach.storage.json_profiles import JsonProfileStore
from stutter_coach.storage.memory import InMemorySessionLedger, InMemoryStore
from stutter_coach.users.credentials import CredentialVerifier
from stutter_coach.users.service import UserService
from stutter_coach.voice.repairer import ElevenLabsVoiceRepairer, VoiceRepairer


@dataclass
class Services:
    settings: Settings
    users: UserService
    challenges: ChallengeManager
    ledger: SessionLedger
    orchestrator: CoachingOrchestrator
    voice_repairer: VoiceRepairer | None


def _profile_store(settings: Settings) -> KeyValueStore[UserProfile]:
    if settings.profile_store == "json":
        return JsonProfileStore(settings.profiles_dir)
    return InMemoryStore()


def build_services(
    settings: Settings,
    language_coach: LanguageCoach | None = None,
    voice_repairer: VoiceRepairer | None = None,
) -> Services:
    """Build the service graph, creating network clients from settings when not given."""
    if language_coach is None and settings.openai_api_key:
        language_coach = OpenAICoach(
            api_key=settings.openai_api_key,
            model=settings.coach_model,
            temperature=settings.coach_temperature,
            timeout_seconds=settings.llm_timeout_seconds,
        )
    if voice_repairer is None and settings.elevenlabs_api_key:
        voice_repairer = ElevenLabsVoiceRepairer(
            api_key=settings.elevenlabs_api_key,
            base_url=settings.elevenlabs_base_url,
            model_id=settings.elevenlabs_model_id,
            stability=settings.voice_stability,
            similarity_boost=settings.voice_similarity_boost,
            timeout_seconds=settings.voice_timeout_seconds,
        )

    users = UserService(_profile_store(settings), CredentialVerifier())
    ledger = InMemorySessionLedger()
    return Services(
        settings=settings,
        users=users,
        challenges=ChallengeManager(
            silence_timeout_ms=settings.challenge_silence_timeout_ms
        ),
        ledger=ledger,
        orchestrator=CoachingOrchestrator(users, ledger, language_coach),
        voice_repairer=voice_repairer,
    )
