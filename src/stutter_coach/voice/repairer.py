"""Voice repair: re-speak a fluent sentence in the user's own cloned voice."""

from abc import ABC, abstractmethod
from pathlib import Path

import httpx
import structlog

from stutter_coach.errors import UpstreamFailure

logger = structlog.get_logger()

CLONE_NAME = "User Temp Clone"
CLONE_DESCRIPTION = "Temp clone"


class VoiceRepairer(ABC):
    """Capability: audio sample + text in, synthesized audio out."""

    media_type: str = "audio/mpeg"

    @abstractmethod
    async def repair(self, sample_path: Path, text: str) -> bytes:
        """Synthesize ``text`` in the voice heard in ``sample_path``.

        Raises:
            UpstreamFailure: The voice service failed or timed out.
        """
        raise NotImplementedError


class ElevenLabsVoiceRepairer(VoiceRepairer):
    """Instant voice cloning followed by text-to-speech.

    The cloned voice is deleted after every attempt.

    Args:
        api_key: ElevenLabs API key.
        base_url: API root, e.g. ``https://api.elevenlabs.io/v1``.
        model_id: Text-to-speech model.
        stability: Voice stability setting.
        similarity_boost: Voice similarity setting.
        timeout_seconds: Upper bound for each HTTP call.
        transport: Optional httpx transport, used by tests.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://api.elevenlabs.io/v1",
        model_id: str = "eleven_monolingual_v1",
        stability: float = 0.5,
        similarity_boost: float = 0.75,
        timeout_seconds: float = 60.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.model_id = model_id
        self.stability = stability
        self.similarity_boost = similarity_boost
        self.timeout_seconds = timeout_seconds
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            headers={"xi-api-key": self.api_key},
            timeout=self.timeout_seconds,
            transport=self._transport,
        )

    async def _add_voice(self, client: httpx.AsyncClient, sample_path: Path) -> str:
        with open(sample_path, "rb") as sample:
            response = await client.post(
                "/voices/add",
                data={"name": CLONE_NAME, "description": CLONE_DESCRIPTION},
                files={"files": (sample_path.name, sample)},
            )
        response.raise_for_status()
        return response.json()["voice_id"]

    async def _synthesize(self, client: httpx.AsyncClient, voice_id: str, text: str) -> bytes:
        response = await client.post(
            f"/text-to-speech/{voice_id}",
            json={
                "text": text,
                "model_id": self.model_id,
                "voice_settings": {
                    "stability": self.stability,
                    "similarity_boost": self.similarity_boost,
                },
            },
        )
        response.raise_for_status()
        return response.content

    async def _delete_voice(self, client: httpx.AsyncClient, voice_id: str) -> None:
        try:
            response = await client.delete(f"/voices/{voice_id}")
            response.raise_for_status()
        except httpx.HTTPError as e:
            # Leaves an orphan clone on the account but the audio is still valid
            logger.warning("voice_delete_failed", voice_id=voice_id, error=str(e))

    async def repair(self, sample_path: Path, text: str) -> bytes:
        async with self._client() as client:
            try:
                voice_id = await self._add_voice(client, sample_path)
            except (httpx.HTTPError, KeyError, ValueError) as e:
                logger.error("voice_clone_failed", error=str(e))
                raise UpstreamFailure("Failed to repair") from e

            try:
                audio = await self._synthesize(client, voice_id, text)
            except httpx.HTTPError as e:
                logger.error("voice_synthesis_failed", voice_id=voice_id, error=str(e))
                raise UpstreamFailure("Failed to repair") from e
            finally:
                await self._delete_voice(client, voice_id)

        logger.info("voice_repaired", bytes=len(audio))
        return audio
