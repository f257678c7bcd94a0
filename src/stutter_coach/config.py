"""Application configuration using pydantic-settings."""

import functools
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import Field
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict


def _find_project_root() -> Path:
    """Find project root by locating pyproject.toml."""
    current = Path(__file__).resolve()
    for parent in [current] + list(current.parents):
        if (parent / "pyproject.toml").exists():
            return parent
    return Path.cwd()


class YamlSettingsSource(PydanticBaseSettingsSource):
    """Custom settings source that loads from config/settings.yaml."""

    def get_field_value(self, field_name: str) -> tuple[Any, str, bool]:
        """Not used - we implement __call__ instead."""
        return None, "", False

    def __call__(self) -> dict[str, Any]:
        """Load settings from YAML file."""
        yaml_path = _find_project_root() / "config" / "settings.yaml"
        if not yaml_path.exists():
            return {}

        with open(yaml_path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}

        # Flatten nested structure to match Settings field names
        flattened = {}
        if "server" in data:
            flattened["host"] = data["server"].get("host")
            flattened["port"] = data["server"].get("port")
        if "coach" in data:
            coach = data["coach"]
            flattened["coach_model"] = coach.get("model")
            flattened["coach_temperature"] = coach.get("temperature")
            flattened["llm_timeout_seconds"] = coach.get("timeout_seconds")
        if "voice" in data:
            voice = data["voice"]
            flattened["elevenlabs_model_id"] = voice.get("model_id")
            flattened["voice_stability"] = voice.get("stability")
            flattened["voice_similarity_boost"] = voice.get("similarity_boost")
            flattened["voice_timeout_seconds"] = voice.get("timeout_seconds")
        if "challenge" in data:
            flattened["challenge_silence_timeout_ms"] = (
                data["challenge"].get("silence_timeout_ms")
            )
        if "storage" in data:
            flattened["profile_store"] = data["storage"].get("profiles")

        # Remove None values
        return {k: v for k, v in flattened.items() if v is not None}


class Settings(BaseSettings):
    """Application settings loaded from environment and config files."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Language coach (OpenAI). None leaves /coach unavailable.
    openai_api_key: str | None = Field(default=None)
    coach_model: str = Field(default="gpt-4o-mini")
    coach_temperature: float = Field(default=0.2)
    llm_timeout_seconds: float = Field(default=30.0)

    # Voice repair (ElevenLabs). None makes /repair answer 500.
    elevenlabs_api_key: str | None = Field(default=None)
    elevenlabs_base_url: str = Field(default="https://api.elevenlabs.io/v1")
    elevenlabs_model_id: str = Field(default="eleven_monolingual_v1")
    voice_stability: float = Field(default=0.5)
    voice_similarity_boost: float = Field(default=0.75)
    voice_timeout_seconds: float = Field(default=60.0)

    # Challenge
    challenge_silence_timeout_ms: int = Field(default=3000)

    # Storage
    profile_store: Literal["memory", "json"] = Field(default="memory")
    seed_demo_user: bool = Field(default=True)

    # Server
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=4000)
    allowed_origins: str = Field(default="*")

    # Paths
    project_root: Path = Field(default_factory=_find_project_root)

    @property
    def uploads_dir(self) -> Path:
        d = self.project_root / "data" / "uploads"
        d.mkdir(parents=True, exist_ok=True)
        return d

    @property
    def profiles_dir(self) -> Path:
        d = self.project_root / "data" / "user_profiles"
        d.mkdir(parents=True, exist_ok=True)
        return d

    @property
    def origins(self) -> list[str]:
        return [o.strip() for o in self.allowed_origins.split(",") if o.strip()]

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Customise settings sources to include YAML file.

        Priority order (highest to lowest):
        1. init_settings (arguments passed to Settings())
        2. env_settings (environment variables)
        3. dotenv_settings (.env file)
        4. YamlSettingsSource (settings.yaml)
        5. file_secret_settings
        """
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            YamlSettingsSource(settings_cls),
            file_secret_settings,
        )


@functools.lru_cache
def get_settings() -> Settings:
    """Get application settings singleton."""
    return Settings()


LANGUAGES: dict[str, str] = {
    "en": "English",
    "hi": "Hindi",
    "te": "Telugu",
    "kn": "Kannada",
}


def language_name(code: str | None) -> str:
    """Map a language code to the name used in coach prompts (English by default)."""
    return LANGUAGES.get((code or "").lower(), "English")
