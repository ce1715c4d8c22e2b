"""
Application configuration settings.
"""

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from pitchdeck.domain.exceptions import ConfigurationError

_PLACEHOLDER_KEYS = {"", "changeme", "your-api-key", "sk-..."}


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # Application
    app_name: str = Field("Prestige Deck", alias="APP_NAME")
    environment: str = Field("development", alias="ENVIRONMENT")
    debug: bool = Field(False, alias="DEBUG")

    # Server
    host: str = Field("0.0.0.0", alias="HOST")
    port: int = Field(8000, alias="PORT")

    # OpenAI/LLM
    openai_api_key: Optional[str] = Field(None, alias="OPENAI_API_KEY")
    openai_model: str = Field("gpt-4o-mini", alias="OPENAI_MODEL")
    openai_base_url: Optional[str] = Field(None, alias="OPENAI_BASE_URL")
    llm_temperature: float = Field(0.7, alias="OPENAI_TEMPERATURE")
    llm_max_tokens: int = Field(4000, alias="OPENAI_MAX_TOKENS")

    # Realtime voice
    realtime_model: str = Field("gpt-4o-realtime-preview", alias="REALTIME_MODEL")
    realtime_voice: str = Field("alloy", alias="REALTIME_VOICE")
    capture_sample_rate: int = Field(24000, alias="CAPTURE_SAMPLE_RATE")
    playback_sample_rate: int = Field(24000, alias="PLAYBACK_SAMPLE_RATE")

    # Presentation timing (seconds)
    autoplay_interval: float = Field(5.0, alias="AUTOPLAY_INTERVAL", gt=0)
    loading_caption_interval: float = Field(
        2.5, alias="LOADING_CAPTION_INTERVAL", gt=0
    )

    # Image-by-seed backend
    image_base_url: str = Field("https://picsum.photos", alias="IMAGE_BASE_URL")

    # CORS
    cors_origins: str = Field("*", alias="CORS_ORIGINS")

    # Observability
    prometheus_metrics_enabled: bool = Field(True, alias="PROMETHEUS_METRICS_ENABLED")

    # Logging
    log_level: str = Field("INFO", alias="LOG_LEVEL")
    log_format: str = Field("json", alias="LOG_FORMAT")

    def get_cors_origins(self) -> list[str]:
        """Parse CORS origins from string."""
        if self.cors_origins == "*":
            return ["*"]
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    def has_api_key(self) -> bool:
        key = (self.openai_api_key or "").strip()
        return key.lower() not in _PLACEHOLDER_KEYS

    def require_api_key(self) -> str:
        """Return the backend credential or raise ConfigurationError."""
        if not self.has_api_key():
            raise ConfigurationError(
                "La credencial del servicio de IA no está configurada "
                "(OPENAI_API_KEY)."
            )
        return self.openai_api_key.strip()


_settings = None


def get_settings() -> Settings:
    """Get settings instance (useful for dependency injection)."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
