"""Application configuration."""
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database
    database_url: str = "sqlite:///./callbridge.db"

    # ElevenLabs
    elevenlabs_api_key: Optional[str] = None
    elevenlabs_base_url: str = "https://api.elevenlabs.io"
    elevenlabs_agent_id: str = "agent_5401k1aqhf5jfr0rfkawahmpm1w0"
    elevenlabs_phone_number_id: str = "phnum_3701k1asdcmweq3bxqr3hn9pnesy"

    # Provider timeouts (seconds)
    call_start_timeout: float = 30.0
    provider_timeout: float = 10.0

    # Server
    app_name: str = "Grammar Guru Call App"
    host: str = "0.0.0.0"
    port: int = 3001
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )

    @property
    def api_key_configured(self) -> bool:
        return bool(self.elevenlabs_api_key)


settings = Settings()
