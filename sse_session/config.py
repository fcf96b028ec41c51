"""Application configuration via pydantic-settings.

Reads from environment variables (prefix ``SSE_``) and .env file.
Only the bundled FastAPI app reads these; ``SessionOptions`` defaults
never depend on the environment.
"""

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from sse_session.models import SessionOptions


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="SSE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Session defaults
    retry_ms: int | None = 2000
    trust_client_event_id: bool = True

    # Keep-alive comment interval in seconds (None disables)
    ping_interval: float | None = 15.0

    # Demo routes
    ticker_interval: float = 1.0

    # Logging
    log_level: str = "INFO"

    # Frontend
    frontend_url: str = "http://localhost:3000"

    @field_validator("retry_ms", "ping_interval", mode="before")
    @classmethod
    def empty_is_none(cls, value):
        # SSE_RETRY_MS= (empty) disables the retry frame
        if isinstance(value, str) and not value.strip():
            return None
        return value

    def session_options(self, **overrides) -> SessionOptions:
        return SessionOptions(
            retry=self.retry_ms,
            trust_client_event_id=self.trust_client_event_id,
            **overrides,
        )


settings = Settings()
