"""Process settings for the HexaTegy relay server.

Game rules live in ``GameConfig`` and travel with each room; these settings
only cover how the server process itself runs.
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .utils.constants import RESOLUTION_PAUSE_SECONDS, RESOLVE_GRACE_SECONDS


class Settings(BaseSettings):
    """Relay server settings, read from ``HEXATEGY_*`` env vars or ``.env``."""

    model_config = SettingsConfigDict(
        env_prefix="HEXATEGY_", env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    host: str = Field(default="0.0.0.0", description="Interface the server binds to")
    port: int = Field(default=9000, description="Port the server listens on")
    log_level: str = Field(default="info", description="Root log level")
    resolve_grace_seconds: float = Field(
        default=RESOLVE_GRACE_SECONDS,
        description="Extra wait after each planning countdown for late orders",
        ge=0.0,
    )
    resolution_pause_seconds: float = Field(
        default=RESOLUTION_PAUSE_SECONDS,
        description="Pause between a round's resolution and the next round",
        ge=0.0,
    )
    cors_origins: list[str] = Field(
        default_factory=lambda: ["*"],
        description="Origins allowed to call the HTTP API",
    )


@lru_cache
def get_settings() -> Settings:
    """Return a cached Settings instance."""
    return Settings()
