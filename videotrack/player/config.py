"""
Player Configuration

Settings for the client-side player. Nothing here is required, so the
player loads on pages that have none of the server's secrets.
"""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class PlayerSettings(BaseSettings):
    """Player settings loaded from environment variables."""

    SEEK_TOLERANCE_SECONDS: float = 0.01
    API_BASE_URL: str = "http://localhost:8000/api/v1"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )


@lru_cache
def get_player_settings() -> PlayerSettings:
    """Get cached player settings instance."""
    return PlayerSettings()


player_settings = get_player_settings()
