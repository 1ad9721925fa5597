"""Runtime configuration for the OpenTok server library."""
from __future__ import annotations

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..schemas.tokens import TokenFormat

DEFAULT_API_URL = "https://api.opentok.com"


class Settings(BaseSettings):
    """Credentials and defaults read from the environment or a ``.env`` file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="opentok_",
        case_sensitive=False,
        extra="ignore",
    )

    api_key: str = Field(default="")
    api_secret: str = Field(default="")
    api_url: str = Field(default=DEFAULT_API_URL)
    token_format: TokenFormat = Field(default=TokenFormat.MODERN)

    @field_validator("api_key", mode="before")
    @classmethod
    def _coerce_api_key(cls, value: object) -> object:
        """Project keys are numeric in the dashboard; keep them as strings."""

        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator("api_url", mode="before")
    @classmethod
    def _strip_trailing_slash(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip().rstrip("/")
        return value

    @field_validator("token_format", mode="before")
    @classmethod
    def _normalise_token_format(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip().lower()
        return value


@lru_cache
def get_settings() -> Settings:
    """Return cached settings instance."""

    return Settings()
