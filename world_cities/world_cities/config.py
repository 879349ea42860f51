from __future__ import annotations

import json
from enum import Enum
from typing import Annotated

from pydantic import AnyHttpUrl, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Environment(str, Enum):
    dev = "dev"
    prod = "prod"


class Settings(BaseSettings):
    """
    Service settings, read from the environment and an optional `.env` file.
    """

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    DEBUG: bool = False
    ENV: Environment = Environment.dev
    LOGGING_LEVEL: str = "INFO"

    # the service is mounted behind this prefix by the gateway
    URL_PREFIX: str = "/world-cities"
    SERVER_HOST: str | AnyHttpUrl = "http://localhost:8000"
    BACKEND_CORS_ORIGINS: Annotated[list[AnyHttpUrl | str], NoDecode] = []

    DATABASE_URL: str
    # one of commons.db.profiles.PROFILES
    DB_PROFILE: str = "dev"
    DB_MAX_CONCURRENT_SESSIONS: int | None = None
    SQLALCHEMY_ENGINE_OPTIONS: dict = {}

    @field_validator("BACKEND_CORS_ORIGINS", mode="before")
    @classmethod
    def split_cors_origins(cls, value: str | list[str]) -> list[str]:
        """Accept a JSON list or a comma separated string."""
        if isinstance(value, list):
            return value
        if isinstance(value, str):
            value = value.strip()
            if value.startswith("["):
                return json.loads(value)
            return [origin.strip() for origin in value.split(",") if origin.strip()]
        raise ValueError(f"Invalid BACKEND_CORS_ORIGINS: {value!r}")


_settings: Settings | None = None


def get_settings() -> Settings:
    """
    Lazily build the settings object on first use.
    """
    global _settings
    if _settings is None:
        _settings = Settings()  # type: ignore
    return _settings
