# Central place for all configurable settings. We use Pydantic's
# BaseSettings so values can be read from env vars or a .env file.
# Secrets and the database URL never get hardcoded.

import json
from typing import Annotated, List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


def safe_json_loads(value):
    try:
        return json.loads(value)
    except (TypeError, ValueError):
        return value


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
    )

    # SQLAlchemy connection string, like sqlite:///./hrms.db or a MySQL/Postgres URL.
    DATABASE_URL: str

    # Secret used for anything signed server-side. Must be kept private.
    SECRET_KEY: str

    # Toggle SQLAlchemy echo logs. Useful for debugging queries locally.
    DB_ECHO: bool = False

    # Session storage: "memory" keeps sessions in-process, "database"
    # persists them in the user_sessions table.
    SESSION_BACKEND: str = "memory"
    SESSION_COOKIE_NAME: str = "hrms_session"
    SESSION_COOKIE_SECURE: bool = False
    SESSION_TTL_SECONDS: int = Field(default=28800, gt=0)

    # CORS: the API is consumed by a separately served frontend.
    CORS_ALLOW_ORIGINS: Annotated[List[str], NoDecode] = Field(default_factory=lambda: ["*"])
    CORS_ALLOW_CREDENTIALS: bool = False
    CORS_MAX_AGE: int = 86400

    # Pagination defaults for list endpoints.
    DEFAULT_PER_PAGE: int = Field(default=20, gt=0)
    MAX_PER_PAGE: int = Field(default=100, gt=0)

    LOG_LEVEL: str = "INFO"

    @field_validator("CORS_ALLOW_ORIGINS", mode="before")
    @classmethod
    def _parse_list_values(cls, value):
        if isinstance(value, str) and value.strip().startswith("["):
            value = safe_json_loads(value)
        if isinstance(value, str):
            parts = [p.strip() for p in value.split(",") if p.strip()]
            return parts
        return value

    @field_validator("SESSION_BACKEND")
    @classmethod
    def _normalize_backend(cls, value: str) -> str:
        normalized = value.strip().lower()
        if normalized not in {"memory", "database"}:
            raise ValueError("SESSION_BACKEND must be 'memory' or 'database'")
        return normalized


# Instantiate a single settings object for app-wide import.
# Any module can just `from hrms.core.config import settings`.
settings = Settings()
