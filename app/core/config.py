"""Application configuration loaded from environment variables."""

from functools import lru_cache
from typing import Literal

from pydantic import SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Allowed URL schemes for MONGODB_URI (module-level so validators can use it).
VALID_MONGODB_URI_PREFIXES = (
    "mongodb://",
    "mongodb+srv://",
)


class Settings(BaseSettings):
    """Validated application settings from env and optional .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    APP_ENV: Literal["dev", "prod"] = "dev"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    API_V1_PREFIX: str = "/api/v1"

    # MongoDB: credentials are optional; when set they authenticate against MONGODB_AUTH_SOURCE
    MONGODB_URI: str = "mongodb://localhost:27017"
    MONGODB_USER: str | None = None
    MONGODB_PASSWORD: SecretStr | None = None
    MONGODB_AUTH_SOURCE: str = "admin"
    DATABASE_NAME: str = "user_management"
    USERS_COLLECTION: str = "users"
    # Bound on every database operation (pymongo timeoutMS)
    MONGODB_TIMEOUT_MS: int = 10_000
    # Bound on the startup connect + ping
    MONGODB_CONNECT_TIMEOUT_MS: int = 30_000

    # "memory" keeps users in-process; useful for local runs without MongoDB
    STORAGE_BACKEND: Literal["mongo", "memory"] = "mongo"

    HOST: str = "0.0.0.0"
    PORT: int = 8080
    SHUTDOWN_GRACE_SEC: int = 30

    @field_validator("MONGODB_URI")
    @classmethod
    def validate_mongodb_uri(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("MONGODB_URI must be set and non-empty")
        if not any(v.strip().startswith(prefix) for prefix in VALID_MONGODB_URI_PREFIXES):
            raise ValueError(
                "MONGODB_URI must be a MongoDB URL (e.g. mongodb://localhost:27017)"
            )
        return v.strip()

    @field_validator("MONGODB_USER")
    @classmethod
    def validate_mongodb_user(cls, v: str | None) -> str | None:
        if v is None or not v.strip():
            return None
        return v.strip()

    @field_validator("DATABASE_NAME", "USERS_COLLECTION", "MONGODB_AUTH_SOURCE")
    @classmethod
    def validate_names(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("database, collection and auth source names must be non-empty")
        return v.strip()

    @field_validator("MONGODB_TIMEOUT_MS", "MONGODB_CONNECT_TIMEOUT_MS")
    @classmethod
    def validate_mongodb_timeouts(cls, v: int) -> int:
        if v <= 0 or v > 120_000:
            raise ValueError(
                "MongoDB timeouts must be greater than 0 and at most 120000 ms"
            )
        return v

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.strip().upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError("LOG_LEVEL must be one of DEBUG, INFO, WARNING, ERROR, CRITICAL")
        return level

    @field_validator("PORT")
    @classmethod
    def validate_port(cls, v: int) -> int:
        if v < 1 or v > 65535:
            raise ValueError("PORT must be between 1 and 65535")
        return v

    @field_validator("SHUTDOWN_GRACE_SEC")
    @classmethod
    def validate_shutdown_grace(cls, v: int) -> int:
        if v < 0 or v > 300:
            raise ValueError("SHUTDOWN_GRACE_SEC must be between 0 and 300")
        return v


@lru_cache
def get_settings() -> Settings:
    """Return cached settings instance (safe to call from dependencies)."""
    return Settings()


settings = get_settings()
