"""Application configuration via environment variables.

Uses pydantic-settings to load config from env vars with DISSIPATE_ prefix
(and an optional .env file for local development).

Learn: The JWT secret has no default. A missing secret is a validation
error when `settings` is built at import time, so the process refuses to
start instead of silently signing tokens with a well-known key.
Secrets shorter than MIN_SECRET_BYTES are refused the same way.
"""

from typing import Literal, Optional

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings


# HMAC-SHA256 wants a key at least as long as its output
MIN_SECRET_BYTES = 32


class Settings(BaseSettings):
    """All app configuration. Set via DISSIPATE_* env vars."""

    # Database
    database_url: str = "sqlite+aiosqlite:///./dissipate.db"

    # Auth
    jwt_secret: str = Field(
        validation_alias=AliasChoices("DISSIPATE_JWT_SECRET", "JWT_SECRET"),
    )
    jwt_algorithm: Literal["HS256", "HS384", "HS512"] = "HS256"
    token_ttl_days: int = 15

    # Argon2id cost parameters (None = argon2-cffi's RFC 9106 defaults)
    argon2_time_cost: Optional[int] = None
    argon2_memory_cost: Optional[int] = None  # KiB
    argon2_parallelism: Optional[int] = None

    # Server
    environment: str = "development"
    debug: bool = False
    host: str = "0.0.0.0"
    port: int = 3000

    # CORS
    cors_origins: list[str] = [
        "http://localhost:5173",
        "http://localhost:3000",
    ]

    model_config = {
        "env_prefix": "DISSIPATE_",
        "env_file": ".env",
        "extra": "ignore",
        "populate_by_name": True,
    }

    @field_validator("jwt_secret")
    @classmethod
    def validate_jwt_secret(cls, value: str) -> str:
        """Refuse blank or short secrets — they would make tokens forgeable."""
        if len(value.strip().encode("utf-8")) < MIN_SECRET_BYTES:
            raise ValueError(
                f"DISSIPATE_JWT_SECRET (or JWT_SECRET) must be at least {MIN_SECRET_BYTES} bytes. "
                'Generate one with: python -c "import secrets; print(secrets.token_urlsafe(32))"'
            )
        return value


# Singleton — import this everywhere
settings = Settings()
