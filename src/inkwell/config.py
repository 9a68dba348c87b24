"""Application configuration via environment variables.

Uses pydantic-settings to load config from env vars with INKWELL_ prefix
(or a local .env file). The signing secret and the database URL have no
defaults: the process refuses to start without them.

Learn: Settings() raises a ValidationError at import time when a required
variable is missing, which is exactly the startup failure we want.
"""

from typing import Optional

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

PLACEHOLDER_SECRET = "change-me-in-production"


class Settings(BaseSettings):
    """All app configuration. Set via INKWELL_* env vars."""

    # Database (required)
    database_url: str

    # Redis (rate limiting only; optional at runtime)
    redis_url: str = "redis://localhost:6379/0"

    # Auth
    jwt_secret: str
    jwt_refresh_secret: Optional[str] = None  # falls back to jwt_secret
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = Field(60, ge=1)
    refresh_token_expire_days: int = Field(7, ge=1)
    bcrypt_rounds: int = Field(12, ge=4, le=31)

    # Server
    environment: str = "development"
    debug: bool = False
    host: str = "0.0.0.0"
    port: int = 8000

    # Logging
    log_level: str = "INFO"
    log_json: bool = False

    # CORS
    cors_origins: list[str] = [
        "http://localhost:5173",
        "http://localhost:3000",
    ]

    # Rate limiting
    rate_limit_rpm: int = 100  # requests per minute per IP
    rate_limit_auth_rpm: int = 10  # login + registration

    model_config = SettingsConfigDict(
        env_prefix="INKWELL_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @field_validator("database_url", "jwt_secret")
    @classmethod
    def not_blank(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("must be set and non-empty")
        return v.strip()

    @model_validator(mode="after")
    def validate_production_settings(self):
        """Ensure the placeholder secret is never used outside development."""
        if self.environment != "development" and PLACEHOLDER_SECRET in (
            self.jwt_secret,
            self.jwt_refresh_secret,
        ):
            raise ValueError(
                "INKWELL_JWT_SECRET must be set to a secure value in "
                "non-development environments. Generate one with: "
                'python -c "import secrets; print(secrets.token_urlsafe(32))"'
            )
        return self

    @property
    def refresh_secret(self) -> str:
        return self.jwt_refresh_secret or self.jwt_secret


# Import this everywhere
settings = Settings()
