"""Configuration models for the chat-completion adapter and plan generation."""

import os
from typing import Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, SecretStr, field_validator, model_validator

DEFAULT_BASE_URL = "https://openrouter.ai/api/v1"

# Environment variable -> ServiceConfig field
ENVIRONMENT_FIELDS = {
    "OPENROUTER_API_KEY": "api_key",
    "OPENROUTER_BASE_URL": "base_url",
    "OPENROUTER_TIMEOUT": "default_timeout",
    "OPENROUTER_TEMPERATURE": "default_temperature",
    "OPENROUTER_MAX_TOKENS": "default_max_tokens",
    "OPENROUTER_LOGGING": "logging_enabled",
    "OPENROUTER_RETRY_ATTEMPTS": "retry_attempts",
    "OPENROUTER_RETRY_DELAY": "retry_delay",
}


class ServiceConfig(BaseModel):
    """Process-wide adapter configuration.

    Built once and immutable afterwards. The API key is held as a
    ``SecretStr`` so it never shows up in logs, reprs or dumps.
    """

    model_config = ConfigDict(frozen=True)

    api_key: SecretStr = Field(..., description="OpenRouter API key")
    base_url: str = Field(default=DEFAULT_BASE_URL, description="API base URL")
    default_timeout: float = Field(
        default=60.0, gt=0, le=600, description="Request timeout in seconds"
    )
    default_temperature: float = Field(default=0.7, ge=0.0, le=1.0)
    default_max_tokens: int = Field(default=4000, gt=0)
    logging_enabled: bool = Field(
        default=False, description="Log request/response metadata"
    )
    retry_attempts: int = Field(
        default=2, ge=0, le=10, description="Additional attempts after the first"
    )
    retry_delay: float = Field(
        default=1.0, ge=0, le=60, description="Delay between attempts in seconds"
    )
    retry_backoff: float = Field(
        default=1.0,
        ge=1.0,
        le=10.0,
        description="Delay multiplier per attempt; 1.0 keeps the delay fixed",
    )
    retry_jitter: bool = Field(default=False, description="Randomize retry delays")
    max_retry_delay: float = Field(
        default=30.0, gt=0, le=300, description="Upper bound for any single wait"
    )
    http_referer: Optional[str] = Field(default="https://vibe-travels.com")
    app_title: Optional[str] = Field(default="VibeTravels")
    allow_insecure: bool = Field(
        default=False, description="Permit a plain-HTTP base URL (local development)"
    )

    @field_validator("api_key")
    @classmethod
    def validate_api_key(cls, value: SecretStr) -> SecretStr:
        """Reject empty or whitespace-only keys."""
        if not value.get_secret_value().strip():
            raise ValueError("OpenRouter API key is required")
        return value

    @field_validator("base_url")
    @classmethod
    def strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @model_validator(mode="after")
    def validate_base_url(self) -> "ServiceConfig":
        """Require HTTPS unless insecure URLs are explicitly allowed."""
        if not self.base_url.startswith(("https://", "http://")):
            raise ValueError(f"base_url must be an HTTP(S) URL, got {self.base_url!r}")
        if self.base_url.startswith("http://") and not self.allow_insecure:
            raise ValueError(
                "base_url must use HTTPS. "
                "Suggestion: set allow_insecure=True for local development only"
            )
        if self.max_retry_delay < self.retry_delay:
            raise ValueError(
                f"max_retry_delay ({self.max_retry_delay}) must be >= "
                f"retry_delay ({self.retry_delay})"
            )
        return self

    @classmethod
    def from_env(
        cls, environ: Optional[Mapping[str, str]] = None, **overrides
    ) -> "ServiceConfig":
        """Build configuration from ``OPENROUTER_*`` environment variables.

        Args:
            environ: Mapping to read from (defaults to ``os.environ``)
            **overrides: Field values that take precedence over the environment

        Returns:
            Validated configuration

        Raises:
            pydantic.ValidationError: If the key is missing or a value is invalid
        """
        environ = os.environ if environ is None else environ
        values = {
            field: environ[var]
            for var, field in ENVIRONMENT_FIELDS.items()
            if environ.get(var) not in (None, "")
        }
        values.update(overrides)
        return cls(**values)

    def safe_dump(self) -> dict:
        """Dump for display or logging, with the key masked."""
        data = self.model_dump()
        data["api_key"] = "***"
        return data


class GenerationConfig(BaseModel):
    """Settings for itinerary generation."""

    use_mock_ai: bool = Field(
        default=True, description="Use the offline mock generator instead of the API"
    )
    mock_delay: float = Field(
        default=0.5, ge=0, le=10, description="Simulated latency for the mock"
    )
    plan_limit: int = Field(
        default=10, ge=1, description="Generations allowed per user per window"
    )
    plan_window: float = Field(
        default=3600.0, gt=0, description="Rate limit window in seconds"
    )


class AppConfig(BaseModel):
    """Top-level application configuration."""

    openrouter: Optional[ServiceConfig] = None
    generation: GenerationConfig = Field(default_factory=GenerationConfig)

    @model_validator(mode="after")
    def validate_live_mode(self) -> "AppConfig":
        """Live generation needs adapter configuration."""
        if not self.generation.use_mock_ai and self.openrouter is None:
            raise ValueError(
                "An 'openrouter' section (or OPENROUTER_API_KEY) is required "
                "when use_mock_ai is false"
            )
        return self
