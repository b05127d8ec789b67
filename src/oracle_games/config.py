"""
config.py

PURPOSE: Configuration loading and settings management.
DEPENDENCIES: pydantic, pydantic-settings

ARCHITECTURE NOTES:
Configuration comes from multiple sources (in priority order):
1. CLI flags (highest priority)
2. Environment variables (ORACLE_GAMES_*, plus ANTHROPIC_API_KEY)
3. Defaults (lowest priority)
"""

import os
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings


class LLMSettings(BaseSettings):
    """Settings for the LLM backend."""

    model: str = Field(
        default="claude-sonnet-4-20250514",
        description="Model name/ID",
    )
    temperature: float = Field(
        default=0.7,
        ge=0.0,
        le=2.0,
        description="Sampling temperature for narration",
    )
    max_tokens: int = Field(
        default=2048,
        gt=0,
        description="Maximum tokens in response",
    )
    timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Upper bound on a single oracle round-trip",
    )
    anthropic_api_key: str = Field(
        default="",
        description="Anthropic API key (or set ANTHROPIC_API_KEY env var)",
    )

    model_config = {"env_prefix": "ORACLE_GAMES_LLM_"}


class RetrySettings(BaseSettings):
    """Backoff policy for transient oracle failures."""

    max_retries: int = Field(default=3, ge=0, description="Retries after the first attempt")
    initial_delay: float = Field(default=1.0, ge=0.0, description="First delay in seconds")
    max_delay: float = Field(default=20.0, ge=0.0, description="Cap on a single delay")
    exponential_base: float = Field(default=2.0, ge=1.0)
    jitter_factor: float = Field(default=0.1, ge=0.0, le=1.0)

    model_config = {"env_prefix": "ORACLE_GAMES_RETRY_"}


class OpenTelemetrySettings(BaseSettings):
    """Settings for optional OpenTelemetry tracing."""

    enabled: bool = Field(default=False, description="Enable tracing")
    service_name: str = Field(default="oracle-games")
    endpoint: str = Field(
        default="",
        description="OTLP gRPC endpoint; console export only when empty",
    )

    model_config = {"env_prefix": "ORACLE_GAMES_OTEL_"}


class Settings(BaseSettings):
    """Main application settings."""

    data_dir: Path = Field(
        default_factory=lambda: Path.home() / ".oracle-games",
        description="Directory for save files",
    )
    log_level: str = Field(
        default="WARNING",
        description="Logging level",
    )
    debug: bool = Field(
        default=False,
        description="Enable debug output",
    )
    max_questions: int = Field(
        default=20,
        gt=0,
        description="Question budget for a 20 Questions session",
    )
    exhaustion_policy: Literal["forced_guess", "auto_loss"] = Field(
        default="forced_guess",
        description="What happens when the question budget runs out",
    )
    llm: LLMSettings = Field(default_factory=LLMSettings)
    retry: RetrySettings = Field(default_factory=RetrySettings)
    otel: OpenTelemetrySettings = Field(default_factory=OpenTelemetrySettings)

    model_config = {"env_prefix": "ORACLE_GAMES_"}

    def saves_dir(self) -> Path:
        """Get the save slot directory, creating it if needed."""
        saves = self.data_dir / "saves"
        saves.mkdir(parents=True, exist_ok=True)
        return saves


def get_settings() -> Settings:
    """Get application settings, loading from environment."""
    # The standard Anthropic variable wins over an unset prefixed one
    llm_settings = LLMSettings()
    if not llm_settings.anthropic_api_key:
        llm_settings.anthropic_api_key = os.environ.get("ANTHROPIC_API_KEY", "")

    return Settings(llm=llm_settings)
