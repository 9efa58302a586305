"""Configuration management for slack-vault."""

from __future__ import annotations

import json
from functools import lru_cache
from pathlib import Path
from typing import Annotated, Literal
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from slack_vault.constants import (
    DEFAULT_REQUEST_TIMEOUT,
    DEFAULT_SUMMARY_MAX_TOKENS,
    DEFAULT_SUMMARY_TEMPERATURE,
)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Slack
    slack_token: SecretStr | None = Field(
        default=None, description="Slack bot token (xoxb-...)"
    )
    channels: Annotated[
        list[str],
        NoDecode,
        Field(default_factory=list, description="Channel ids to sync"),
    ]

    # Output
    output_dir: Path = Field(default=Path("Slack"), description="Vault folder for documents")
    state_path: Path = Field(
        default=Path(".slack-vault/state.json"),
        description="JSON file holding per-channel watermarks",
    )
    write_mode: Literal["thread", "channel"] = Field(
        default="thread",
        description="thread: one overwritten file per root message; "
        "channel: one appended file per channel batch",
    )
    timezone: str = Field(default="UTC", description="IANA zone for rendered times")

    # Summaries
    summary_enabled: bool = Field(default=False, description="Generate AI summaries")
    ai_provider: Literal["openai", "anthropic", "gemini"] = Field(
        default="openai", description="Text-generation backend"
    )
    openai_api_key: SecretStr | None = Field(default=None, description="OpenAI API key")
    anthropic_api_key: SecretStr | None = Field(default=None, description="Anthropic API key")
    gemini_api_key: SecretStr | None = Field(default=None, description="Gemini API key")
    openai_model: str = Field(default="gpt-4o-mini", description="OpenAI chat model")
    anthropic_model: str = Field(
        default="claude-3-5-haiku-20241022", description="Anthropic model"
    )
    gemini_model: str = Field(default="gemini-2.5-flash", description="Gemini model")
    summary_max_tokens: int = Field(default=DEFAULT_SUMMARY_MAX_TOKENS, gt=0)
    summary_temperature: float = Field(default=DEFAULT_SUMMARY_TEMPERATURE, ge=0.0, le=2.0)

    # Run control
    request_timeout: float = Field(
        default=DEFAULT_REQUEST_TIMEOUT, gt=0, description="Per-request timeout in seconds"
    )
    run_timeout: float | None = Field(
        default=None, gt=0, description="Deadline for a whole sync run in seconds"
    )
    fail_fast: bool = Field(
        default=False, description="Stop the batch at the first failing channel"
    )

    # Application
    environment: str = Field(default="production", description="Environment name")
    log_level: str = Field(default="INFO", description="Logging level")
    log_to_file: bool = Field(default=False, description="Also write JSON logs to a file")
    log_directory: str = Field(default="logs", description="Directory for log files")
    log_file_max_bytes: int = Field(default=10 * 1024 * 1024, gt=0)
    log_file_backup_count: int = Field(default=5, ge=0)

    @field_validator("channels", mode="before")
    @classmethod
    def _split_channels(cls, value: object) -> object:
        if isinstance(value, str):
            if value.strip().startswith("["):
                return json.loads(value)
            return [part.strip() for part in value.split(",") if part.strip()]
        return value

    @field_validator("timezone")
    @classmethod
    def _check_timezone(cls, value: str) -> str:
        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ValueError(f"unknown timezone: {value}") from exc
        return value

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.environment.lower() == "development"

    @property
    def tzinfo(self) -> ZoneInfo:
        """Zone used when rendering message times and dates."""
        return ZoneInfo(self.timezone)

    @property
    def log_file_path(self) -> str:
        """Get the full path of the rotating log file."""
        return str(Path(self.log_directory) / "slack_vault.log")


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
