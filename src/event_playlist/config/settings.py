"""Application Settings and Configuration

Pydantic-based settings management using environment variables.
Settings are loaded from environment variables with support for .env files,
type validation, and sensible defaults. All settings are frozen and immutable
after initialization.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import AliasChoices, BaseModel, Field, SecretStr, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..domain.event.factories import EventDefaults
from ..domain.shared.messages import ErrorMessages


class StoreSettings(BaseModel):
    """Persistent store configuration."""

    model_config = SettingsConfigDict(frozen=True, populate_by_name=True)

    url: str = Field(
        default="sqlite:///data/playlist.db",
        validation_alias=AliasChoices("url", "store_url", "datagrid_url"),
    )
    busy_timeout_ms: int = Field(
        default=5000,
        ge=1000,
        le=30000,
        validation_alias=AliasChoices("busy_timeout_ms", "busy_timeout"),
    )
    connection_timeout_s: int = Field(
        default=10,
        ge=1,
        le=60,
        validation_alias=AliasChoices("connection_timeout_s", "connection_timeout"),
    )

    @field_validator("url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        """Validate store URL format."""
        if not v.startswith("sqlite://"):
            raise ValueError(ErrorMessages.INVALID_STORE_URL)
        return v


class ServerSettings(BaseModel):
    """HTTP server configuration."""

    model_config = SettingsConfigDict(frozen=True, populate_by_name=True)

    host: str = "0.0.0.0"
    port: int = Field(default=8082, ge=1, le=65535)
    api_prefix: str = "/api/service-playlist/v1"
    compress_result: bool = True


class ProviderSettings(BaseModel):
    """Playback provider client and fan-out policy."""

    model_config = SettingsConfigDict(frozen=True, populate_by_name=True)

    url: str = Field(
        default="http://localhost:8081/api/provider-spotify/v1/",
        validation_alias=AliasChoices("url", "provider_url", "spotify_provider_url"),
    )
    timeout_s: float = Field(default=10.0, gt=0)
    play_retries: int = Field(default=1, ge=0, le=10)
    retry_min_ms: int = Field(default=1500, ge=0)
    retry_max_ms: int = Field(default=2500, ge=0)
    max_play_errors: int = Field(default=3, ge=1)
    escalation_failure_ratio: float = Field(default=0.5, gt=0.0, le=1.0)

    @model_validator(mode="after")
    def validate_retry_window(self) -> ProviderSettings:
        if self.retry_max_ms < self.retry_min_ms:
            raise ValueError("retry_max_ms must not be below retry_min_ms")
        return self


class SchedulerSettings(BaseModel):
    """Periodic event sweep configuration."""

    model_config = SettingsConfigDict(frozen=True, populate_by_name=True)

    enabled: bool = True
    poll_interval_ms: int = Field(
        default=10000,
        ge=100,
        validation_alias=AliasChoices("poll_interval_ms", "internal_poll_interval"),
    )
    batch_size: int = Field(default=10, ge=1, le=1000)


class EventSettings(BaseModel):
    """Defaults applied to every new event."""

    model_config = SettingsConfigDict(frozen=True, populate_by_name=True)

    event_url: str = "localhost:8080"
    autofill_empty_playlist: bool = True
    is_playing: bool = True
    progress_percentage_required: int = Field(default=75, ge=0, le=100)
    allow_duplicate_tracks: bool = False
    demo_autoskip_seconds: int = Field(
        default=0,
        ge=0,
        validation_alias=AliasChoices("demo_autoskip_seconds", "mockup_autoskip_seconds"),
    )
    demo_no_actual_playing: bool = Field(
        default=False,
        validation_alias=AliasChoices("demo_no_actual_playing", "mockup_no_actual_playing"),
    )
    pause_on_play_error: bool = True
    test_event_create: bool = True
    test_event_id: str = Field(default="demo", min_length=1)

    def to_defaults(self) -> EventDefaults:
        return EventDefaults(
            event_url=self.event_url,
            autofill_empty_playlist=self.autofill_empty_playlist,
            is_playing=self.is_playing,
            progress_percentage_required=self.progress_percentage_required,
            allow_duplicate_tracks=self.allow_duplicate_tracks,
            demo_autoskip_seconds=self.demo_autoskip_seconds,
            demo_no_actual_playing=self.demo_no_actual_playing,
            pause_on_play_error=self.pause_on_play_error,
        )


class AISettings(BaseModel):
    """AI/OpenAI configuration."""

    model_config = SettingsConfigDict(frozen=True, populate_by_name=True)

    api_key: SecretStr = Field(
        default=SecretStr(""),
        validation_alias=AliasChoices("api_key", "openai_api_key", "openai_key"),
    )
    model: str = Field(
        default="gpt-4o-mini", validation_alias=AliasChoices("model", "ai_model", "openai_model")
    )
    max_tokens: int = Field(default=100, ge=1, le=4096)
    temperature: float = Field(default=0.2, ge=0.0, le=2.0)
    timeout_s: float = Field(default=10.0, gt=0)
    max_attempts: int = Field(default=2, ge=1, le=5)


class ActivitySettings(BaseModel):
    """Activity broadcast configuration."""

    model_config = SettingsConfigDict(frozen=True, populate_by_name=True)

    url: str = Field(default="", validation_alias=AliasChoices("url", "activity_url"))
    timeout_s: float = Field(default=5.0, gt=0)


class Settings(BaseSettings):
    """Application settings container.

    Automatically loads configuration from environment variables.

    Environment variable naming:
    - ENVIRONMENT, DEBUG, LOG_LEVEL (top-level)
    - STORE__URL, SERVER__PORT, PROVIDER__URL, etc. (nested with ``__``)
    - EVENTS__TEST_EVENT_CREATE, SCHEDULER__POLL_INTERVAL_MS, ...
    - AI__API_KEY for the OpenAI curator
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    environment: Literal["development", "production", "test"] = "development"
    debug: bool = False
    log_level: str = "INFO"

    store: StoreSettings = Field(default_factory=StoreSettings)
    server: ServerSettings = Field(default_factory=ServerSettings)
    provider: ProviderSettings = Field(default_factory=ProviderSettings)
    scheduler: SchedulerSettings = Field(default_factory=SchedulerSettings)
    events: EventSettings = Field(default_factory=EventSettings)
    ai: AISettings = Field(default_factory=AISettings)
    activity: ActivitySettings = Field(default_factory=ActivitySettings)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(ErrorMessages.INVALID_LOG_LEVEL.format(level=v, valid_levels=valid_levels))
        return v_upper


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached application settings.

    Settings are automatically loaded from:
    1. .env file (if present)
    2. Environment variables
    3. Default values
    """
    return Settings()


def clear_settings_cache() -> None:
    """Clear the settings cache (useful for testing)."""
    get_settings.cache_clear()
