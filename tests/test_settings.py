"""
Unit Tests for Application Settings Configuration

Tests for:
- Default values of every settings group
- Loading nested settings from environment variables
- Custom validators (store URL, log level, retry window)
- Conversion of event settings into event defaults
- Settings caching and clearing
"""

import pytest
from pydantic import SecretStr, ValidationError

from event_playlist.config.settings import (
    AISettings,
    EventSettings,
    ProviderSettings,
    SchedulerSettings,
    Settings,
    StoreSettings,
    clear_settings_cache,
    get_settings,
)
from event_playlist.domain.event.factories import EventDefaults

# =============================================================================
# StoreSettings Tests
# =============================================================================


class TestStoreSettings:
    """Unit tests for StoreSettings configuration."""

    def test_create_with_defaults(self):
        store = StoreSettings()

        assert store.url == "sqlite:///data/playlist.db"
        assert store.busy_timeout_ms == 5000
        assert store.connection_timeout_s == 10

    def test_accepts_legacy_alias(self):
        store = StoreSettings(datagrid_url="sqlite:///grid.db")

        assert store.url == "sqlite:///grid.db"

    def test_invalid_url_scheme_raises_error(self):
        with pytest.raises(ValidationError):
            StoreSettings(url="redis://localhost:6379")

    def test_busy_timeout_bounds(self):
        with pytest.raises(ValidationError, match="greater than or equal to 1000"):
            StoreSettings(busy_timeout_ms=10)

    def test_frozen(self):
        store = StoreSettings()

        with pytest.raises(ValidationError):
            store.url = "sqlite:///other.db"


# =============================================================================
# ProviderSettings / SchedulerSettings Tests
# =============================================================================


class TestProviderSettings:
    def test_defaults(self):
        provider = ProviderSettings()

        assert provider.play_retries == 1
        assert provider.max_play_errors == 3
        assert provider.escalation_failure_ratio == 0.5
        assert provider.retry_min_ms <= provider.retry_max_ms

    def test_retry_window_must_be_ordered(self):
        with pytest.raises(ValidationError, match="retry_max_ms"):
            ProviderSettings(retry_min_ms=3000, retry_max_ms=1000)

    def test_escalation_ratio_bounds(self):
        with pytest.raises(ValidationError):
            ProviderSettings(escalation_failure_ratio=0)


class TestSchedulerSettings:
    def test_defaults(self):
        scheduler = SchedulerSettings()

        assert scheduler.enabled is True
        assert scheduler.poll_interval_ms == 10000
        assert scheduler.batch_size == 10

    def test_accepts_internal_poll_interval_alias(self):
        assert SchedulerSettings(internal_poll_interval=2500).poll_interval_ms == 2500


# =============================================================================
# EventSettings Tests
# =============================================================================


class TestEventSettings:
    def test_to_defaults(self):
        events = EventSettings(
            event_url="party.example",
            demo_autoskip_seconds=20,
            mockup_no_actual_playing=True,
            pause_on_play_error=False,
        )

        defaults = events.to_defaults()

        assert isinstance(defaults, EventDefaults)
        assert defaults.event_url == "party.example"
        assert defaults.demo_autoskip_seconds == 20
        assert defaults.demo_no_actual_playing is True
        assert defaults.pause_on_play_error is False

    def test_percentage_bounds(self):
        with pytest.raises(ValidationError):
            EventSettings(progress_percentage_required=101)

    def test_test_event_id_required(self):
        with pytest.raises(ValidationError):
            EventSettings(test_event_id="")


class TestAISettings:
    def test_api_key_is_secret(self):
        ai = AISettings(openai_api_key="sk-test")

        assert isinstance(ai.api_key, SecretStr)
        assert ai.api_key.get_secret_value() == "sk-test"
        assert "sk-test" not in repr(ai)

    def test_retry_defaults(self):
        ai = AISettings()

        assert ai.timeout_s == 10.0
        assert ai.max_attempts == 2


# =============================================================================
# Settings Tests
# =============================================================================


class TestSettings:
    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("LOG_LEVEL", raising=False)
        settings = Settings(_env_file=None)

        assert settings.environment == "development"
        assert settings.log_level == "INFO"
        assert settings.server.port == 8082
        assert settings.server.api_prefix == "/api/service-playlist/v1"
        assert settings.events.test_event_id == "demo"

    def test_nested_env_vars(self, monkeypatch):
        monkeypatch.setenv("STORE__URL", "sqlite:///env.db")
        monkeypatch.setenv("SERVER__PORT", "9000")
        monkeypatch.setenv("SCHEDULER__ENABLED", "false")
        monkeypatch.setenv("EVENTS__TEST_EVENT_ID", "launch")

        settings = Settings(_env_file=None)

        assert settings.store.url == "sqlite:///env.db"
        assert settings.server.port == 9000
        assert settings.scheduler.enabled is False
        assert settings.events.test_event_id == "launch"

    def test_invalid_nested_env_var(self, monkeypatch):
        monkeypatch.setenv("STORE__URL", "postgres://nope")

        with pytest.raises(ValidationError):
            Settings(_env_file=None)

    def test_log_level_normalized(self):
        assert Settings(_env_file=None, log_level="debug").log_level == "DEBUG"

    def test_invalid_log_level(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, log_level="LOUD")

    def test_invalid_environment(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, environment="staging")


class TestSettingsCache:
    def test_get_settings_is_cached(self):
        clear_settings_cache()
        try:
            assert get_settings() is get_settings()
        finally:
            clear_settings_cache()

    def test_clear_settings_cache(self, monkeypatch):
        clear_settings_cache()
        try:
            first = get_settings()
            monkeypatch.setenv("SERVER__PORT", "9100")
            clear_settings_cache()

            second = get_settings()

            assert second is not first
            assert second.server.port == 9100
        finally:
            clear_settings_cache()
