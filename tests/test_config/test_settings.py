"""Tests for configuration settings."""

import os
from pathlib import Path

import pytest
from pydantic import ValidationError

from system_pulse.config import (
    AppConfig,
    Environment,
    get_environment,
    get_settings,
    reset_settings,
)
from system_pulse.config.env_loader import load_env_files


class TestEnvironmentDetection:
    """Test environment detection."""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("production", Environment.PRODUCTION),
            ("prod", Environment.PRODUCTION),
            ("staging", Environment.STAGING),
            ("stage", Environment.STAGING),
            ("test", Environment.TEST),
            ("anything-else", Environment.DEVELOPMENT),
        ],
    )
    def test_app_env_values(
        self, monkeypatch: pytest.MonkeyPatch, value: str, expected: Environment
    ) -> None:
        monkeypatch.setenv("APP_ENV", value)
        assert get_environment() == expected

    def test_default_is_development(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("APP_ENV", raising=False)
        assert get_environment() == Environment.DEVELOPMENT


class TestAppConfig:
    """Test AppConfig class."""

    def test_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test AppConfig code defaults (isolated from the environment)."""
        for name in (
            "PULSE_LOG_LEVEL",
            "PULSE_LOG_FORMAT",
            "PULSE_AUTH_TOKEN",
            "PULSE_SERVICE_PORT",
            "APP_ENV",
        ):
            monkeypatch.delenv(name, raising=False)

        config = AppConfig()

        assert config.environment == Environment.DEVELOPMENT
        assert config.project_name == "System Pulse"
        assert config.log_level == "INFO"
        assert config.log_format == "console"
        assert config.service_host == "0.0.0.0"
        assert config.service_port == 3001
        assert config.auth_token is None
        assert config.enable_cors is False
        assert config.host_ttl_seconds == 5.0
        assert config.memory_ttl_seconds == 1.0
        assert config.cpu_ttl_seconds == 5.0
        assert config.disk_ttl_seconds == 30.0
        assert config.network_ttl_seconds == 2.0
        assert config.android_ttl_seconds == 5.0
        assert config.command_timeout_seconds == 5.0
        assert config.getprop_timeout_seconds == 2.0
        assert config.log_dir.is_absolute()

    def test_from_env_vars(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test AppConfig reads PULSE_ prefixed variables."""
        monkeypatch.setenv("PULSE_DEBUG", "1")
        monkeypatch.setenv("PULSE_LOG_LEVEL", "debug")
        monkeypatch.setenv("PULSE_DISK_TTL_SECONDS", "60")
        monkeypatch.setenv("PULSE_AUTH_TOKEN", "s3cret")

        config = AppConfig()

        assert config.debug is True
        assert config.log_level == "DEBUG"
        assert config.disk_ttl_seconds == 60.0
        assert config.auth_token == "s3cret"

    def test_blank_auth_token_disables_auth(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("PULSE_AUTH_TOKEN", "   ")
        assert AppConfig().auth_token is None

    def test_invalid_log_level(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("PULSE_LOG_LEVEL", "LOUD")
        with pytest.raises(ValidationError):
            AppConfig()

    def test_invalid_port(self) -> None:
        with pytest.raises(ValidationError):
            AppConfig(service_port=0)

    def test_negative_ttl_rejected(self) -> None:
        with pytest.raises(ValidationError):
            AppConfig(cpu_ttl_seconds=-1)


class TestSettingsSingleton:
    def test_get_settings_is_cached(self) -> None:
        assert get_settings() is get_settings()

    def test_reset_reloads(self, monkeypatch: pytest.MonkeyPatch) -> None:
        first = get_settings()
        monkeypatch.setenv("PULSE_SERVICE_PORT", "4100")
        reset_settings()

        second = get_settings()

        assert second is not first
        assert second.service_port == 4100


class TestEnvFiles:
    """Test .env file loading priority."""

    def test_environment_file_beats_base_file(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("APP_ENV", "test")
        (tmp_path / ".env").write_text("PULSE_ENV_FILE_PROBE=base\n", encoding="utf-8")
        (tmp_path / ".env.test").write_text("PULSE_ENV_FILE_PROBE=test\n", encoding="utf-8")

        try:
            loaded = load_env_files(tmp_path)
            assert loaded == [".env.test", ".env"]
            assert os.environ["PULSE_ENV_FILE_PROBE"] == "test"
        finally:
            os.environ.pop("PULSE_ENV_FILE_PROBE", None)

    def test_explicit_env_var_wins(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("PULSE_ENV_FILE_PROBE", "explicit")
        (tmp_path / ".env").write_text("PULSE_ENV_FILE_PROBE=file\n", encoding="utf-8")

        load_env_files(tmp_path)

        assert os.environ["PULSE_ENV_FILE_PROBE"] == "explicit"

    def test_no_files(self, tmp_path: Path) -> None:
        assert load_env_files(tmp_path) == []
