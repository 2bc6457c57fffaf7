"""Tests for configuration management."""

from __future__ import annotations

from pathlib import Path

import pytest

from dnd_ledger.core.config import (
    RulesSettings,
    Settings,
    StorageSettings,
    clear_settings_cache,
    get_settings,
)
from dnd_ledger.core.exceptions import ConfigurationError


class TestStorageSettings:
    """Tests for StorageSettings configuration."""

    def test_default_path(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test default database directory is created."""
        monkeypatch.chdir(tmp_path)

        settings = StorageSettings()

        assert settings.database_path == Path("data/dnd_ledger.db")
        assert (tmp_path / "data").exists()

    def test_custom_path(self, tmp_path: Path) -> None:
        """Test custom database path."""
        custom = tmp_path / "nested" / "custom.db"

        settings = StorageSettings(database_path=custom)

        assert settings.database_path == custom
        assert custom.parent.exists()

    def test_env_override(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test database path read from the environment."""
        target = tmp_path / "env" / "ledger.db"
        monkeypatch.setenv("DND_LEDGER_DATABASE_PATH", str(target))

        settings = StorageSettings()

        assert settings.database_path == target


class TestRulesSettings:
    """Tests for RulesSettings configuration."""

    def test_default_values(self) -> None:
        """Test default rules settings."""
        settings = RulesSettings()

        assert settings.default_ruleset == "srd52"
        assert settings.clamp_hit_points is True

    def test_env_override(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test rules settings read from the environment."""
        monkeypatch.setenv("DND_LEDGER_RULES_DEFAULT_RULESET", "srd51")
        monkeypatch.setenv("DND_LEDGER_RULES_CLAMP_HIT_POINTS", "false")

        settings = RulesSettings()

        assert settings.default_ruleset == "srd51"
        assert settings.clamp_hit_points is False

    def test_unknown_ruleset_rejected(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test that only known rulesets are accepted."""
        monkeypatch.setenv("DND_LEDGER_RULES_DEFAULT_RULESET", "homebrew")

        with pytest.raises(ValueError):
            RulesSettings()


class TestSettings:
    """Tests for main Settings configuration."""

    def test_default_settings(
        self,
        tmp_path: Path,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        """Test default settings initialization."""
        monkeypatch.chdir(tmp_path)

        settings = Settings()

        assert settings.app_name == "D&D 5E Character Ledger"
        assert settings.app_version == "0.1.0"
        assert settings.debug is False
        assert settings.log_level == "INFO"
        assert settings.json_logs is False

    def test_debug_mode(
        self,
        tmp_path: Path,
        monkeypatch: pytest.MonkeyPatch,
        mock_env_vars: dict[str, str],
    ) -> None:
        """Test debug mode setting."""
        monkeypatch.chdir(tmp_path)

        settings = Settings()

        assert settings.debug is True
        assert settings.log_level == "DEBUG"
        assert settings.is_production is False
        assert settings.rules.default_ruleset == "srd51"

    def test_is_production_property(
        self,
        tmp_path: Path,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        """Test is_production property."""
        monkeypatch.setenv("DND_LEDGER_DEBUG", "false")
        monkeypatch.chdir(tmp_path)

        settings = Settings()

        assert settings.is_production is True


class TestGetSettings:
    """Tests for get_settings singleton function."""

    def test_returns_settings_instance(
        self,
        tmp_path: Path,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        """Test that get_settings returns a Settings instance."""
        monkeypatch.chdir(tmp_path)
        clear_settings_cache()

        settings = get_settings()

        assert isinstance(settings, Settings)

    def test_caching(
        self,
        tmp_path: Path,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        """Test that settings are cached."""
        monkeypatch.chdir(tmp_path)

        settings1 = get_settings()
        settings2 = get_settings()

        assert settings1 is settings2

    def test_cache_clear(
        self,
        tmp_path: Path,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        """Test that cache can be cleared."""
        monkeypatch.chdir(tmp_path)

        settings1 = get_settings()
        clear_settings_cache()
        settings2 = get_settings()

        assert settings1 is not settings2

    def test_invalid_settings_raise_configuration_error(
        self,
        tmp_path: Path,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        """Test that invalid configuration is wrapped."""
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("DND_LEDGER_LOG_LEVEL", "LOUD")

        with pytest.raises(ConfigurationError):
            get_settings()
