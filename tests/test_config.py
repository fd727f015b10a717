"""Tests for gate configuration."""

from datetime import timedelta

import pytest

from fingerprint_gate.config import GateConfig, database_url
from fingerprint_gate.errors import ConfigurationError


class TestGateConfigDefaults:
    """Tests for default values."""

    def test_defaults(self, monkeypatch):
        """Unset variables fall back to defaults."""
        monkeypatch.delenv("FINGERPRINT_GATE_THRESHOLD", raising=False)
        monkeypatch.delenv("FINGERPRINT_GATE_STORE_TIMEOUT_SECONDS", raising=False)
        monkeypatch.delenv("FINGERPRINT_GATE_WINDOW_HOURS", raising=False)

        config = GateConfig.from_env()

        assert config.threshold == 3
        assert config.store_timeout_seconds == 2.0
        assert config.window_hours is None
        assert config.window is None

    def test_blank_values_use_defaults(self, monkeypatch):
        """Blank variables are treated as unset."""
        monkeypatch.setenv("FINGERPRINT_GATE_THRESHOLD", "  ")

        assert GateConfig.from_env().threshold == 3


class TestGateConfigFromEnv:
    """Tests for loading overrides."""

    def test_threshold_override(self, monkeypatch):
        """Threshold is overridable per deployment."""
        monkeypatch.setenv("FINGERPRINT_GATE_THRESHOLD", "5")

        assert GateConfig.from_env().threshold == 5

    def test_timeout_and_window(self, monkeypatch):
        """Timeout and window parse as floats."""
        monkeypatch.setenv("FINGERPRINT_GATE_STORE_TIMEOUT_SECONDS", "0.5")
        monkeypatch.setenv("FINGERPRINT_GATE_WINDOW_HOURS", "24")

        config = GateConfig.from_env()

        assert config.store_timeout_seconds == 0.5
        assert config.window == timedelta(hours=24)

    def test_non_numeric_threshold(self, monkeypatch):
        """Non-numeric values name the variable in the error."""
        monkeypatch.setenv("FINGERPRINT_GATE_THRESHOLD", "three")

        with pytest.raises(ConfigurationError, match="FINGERPRINT_GATE_THRESHOLD"):
            GateConfig.from_env()

    def test_zero_threshold_rejected(self, monkeypatch):
        """Threshold must be at least 1."""
        monkeypatch.setenv("FINGERPRINT_GATE_THRESHOLD", "0")

        with pytest.raises(ConfigurationError, match="at least 1"):
            GateConfig.from_env()


class TestGateConfigValidation:
    """Tests for direct construction."""

    def test_zero_timeout_rejected(self):
        """Timeout must be positive."""
        with pytest.raises(ConfigurationError):
            GateConfig(store_timeout_seconds=0)

    def test_negative_window_rejected(self):
        """Window must be positive when set."""
        with pytest.raises(ConfigurationError):
            GateConfig(window_hours=-1)


class TestDatabaseUrl:
    """Tests for DATABASE_URL handling."""

    def test_sqlite_rewritten_to_aiosqlite(self, monkeypatch):
        """Plain SQLite URLs use the async driver."""
        monkeypatch.setenv("DATABASE_URL", "sqlite:///./gate.db")

        assert database_url() == "sqlite+aiosqlite:///./gate.db"

    def test_postgres_unchanged(self, monkeypatch):
        """Async PostgreSQL URLs pass through."""
        url = "postgresql+asyncpg://user:pw@db:5432/gate"
        monkeypatch.setenv("DATABASE_URL", url)

        assert database_url() == url
