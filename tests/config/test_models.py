"""Tests for config/models.py module."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from modelkit.config.models import (
    CacheConfig,
    DatabaseConfig,
    LoggingConfig,
    LogOutputConfig,
    ModelConfig,
    ModelKitConfig,
)


class TestLogOutputConfig:
    """Tests for LogOutputConfig model."""

    def test_defaults(self) -> None:
        config = LogOutputConfig()
        assert config.format == "console"
        assert config.destination == "stderr"
        assert config.level is None

    def test_absolute_path_destination(self) -> None:
        config = LogOutputConfig(destination="/var/log/modelkit.log")
        assert config.destination == "/var/log/modelkit.log"

    def test_relative_path_fails(self) -> None:
        with pytest.raises(ValidationError, match="absolute path"):
            LogOutputConfig(destination="logs/app.log")


class TestLoggingConfig:
    def test_defaults(self) -> None:
        config = LoggingConfig()
        assert config.level == "INFO"
        assert len(config.outputs) == 1

    def test_invalid_level_fails(self) -> None:
        with pytest.raises(ValidationError):
            LoggingConfig(level="LOUD")  # type: ignore[arg-type]


class TestDatabaseConfig:
    """Tests for DatabaseConfig model."""

    def test_defaults(self) -> None:
        config = DatabaseConfig()
        assert config.url.startswith("sqlite+aiosqlite://")
        assert config.echo is False
        assert config.pool_pre_ping is True

    def test_postgres_url(self) -> None:
        config = DatabaseConfig(url="postgresql+asyncpg://app:secret@db:5432/app")
        assert config.url.startswith("postgresql+asyncpg")

    def test_url_without_scheme_fails(self) -> None:
        with pytest.raises(ValidationError, match="Not a database URL"):
            DatabaseConfig(url="localhost/app")


class TestCacheConfig:
    def test_defaults(self) -> None:
        config = CacheConfig()
        assert config.namespace == "model"
        assert config.ttl_sec is None

    @pytest.mark.parametrize("ttl", [0, -5])
    def test_non_positive_ttl_fails(self, ttl: float) -> None:
        with pytest.raises(ValidationError, match="positive"):
            CacheConfig(ttl_sec=ttl)


class TestModelKitConfig:
    """Tests for the root config."""

    def test_sections_default(self) -> None:
        config = ModelKitConfig()
        assert isinstance(config.database, DatabaseConfig)
        assert isinstance(config.model, ModelConfig)
        assert config.model.strict_mode is False

    def test_from_nested_dict(self) -> None:
        config = ModelKitConfig.model_validate(
            {"model": {"strict_mode": True}, "cache": {"ttl_sec": 60}}
        )
        assert config.model.strict_mode is True
        assert config.cache.ttl_sec == 60
