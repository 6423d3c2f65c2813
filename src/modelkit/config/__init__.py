"""Config module exports."""

from modelkit.config.loader import load_config
from modelkit.config.models import (
    CacheConfig,
    DatabaseConfig,
    LoggingConfig,
    LogOutputConfig,
    ModelConfig,
    ModelKitConfig,
)

__all__ = [
    "load_config",
    "CacheConfig",
    "DatabaseConfig",
    "LoggingConfig",
    "LogOutputConfig",
    "ModelConfig",
    "ModelKitConfig",
]
