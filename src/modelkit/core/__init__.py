"""Core module exports."""

from modelkit.core.errors import (
    ConfigError,
    ErrorCode,
    FilterError,
    MetadataError,
    ModelKitError,
    MutationError,
)
from modelkit.core.logging import configure_logging, get_logger

__all__ = [
    # Errors
    "ConfigError",
    "ErrorCode",
    "FilterError",
    "MetadataError",
    "ModelKitError",
    "MutationError",
    # Logging
    "configure_logging",
    "get_logger",
]
