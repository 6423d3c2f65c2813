"""ModelKit error types with typed error codes.

Error code ranges:
- 2xxx: Config
- 3xxx: Metadata
- 4xxx: Filter
- 5xxx: Mutation
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any


class ErrorCode(IntEnum):
    """Typed error codes for programmatic handling."""

    # Config (2xxx)
    CONFIG_PARSE_ERROR = 2001
    CONFIG_INVALID_VALUE = 2002
    CONFIG_FILE_NOT_FOUND = 2003

    # Metadata (3xxx)
    MODEL_NOT_FOUND = 3001
    MODEL_STORE_NOT_CONFIGURED = 3002

    # Filter (4xxx)
    INVALID_FILTER_SYNTAX = 4001

    # Mutation (5xxx)
    MULTIPLE_ROWS_AFFECTED = 5001
    NO_UPDATE_VALUES = 5002


# No slots: contextlib assigns __traceback__ when re-raising through a context manager
@dataclass(frozen=True)
class ModelKitError(Exception):
    """Base error with structured context."""

    code: ErrorCode
    message: str
    retryable: bool = False
    details: dict[str, Any] = field(default_factory=dict)

    @property
    def error_name(self) -> str:
        """String identifier for logging (e.g., 'MODEL_NOT_FOUND')."""
        return self.code.name

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON responses."""
        return {
            "code": self.code.value,
            "error": self.error_name,
            "message": self.message,
            "retryable": self.retryable,
            "details": self.details,
        }

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.error_name}: {self.message}"


class ConfigError(ModelKitError):
    """Configuration-related errors."""

    @classmethod
    def parse_error(cls, path: str, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_PARSE_ERROR,
            message=f"Failed to parse config at {path}: {reason}",
            details={"path": path, "reason": reason},
        )

    @classmethod
    def invalid_value(cls, field: str, value: Any, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_INVALID_VALUE,
            message=f"Invalid value for '{field}': {reason}",
            details={"field": field, "value": str(value), "reason": reason},
        )

    @classmethod
    def file_not_found(cls, path: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_FILE_NOT_FOUND,
            message=f"Config file not found: {path}",
            details={"path": path},
        )


class MetadataError(ModelKitError):
    """Model metadata lookup errors."""

    @classmethod
    def model_not_found(cls, model_name: str) -> "MetadataError":
        return cls(
            code=ErrorCode.MODEL_NOT_FOUND,
            message=f"Model not found: {model_name}",
            details={"model": model_name},
        )

    @classmethod
    def store_not_configured(cls, reason: str) -> "MetadataError":
        return cls(
            code=ErrorCode.MODEL_STORE_NOT_CONFIGURED,
            message="Model control tables are not configured. "
            "Create the MODELS and MODELS_DET tables on your database",
            details={"reason": reason},
        )


class FilterError(ModelKitError):
    """Malformed select filters."""

    @classmethod
    def invalid_syntax(cls, reason: str, value: Any = None) -> "FilterError":
        details: dict[str, Any] = {"reason": reason}
        if value is not None:
            details["value"] = repr(value)
        return cls(
            code=ErrorCode.INVALID_FILTER_SYNTAX,
            message=f"Invalid model filter: {reason}",
            details=details,
        )


class MutationError(ModelKitError):
    """Update/delete safety guard errors."""

    @classmethod
    def multiple_rows_affected(cls, table: str, row_count: int) -> "MutationError":
        return cls(
            code=ErrorCode.MULTIPLE_ROWS_AFFECTED,
            message=f"Mutation on '{table}' matched {row_count} rows; expected at most one",
            details={"table": table, "row_count": row_count},
        )


    @classmethod
    def no_update_values(cls, table: str, requested: list[str]) -> "MutationError":
        return cls(
            code=ErrorCode.NO_UPDATE_VALUES,
            message=f"Update on '{table}' has no known fields to set",
            details={"table": table, "requested": requested},
        )
