"""Pydantic configuration models with env var support.

Configuration Hierarchy (highest to lowest precedence):
1. Direct kwargs to load_config()
2. Environment variables (MODELKIT__SECTION__KEY)
3. Project YAML (./modelkit.yaml or an explicit path)
4. Global YAML (~/.config/modelkit/config.yaml)
5. Built-in defaults (this file)

Examples:
    MODELKIT__DATABASE__URL=postgresql+asyncpg://app:secret@db/app
    MODELKIT__LOGGING__LEVEL=DEBUG
    MODELKIT__MODEL__STRICT_MODE=true
"""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class LogOutputConfig(BaseModel):
    """Single logging output configuration.

    Env vars: Not directly configurable via env (use YAML for multi-output).
    """

    format: Literal["json", "console"] = "console"
    destination: str = "stderr"  # stderr, stdout, or absolute file path
    level: LogLevel | None = None  # Inherits from parent if None

    @field_validator("destination")
    @classmethod
    def validate_destination(cls, v: str) -> str:
        if v in ("stderr", "stdout"):
            return v
        path = Path(v).expanduser()
        if not path.is_absolute():
            raise ValueError(f"File destination must be absolute path: {v}")
        return str(path)


class LoggingConfig(BaseModel):
    """Logging configuration.

    Env vars:
        MODELKIT__LOGGING__LEVEL: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """

    level: LogLevel = Field(
        default="INFO",
        description="Root log level. DEBUG logs every generated query.",
    )
    outputs: list[LogOutputConfig] = Field(default_factory=lambda: [LogOutputConfig()])


class DatabaseConfig(BaseModel):
    """Relational store connection.

    Env vars:
        MODELKIT__DATABASE__URL: SQLAlchemy async URL
        MODELKIT__DATABASE__ECHO: Echo generated SQL through sqlalchemy.engine
        MODELKIT__DATABASE__POOL_PRE_PING: Test connections before use
    """

    url: str = Field(
        default="sqlite+aiosqlite:///modelkit.db",
        description="SQLAlchemy URL with an async driver "
        "(postgresql+asyncpg://..., sqlite+aiosqlite:///...).",
    )
    echo: bool = Field(
        default=False,
        description="Echo SQL statements. Very verbose.",
    )
    pool_pre_ping: bool = Field(
        default=True,
        description="Check pooled connections before handing them out.",
    )

    @field_validator("url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        if "://" not in v:
            raise ValueError(f"Not a database URL: {v}")
        return v


class CacheConfig(BaseModel):
    """Metadata cache configuration.

    Env vars:
        MODELKIT__CACHE__NAMESPACE: Cache namespace for model metadata
        MODELKIT__CACHE__TTL_SEC: Expire cached metadata after this many seconds
    """

    namespace: str = Field(
        default="model",
        description="Namespace under which resolved metadata is stored.",
    )
    ttl_sec: float | None = Field(
        default=None,
        description="Expiry for the in-memory store. None keeps entries for the process lifetime.",
    )

    @field_validator("ttl_sec")
    @classmethod
    def validate_ttl(cls, v: float | None) -> float | None:
        if v is not None and v <= 0:
            raise ValueError(f"ttl_sec must be positive, got {v}")
        return v


class ModelConfig(BaseModel):
    """Model handle defaults.

    Env vars:
        MODELKIT__MODEL__STRICT_MODE: Pass payload keys through without field translation
    """

    strict_mode: bool = Field(
        default=False,
        description="Disable logical-to-physical field translation for new model handles.",
    )


class ModelKitConfig(BaseModel):
    """Root configuration for ModelKit."""

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)
    model: ModelConfig = Field(default_factory=ModelConfig)
