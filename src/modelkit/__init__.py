"""ModelKit - metadata-driven record access over relational tables."""

from modelkit.core.errors import (
    ErrorCode,
    FilterError,
    MetadataError,
    ModelKitError,
    MutationError,
)
from modelkit.db.executor import QueryExecutor, QueryResult, SqlAlchemyExecutor
from modelkit.model import (
    FilterPredicate,
    MemoryCacheStore,
    Model,
    ModelFactory,
    ModelMetadata,
    configure,
)

__version__ = "0.1.0"

__all__ = [
    "ErrorCode",
    "FilterError",
    "MetadataError",
    "ModelKitError",
    "MutationError",
    "QueryExecutor",
    "QueryResult",
    "SqlAlchemyExecutor",
    "FilterPredicate",
    "MemoryCacheStore",
    "Model",
    "ModelFactory",
    "ModelMetadata",
    "configure",
    "__version__",
]
