"""Metadata-driven model handles."""

from modelkit.model.cache import CacheStore, MemoryCacheStore, MetadataCache
from modelkit.model.filters import FilterPredicate, build_predicate, normalize_filters
from modelkit.model.metadata import (
    FieldDescriptor,
    MetadataResolver,
    ModelMetadata,
    Permissions,
    RawQuerySource,
    TableSource,
)
from modelkit.model.model import (
    InsertResult,
    Model,
    ModelFactory,
    MutationResult,
    SelectResult,
    configure,
)

__all__ = [
    "CacheStore",
    "MemoryCacheStore",
    "MetadataCache",
    "FilterPredicate",
    "build_predicate",
    "normalize_filters",
    "FieldDescriptor",
    "MetadataResolver",
    "ModelMetadata",
    "Permissions",
    "RawQuerySource",
    "TableSource",
    "InsertResult",
    "Model",
    "ModelFactory",
    "MutationResult",
    "SelectResult",
    "configure",
]
