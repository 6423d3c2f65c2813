"""Metadata cache: get-or-load over a namespaced key/value store."""

from __future__ import annotations

import time
from typing import Any, Protocol

import structlog

from modelkit.model.metadata import MetadataResolver, ModelMetadata

DEFAULT_NAMESPACE = "model"


class CacheStore(Protocol):
    """Namespaced key/value store. get() returns None when absent."""

    async def get(self, namespace: str, key: str) -> Any: ...

    async def set(self, namespace: str, key: str, value: Any) -> None: ...


class MemoryCacheStore:
    """In-process store with optional expiry.

    Entries live for the process lifetime unless ``ttl_sec`` is set.
    """

    def __init__(self, ttl_sec: float | None = None) -> None:
        self.ttl_sec = ttl_sec
        self._entries: dict[tuple[str, str], tuple[Any, float]] = {}

    async def get(self, namespace: str, key: str) -> Any:
        entry = self._entries.get((namespace, key))
        if entry is None:
            return None
        value, stored_at = entry
        if self.ttl_sec is not None and time.monotonic() - stored_at >= self.ttl_sec:
            del self._entries[(namespace, key)]
            return None
        return value

    async def set(self, namespace: str, key: str, value: Any) -> None:
        self._entries[(namespace, key)] = (value, time.monotonic())

    def invalidate(self, namespace: str, key: str) -> None:
        self._entries.pop((namespace, key), None)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


class MetadataCache:
    """Resolve model metadata through a cache store.

    Concurrent misses for one model may each call the resolver; the result is
    the same either way and the last set() wins.
    """

    def __init__(
        self,
        store: CacheStore,
        resolver: MetadataResolver,
        namespace: str = DEFAULT_NAMESPACE,
        logger: Any = None,
    ) -> None:
        self.store = store
        self.resolver = resolver
        self.namespace = namespace
        self.logger = logger or structlog.get_logger()

    async def get_or_load(self, model_name: str) -> ModelMetadata:
        cached = await self.store.get(self.namespace, model_name)
        if cached is not None:
            # Stores that serialize hand back plain dicts
            if isinstance(cached, ModelMetadata):
                return cached
            return ModelMetadata.model_validate(cached)

        self.logger.debug("model_cache_miss", model=model_name)
        metadata = await self.resolver.resolve(model_name)
        await self.store.set(self.namespace, model_name, metadata)
        return metadata
