"""Tests for the metadata cache and the in-memory store."""

from __future__ import annotations

import time

import pytest

from modelkit.model.cache import DEFAULT_NAMESPACE, MemoryCacheStore, MetadataCache
from modelkit.model.metadata import ModelMetadata


class CountingResolver:
    """Resolver double returning fixed metadata and counting calls."""

    def __init__(self, metadata: ModelMetadata) -> None:
        self.metadata = metadata
        self.calls: list[str] = []

    async def resolve(self, model_name: str) -> ModelMetadata:
        self.calls.append(model_name)
        return self.metadata


class TestMemoryCacheStore:
    @pytest.mark.asyncio
    async def test_get_missing_returns_none(self) -> None:
        store = MemoryCacheStore()

        assert await store.get("model", "cust") is None

    @pytest.mark.asyncio
    async def test_namespaces_are_separate(self) -> None:
        store = MemoryCacheStore()
        await store.set("model", "cust", 1)
        await store.set("other", "cust", 2)

        assert await store.get("model", "cust") == 1
        assert await store.get("other", "cust") == 2
        assert len(store) == 2

    @pytest.mark.asyncio
    async def test_expired_entry_is_dropped(self) -> None:
        store = MemoryCacheStore(ttl_sec=10)
        await store.set("model", "cust", "stale")
        # Age the entry past its ttl
        store._entries[("model", "cust")] = ("stale", time.monotonic() - 11)

        assert await store.get("model", "cust") is None
        assert len(store) == 0

    @pytest.mark.asyncio
    async def test_fresh_entry_survives_ttl(self) -> None:
        store = MemoryCacheStore(ttl_sec=60)
        await store.set("model", "cust", "fresh")

        assert await store.get("model", "cust") == "fresh"

    @pytest.mark.asyncio
    async def test_invalidate_and_clear(self) -> None:
        store = MemoryCacheStore()
        await store.set("model", "a", 1)
        await store.set("model", "b", 2)

        store.invalidate("model", "a")
        assert await store.get("model", "a") is None

        store.clear()
        assert len(store) == 0


class TestMetadataCache:
    """Get-or-load semantics."""

    @pytest.mark.asyncio
    async def test_miss_resolves_and_stores(self, cust_metadata: ModelMetadata) -> None:
        store = MemoryCacheStore()
        resolver = CountingResolver(cust_metadata)
        cache = MetadataCache(store, resolver)  # type: ignore[arg-type]

        result = await cache.get_or_load("cust")

        assert result is cust_metadata
        assert resolver.calls == ["cust"]
        assert await store.get(DEFAULT_NAMESPACE, "cust") is cust_metadata

    @pytest.mark.asyncio
    async def test_hit_skips_resolver(self, cust_metadata: ModelMetadata) -> None:
        resolver = CountingResolver(cust_metadata)
        cache = MetadataCache(MemoryCacheStore(), resolver)  # type: ignore[arg-type]

        first = await cache.get_or_load("cust")
        second = await cache.get_or_load("cust")

        assert first is second
        assert resolver.calls == ["cust"]

    @pytest.mark.asyncio
    async def test_key_is_name_as_given(self, cust_metadata: ModelMetadata) -> None:
        resolver = CountingResolver(cust_metadata)
        cache = MetadataCache(MemoryCacheStore(), resolver)  # type: ignore[arg-type]

        await cache.get_or_load("cust")
        await cache.get_or_load("CUST")

        assert resolver.calls == ["cust", "CUST"]

    @pytest.mark.asyncio
    async def test_serialized_entry_is_revalidated(self, cust_metadata: ModelMetadata) -> None:
        store = MemoryCacheStore()
        await store.set("models", "cust", cust_metadata.model_dump(mode="json"))
        resolver = CountingResolver(cust_metadata)
        cache = MetadataCache(store, resolver, namespace="models")  # type: ignore[arg-type]

        result = await cache.get_or_load("cust")

        assert isinstance(result, ModelMetadata)
        assert result == cust_metadata
        assert resolver.calls == []
