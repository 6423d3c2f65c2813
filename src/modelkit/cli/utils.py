"""Shared helpers for CLI commands."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

import click

from modelkit.config.loader import load_config
from modelkit.config.models import ModelKitConfig
from modelkit.core.errors import ModelKitError
from modelkit.db.executor import SqlAlchemyExecutor
from modelkit.model.cache import MemoryCacheStore
from modelkit.model.model import ModelFactory


def load_cli_config(ctx: click.Context) -> ModelKitConfig:
    """Config for this invocation, loaded once and honoring the group-level --config."""
    obj = ctx.ensure_object(dict)
    if "config" not in obj:
        config_path: Path | None = obj.get("config_path")
        try:
            obj["config"] = load_config(config_path)
        except ModelKitError as e:
            raise click.ClickException(str(e)) from e
    config: ModelKitConfig = obj["config"]
    return config


@asynccontextmanager
async def open_executor(config: ModelKitConfig) -> AsyncIterator[SqlAlchemyExecutor]:
    executor = SqlAlchemyExecutor.from_config(config.database)
    try:
        yield executor
    finally:
        await executor.dispose()


@asynccontextmanager
async def open_factory(config: ModelKitConfig) -> AsyncIterator[ModelFactory]:
    """Factory over a fresh engine, disposed on exit."""
    async with open_executor(config) as executor:
        yield ModelFactory(
            executor,
            cache=MemoryCacheStore(ttl_sec=config.cache.ttl_sec),
            strict_mode=config.model.strict_mode,
            namespace=config.cache.namespace,
        )


def parse_globals(pairs: tuple[str, ...]) -> dict[str, str]:
    """Parse repeated KEY=VALUE options."""
    result: dict[str, str] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise click.BadParameter(f"expected KEY=VALUE, got {pair!r}", param_hint="--global")
        result[key] = value
    return result
