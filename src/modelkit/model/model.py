"""Model handles: generic select/insert/update/delete over resolved metadata.

Typical use:

    factory = ModelFactory(SqlAlchemyExecutor(engine))
    customers = await factory.get_model("cust")
    result = await customers.select({"status": "active"})

update() and delete() run in their own transaction and refuse to touch more
than one row: if the statement matches several rows the transaction is rolled
back and MutationError (MULTIPLE_ROWS_AFFECTED) is raised.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import asdict, dataclass, field
from typing import Any

from sqlalchemy.sql.expression import Executable

from modelkit.config.models import ModelKitConfig
from modelkit.core.errors import MutationError
from modelkit.core.logging import get_logger
from modelkit.db.executor import QueryExecutor, QueryResult, SqlAlchemyExecutor
from modelkit.model.cache import CacheStore, MemoryCacheStore, MetadataCache
from modelkit.model.filters import FilterInput, normalize_filters
from modelkit.model.metadata import MetadataResolver, ModelMetadata
from modelkit.model.query import (
    build_delete,
    build_insert,
    build_select,
    build_update,
    translate_fields,
)

ModelGlobals = Mapping[str, Any]


@dataclass(frozen=True)
class SelectResult:
    rows: int
    data: list[dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class InsertResult:
    data: dict[str, Any] | None = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class MutationResult:
    """Outcome of update/delete. ``found`` is False when no row matched."""

    found: bool
    data: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


class Model:
    """Handle bound to one model's metadata."""

    def __init__(
        self,
        metadata: ModelMetadata,
        executor: QueryExecutor,
        globals_: ModelGlobals | None = None,
        strict_mode: bool = False,
        logger: Any = None,
    ) -> None:
        self._metadata = metadata
        self._executor = executor
        self.globals: dict[str, Any] = dict(globals_ or {})
        self.strict_mode = strict_mode
        self.logger = (logger or get_logger()).bind(model=metadata.name)

    @property
    def name(self) -> str:
        return self._metadata.name

    @property
    def metadata(self) -> ModelMetadata:
        return self._metadata

    def get_metadata(self) -> ModelMetadata:
        return self._metadata

    def translate_fields(self, values: Mapping[str, Any] | None) -> dict[str, Any]:
        return translate_fields(self._metadata, values, strict=self.strict_mode)

    async def select(self, filters: FilterInput = None) -> SelectResult:
        predicates = normalize_filters(filters) if filters else []
        statement = build_select(self._metadata, predicates, self.globals)
        self.logger.debug("model_select", sql=str(statement))
        result = await self._executor.query(statement)
        self.logger.debug("model_select_result", row_count=result.row_count)
        return SelectResult(rows=result.row_count, data=result.rows)

    async def insert(self, values: Mapping[str, Any]) -> InsertResult:
        statement = build_insert(self._metadata, self.translate_fields(values))
        self.logger.debug("model_insert")
        result = await self._executor.query(statement)
        self.logger.debug("model_insert_result", rows=result.rows)
        return InsertResult(data=result.rows[0] if result.rows else None)

    async def update(
        self, old_values: Mapping[str, Any], new_values: Mapping[str, Any]
    ) -> MutationResult:
        changes = self.translate_fields(new_values)
        if not changes:
            requested = sorted(new_values or {})
            self.logger.error("model_update_without_values", requested=requested)
            raise MutationError.no_update_values(self._metadata.qualified_table, requested)
        statement = build_update(self._metadata, self.translate_fields(old_values), changes)
        self.logger.debug("model_update")
        result = await self._execute_single_row(statement)
        return MutationResult(found=result.row_count > 0, data=result.rows[0] if result.rows else {})

    async def delete(self, values: Mapping[str, Any]) -> MutationResult:
        statement = build_delete(self._metadata, self.translate_fields(values))
        self.logger.debug("model_delete")
        result = await self._execute_single_row(statement)
        return MutationResult(found=result.row_count > 0, data=result.rows[0] if result.rows else {})

    async def _execute_single_row(self, statement: Executable) -> QueryResult:
        """Run a mutation in its own transaction, allowing at most one affected row."""
        transaction = await self._executor.begin_transaction()
        try:
            result = await self._executor.query(statement, transaction)
        except BaseException as e:
            # Includes cancellation; the transaction must not outlive the call
            self.logger.error("model_mutation_failed", error=repr(e))
            await transaction.rollback()
            raise

        if result.row_count > 1:
            await transaction.rollback()
            self.logger.error("model_multiple_rows_affected", row_count=result.row_count)
            raise MutationError.multiple_rows_affected(
                self._metadata.qualified_table, result.row_count
            )

        await transaction.commit()
        self.logger.debug("model_mutation_result", row_count=result.row_count)
        return result


class ModelFactory:
    """Produces Model handles from explicitly supplied collaborators."""

    def __init__(
        self,
        executor: QueryExecutor,
        cache: CacheStore | None = None,
        logger: Any = None,
        strict_mode: bool = False,
        namespace: str = "model",
    ) -> None:
        self.executor = executor
        self.cache_store = cache if cache is not None else MemoryCacheStore()
        self.logger = logger or get_logger("modelkit")
        self.strict_mode = strict_mode
        self.metadata_cache = MetadataCache(
            self.cache_store,
            MetadataResolver(executor, logger=self.logger),
            namespace=namespace,
            logger=self.logger,
        )

    @classmethod
    def from_config(cls, config: ModelKitConfig, logger: Any = None) -> ModelFactory:
        return cls(
            SqlAlchemyExecutor.from_config(config.database),
            cache=MemoryCacheStore(ttl_sec=config.cache.ttl_sec),
            logger=logger,
            strict_mode=config.model.strict_mode,
            namespace=config.cache.namespace,
        )

    async def get_model(self, model_name: str, globals_: ModelGlobals | None = None) -> Model:
        metadata = await self.metadata_cache.get_or_load(model_name)
        return Model(
            metadata,
            self.executor,
            globals_=globals_,
            strict_mode=self.strict_mode,
            logger=self.logger,
        )


def configure(
    *,
    executor: QueryExecutor,
    cache: CacheStore | None = None,
    logger: Any = None,
    strict_mode: bool = False,
) -> ModelFactory:
    """Bundle the relational executor, cache store and logger into a factory."""
    return ModelFactory(executor, cache=cache, logger=logger, strict_mode=strict_mode)
