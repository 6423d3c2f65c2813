"""Relational execution on an SQLAlchemy async engine.

This module provides:
- QueryExecutor / Transaction: the protocols the model layer consumes
- QueryResult: uniform result shape (row count + list of row dicts)
- SqlAlchemyExecutor: the engine-backed implementation

Statements are SQLAlchemy Core constructs. Queries outside a transaction run
on a fresh connection in autocommit-on-success mode; begin_transaction()
hands out a connection with an open transaction that the caller must
terminate with commit() or rollback().
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol

import structlog
from sqlalchemy.engine import CursorResult
from sqlalchemy.ext.asyncio import (
    AsyncConnection,
    AsyncEngine,
    AsyncTransaction,
    create_async_engine,
)
from sqlalchemy.sql.expression import Executable

from modelkit.config.models import DatabaseConfig

logger = structlog.get_logger()


@dataclass(frozen=True)
class QueryResult:
    """Rows returned by a statement plus its row count."""

    row_count: int
    rows: list[dict[str, Any]] = field(default_factory=list)


class Transaction(Protocol):
    """Open transaction bound to a single connection."""

    async def query(self, statement: Executable) -> QueryResult: ...

    async def commit(self) -> None: ...

    async def rollback(self) -> None: ...


class QueryExecutor(Protocol):
    """Executes structured statements, optionally inside a transaction."""

    async def query(
        self, statement: Executable, transaction: Transaction | None = None
    ) -> QueryResult: ...

    async def begin_transaction(self) -> Transaction: ...


def _to_query_result(result: CursorResult[Any]) -> QueryResult:
    # RETURNING statements report the returned rows; rowcount is unreliable there
    if result.returns_rows:
        rows = [dict(row._mapping) for row in result]
        return QueryResult(row_count=len(rows), rows=rows)
    return QueryResult(row_count=max(result.rowcount, 0))


class SqlAlchemyTransaction:
    """Transaction handle owning one AsyncConnection until terminated."""

    def __init__(self, conn: AsyncConnection, transaction: AsyncTransaction) -> None:
        self._conn = conn
        self._transaction = transaction
        self.terminated = False

    async def query(self, statement: Executable) -> QueryResult:
        result = await self._conn.execute(statement)
        return _to_query_result(result)

    async def commit(self) -> None:
        try:
            await self._transaction.commit()
        finally:
            await self._close()

    async def rollback(self) -> None:
        try:
            await self._transaction.rollback()
        finally:
            await self._close()

    async def _close(self) -> None:
        self.terminated = True
        await self._conn.close()


class SqlAlchemyExecutor:
    """QueryExecutor backed by an SQLAlchemy AsyncEngine."""

    def __init__(self, engine: AsyncEngine) -> None:
        self.engine = engine

    @classmethod
    def from_config(cls, config: DatabaseConfig) -> SqlAlchemyExecutor:
        engine = create_async_engine(
            config.url,
            echo=config.echo,
            pool_pre_ping=config.pool_pre_ping,
        )
        return cls(engine)

    async def query(
        self, statement: Executable, transaction: Transaction | None = None
    ) -> QueryResult:
        if transaction is not None:
            return await transaction.query(statement)
        async with self.engine.begin() as conn:
            result = await conn.execute(statement)
            return _to_query_result(result)

    async def begin_transaction(self) -> SqlAlchemyTransaction:
        conn = await self.engine.connect()
        try:
            transaction = await conn.begin()
        except Exception:
            await conn.close()
            raise
        logger.debug("transaction_started")
        return SqlAlchemyTransaction(conn, transaction)

    async def dispose(self) -> None:
        """Close pooled connections."""
        await self.engine.dispose()
