"""Fixtures for the model layer: an in-memory executor and sample metadata."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from typing import Any

import pytest
from sqlalchemy.dialects import postgresql
from sqlalchemy.sql.expression import ClauseElement, Executable

from modelkit.db.executor import QueryResult
from modelkit.model.metadata import FieldDescriptor, ModelMetadata, Permissions, RawQuerySource

Outcome = QueryResult | Exception


class FakeTransaction:
    """Transaction double recording how it was terminated."""

    def __init__(self, executor: FakeExecutor) -> None:
        self.executor = executor
        self.committed = False
        self.rolled_back = False

    async def query(self, statement: Executable) -> QueryResult:
        if self.executor.delay:
            await asyncio.sleep(self.executor.delay)
        return self.executor.next_outcome(statement, self)

    async def commit(self) -> None:
        self.committed = True

    async def rollback(self) -> None:
        self.rolled_back = True


class FakeExecutor:
    """QueryExecutor double.

    Outcomes are consumed in order; an Exception outcome is raised instead of
    returned. Once the queue is empty every statement affects zero rows.
    ``delay`` stalls statements run inside a transaction.
    """

    def __init__(self, outcomes: list[Outcome] | None = None, delay: float = 0.0) -> None:
        self.delay = delay
        self.outcomes: list[Outcome] = list(outcomes or [])
        self.statements: list[Executable] = []
        self.in_transaction: list[bool] = []
        self.transactions: list[FakeTransaction] = []

    def next_outcome(self, statement: Executable, transaction: FakeTransaction | None) -> QueryResult:
        self.statements.append(statement)
        self.in_transaction.append(transaction is not None)
        if not self.outcomes:
            return QueryResult(row_count=0)
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    async def query(
        self, statement: Executable, transaction: FakeTransaction | None = None
    ) -> QueryResult:
        if transaction is not None:
            return await transaction.query(statement)
        return self.next_outcome(statement, None)

    async def begin_transaction(self) -> FakeTransaction:
        transaction = FakeTransaction(self)
        self.transactions.append(transaction)
        return transaction


def rows(*data: dict[str, Any]) -> QueryResult:
    return QueryResult(row_count=len(data), rows=list(data))


@pytest.fixture
def result_rows() -> Callable[..., QueryResult]:
    """Build a QueryResult from row dicts."""
    return rows


@pytest.fixture
def make_executor() -> type[FakeExecutor]:
    """Executor double class; call it with the outcomes to replay."""
    return FakeExecutor


@pytest.fixture
def compile_sql() -> Callable[[ClauseElement], str]:
    """Render a statement as PostgreSQL text with values inlined."""

    def _compile(statement: ClauseElement) -> str:
        compiled = statement.compile(
            dialect=postgresql.dialect(), compile_kwargs={"literal_binds": True}
        )
        return " ".join(str(compiled).split())

    return _compile


@pytest.fixture
def compile_with_params() -> Callable[[ClauseElement], tuple[str, dict[str, Any]]]:
    """Render a statement as PostgreSQL text with its bound parameters.

    Mutation statements target untyped columns, which have no literal renderer.
    """

    def _compile(statement: ClauseElement) -> tuple[str, dict[str, Any]]:
        compiled = statement.compile(dialect=postgresql.dialect())
        return " ".join(str(compiled).split()), dict(compiled.params)

    return _compile


@pytest.fixture
def cust_header() -> dict[str, Any]:
    """Header row of the CUST model as stored in ``models``."""
    return {
        "id_model": "CUST",
        "schema_name": "sales",
        "table_name": "CUSTOMERS",
        "sql": None,
        "sel": "Y",
        "ins": "Y",
        "upd": "Y",
        "del": "N",
        "row_limit": 500,
    }


@pytest.fixture
def cust_columns() -> list[dict[str, Any]]:
    """Field rows of the CUST model as stored in ``models_det``."""
    return [
        {
            "id_model": "CUST",
            "field": "id",
            "column_name": "id",
            "type": "integer",
            "base_table": "Y",
            "required": "Y",
            "primary_key": "Y",
            "uppercase": "N",
            "length": None,
            "default_value": None,
        },
        {
            "id_model": "CUST",
            "field": "status",
            "column_name": "cust_status",
            "type": "varchar",
            "base_table": "Y",
            "required": "N",
            "primary_key": "N",
            "uppercase": "Y",
            "length": 10,
            "default_value": "active",
        },
        {
            "id_model": "CUST",
            "field": "age",
            "column_name": "age",
            "type": "integer",
            "base_table": "Y",
            "required": "N",
            "primary_key": "N",
            "uppercase": "N",
            "length": None,
            "default_value": None,
        },
    ]


@pytest.fixture
def cust_metadata() -> ModelMetadata:
    return ModelMetadata(
        name="cust",
        schema_name="sales",
        table_name="CUSTOMERS",
        permissions=Permissions(select=True, insert=True, update=True, delete=False),
        fields=(
            FieldDescriptor(field="id", column_name="id", type="integer", primary_key=True),
            FieldDescriptor(field="status", column_name="cust_status", type="varchar"),
            FieldDescriptor(field="age", column_name="age", type="integer"),
        ),
    )


@pytest.fixture
def raw_metadata() -> ModelMetadata:
    """Model selecting from raw SQL parameterized by a ``region`` global."""
    return ModelMetadata(
        name="cust_eu",
        schema_name="sales",
        table_name="CUSTOMERS",
        source=RawQuerySource(
            sql="SELECT id, cust_status, age FROM sales.customers WHERE region = :region"
        ),
        fields=(
            FieldDescriptor(field="id", column_name="id", primary_key=True),
            FieldDescriptor(field="status", column_name="cust_status"),
        ),
    )
