"""Database layer: relational executor and control schema."""

from modelkit.db.executor import (
    QueryExecutor,
    QueryResult,
    SqlAlchemyExecutor,
    SqlAlchemyTransaction,
    Transaction,
)
from modelkit.db.schema import (
    COLUMNS_TABLE,
    HEADER_TABLE,
    ModelColumnRow,
    ModelHeaderRow,
    create_control_schema,
)

__all__ = [
    "QueryExecutor",
    "QueryResult",
    "SqlAlchemyExecutor",
    "SqlAlchemyTransaction",
    "Transaction",
    "COLUMNS_TABLE",
    "HEADER_TABLE",
    "ModelColumnRow",
    "ModelHeaderRow",
    "create_control_schema",
]
