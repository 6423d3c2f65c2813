"""Select filter normalization.

Filters arrive in three shapes and leave as an ordered list of FilterPredicate:

- JSON text, decoded first and re-dispatched as one of the shapes below
- a list of items, each a bare scalar or a predicate
- a mapping of column name to bare scalar or predicate; the key is the
  predicate's column unless the predicate names its own

A bare scalar is an equality test. Anything other than a mapping, sequence
or FilterPredicate counts as a scalar, so dates, decimals and UUIDs pass
through to the driver untouched. A predicate (mapping or FilterPredicate)
must carry at least one of value, multipleValues or operator.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any

import structlog
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from modelkit.core.errors import FilterError

logger = structlog.get_logger()

OPERATORS = frozenset(
    {
        "=",
        "!=",
        "<>",
        ">",
        "<",
        ">=",
        "<=",
        "LIKE",
        "NOT LIKE",
        "ILIKE",
        "IN",
        "NOT IN",
        "BETWEEN",
        "NOT BETWEEN",
        "IS NULL",
        "IS NOT NULL",
    }
)

_PREDICATE_KEYS = frozenset({"value", "multipleValues", "multiple_values", "operator"})


class FilterPredicate(BaseModel):
    """One WHERE condition on a model column.

    ``function`` wraps the value as ``function('value')`` in the SQL text.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="forbid")

    column: str | None = None
    value: Any = None
    multiple_values: list[Any] | None = Field(default=None, alias="multipleValues")
    operator: str = "="
    function: str | None = None

    @field_validator("operator", mode="before")
    @classmethod
    def normalize_operator(cls, v: Any) -> str:
        if not isinstance(v, str):
            raise ValueError(f"operator must be a string, got {type(v).__name__}")
        op = " ".join(v.split()).upper()
        if op not in OPERATORS:
            raise ValueError(f"unsupported operator {v!r}")
        return op

    @field_validator("value")
    @classmethod
    def reject_container_value(cls, v: Any) -> Any:
        if not _is_scalar(v):
            raise ValueError(f"value must be a scalar, got {type(v).__name__}")
        return v

    @field_validator("multiple_values")
    @classmethod
    def reject_container_items(cls, v: list[Any] | None) -> list[Any] | None:
        for item in v or ():
            if not _is_scalar(item):
                raise ValueError(f"multipleValues items must be scalars, got {type(item).__name__}")
        return v


FilterInput = str | bytes | Mapping[str, Any] | list[Any] | tuple[Any, ...] | None


def _is_scalar(value: Any) -> bool:
    return not isinstance(value, (Mapping, list, tuple, set, frozenset, FilterPredicate))


def _decode(text: str | bytes) -> Any:
    try:
        return json.loads(text)
    except ValueError as e:
        # JSONDecodeError, or UnicodeDecodeError for undecodable bytes
        raise FilterError.invalid_syntax(f"filter text is not valid JSON ({e})", text) from e


def build_predicate(item: Any, column: str | None = None) -> FilterPredicate:
    """Build one predicate, taking ``column`` as the default column name."""
    if isinstance(item, FilterPredicate):
        if item.column:
            return item
        return item.model_copy(update={"column": column})

    if isinstance(item, Mapping):
        if not _PREDICATE_KEYS & item.keys():
            raise FilterError.invalid_syntax(
                "predicate needs at least one of value, multipleValues or operator", item
            )
        data = dict(item)
        if not data.get("column"):
            data["column"] = column
        if data.get("operator") is None:
            data["operator"] = "="
        try:
            return FilterPredicate.model_validate(data)
        except ValidationError as e:
            raise FilterError.invalid_syntax(e.errors()[0]["msg"], item) from e

    if _is_scalar(item):
        return FilterPredicate(column=column, operator="=", value=item)

    raise FilterError.invalid_syntax(f"unsupported predicate type {type(item).__name__}", item)


def normalize_filters(filters: FilterInput) -> list[FilterPredicate]:
    """Turn any accepted filter shape into an ordered predicate list."""
    logger.debug("parsing_filters", filters=filters)
    if filters is None:
        return []

    if isinstance(filters, (str, bytes)):
        filters = _decode(filters)

    if isinstance(filters, Mapping):
        return [build_predicate(value, str(key)) for key, value in filters.items()]

    if isinstance(filters, (list, tuple)):
        return [build_predicate(item) for item in filters]

    raise FilterError.invalid_syntax(
        f"filters must be JSON text, a list or a mapping, got {type(filters).__name__}", filters
    )
