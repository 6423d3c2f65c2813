"""Statement builders translating model operations into SQLAlchemy Core.

Builders are pure: they take resolved metadata plus already-translated
values and return an executable statement. Physical tables are described
with lightweight ``table()`` / ``column()`` constructs, so no reflection or
ORM mapping is needed for the target tables.

Security: a predicate carrying ``function`` is rendered as the literal SQL
``function('value')``. Neither part is bound as a parameter, so both must come
from trusted input. Plain values are always bound.
"""

from __future__ import annotations

import operator
import re
from collections.abc import Callable, Iterable, Mapping
from typing import Any

from sqlalchemy import (
    ColumnElement,
    Delete,
    Insert,
    Select,
    Update,
    and_,
    column,
    delete,
    insert,
    literal_column,
    not_,
    select,
    table,
    text,
    update,
)
from sqlalchemy.sql.expression import ColumnClause, FromClause, TableClause

from modelkit.core.errors import FilterError
from modelkit.model.filters import FilterPredicate
from modelkit.model.metadata import ModelMetadata, RawQuerySource

RAW_QUERY_ALIAS = "qry"

# Named ":param" placeholders, skipping "::type" casts and escaped colons
_BIND_PARAM = re.compile(r"(?<![:\w\\]):(\w+)(?!:)")

_COMPARATORS: dict[str, Callable[[ColumnClause[Any], Any], ColumnElement[bool]]] = {
    "=": operator.eq,
    "!=": operator.ne,
    "<>": operator.ne,
    ">": operator.gt,
    "<": operator.lt,
    ">=": operator.ge,
    "<=": operator.le,
    "LIKE": lambda col, value: col.like(value),
    "NOT LIKE": lambda col, value: col.not_like(value),
    "ILIKE": lambda col, value: col.ilike(value),
}


def translate_fields(
    metadata: ModelMetadata, values: Mapping[str, Any] | None, strict: bool = False
) -> dict[str, Any]:
    """Rekey a logical payload to physical column names.

    Unknown keys are dropped. In strict mode, or when the model declares no
    fields, the payload is returned as given.
    """
    if values is None:
        return {}
    if strict or not metadata.fields:
        return dict(values)
    return {f.column_name: values[f.field] for f in metadata.fields if f.field in values}


def physical_table(metadata: ModelMetadata, column_names: Iterable[str] = ()) -> TableClause:
    names = dict.fromkeys([*(f.column_name for f in metadata.fields), *column_names])
    return table(
        metadata.table_name.lower(),
        *(column(name) for name in names),
        schema=metadata.schema_name,
    )


def select_source(metadata: ModelMetadata, globals_: Mapping[str, Any] | None = None) -> FromClause:
    """FROM clause for select: the raw query as subquery ``qry``, else the table."""
    if not isinstance(metadata.source, RawQuerySource):
        return physical_table(metadata)

    sql = metadata.source.sql
    clause = text(sql)
    placeholders = set(_BIND_PARAM.findall(sql))
    params = {k: v for k, v in (globals_ or {}).items() if k in placeholders}
    if params:
        clause = clause.bindparams(**params)
    names = dict.fromkeys(f.column_name for f in metadata.fields)
    return clause.columns(*(column(name) for name in names)).subquery(RAW_QUERY_ALIAS)


def _function_value(predicate: FilterPredicate) -> ColumnElement[Any] | None:
    if not predicate.function:
        return None
    # Interpolated, not bound: see module docstring
    return literal_column(f"{predicate.function}('{predicate.value}')")


def build_condition(metadata: ModelMetadata, predicate: FilterPredicate) -> ColumnElement[bool]:
    """WHERE condition for one normalized predicate.

    Known field names map to their physical column; anything else is used
    as a literal column name (e.g. an alias computed by the raw query).
    """
    if not predicate.column:
        raise FilterError.invalid_syntax("predicate has no column", predicate.model_dump())

    descriptor = metadata.field_map.get(predicate.column)
    col = column(descriptor.column_name if descriptor else predicate.column)
    wrapped = _function_value(predicate)
    op = predicate.operator

    if op in ("IN", "NOT IN"):
        if predicate.multiple_values is not None:
            values: list[Any] = list(predicate.multiple_values)
        else:
            values = [wrapped if wrapped is not None else predicate.value]
        return col.in_(values) if op == "IN" else col.not_in(values)

    if op in ("BETWEEN", "NOT BETWEEN"):
        bounds = predicate.multiple_values
        if bounds is None or len(bounds) != 2:
            raise FilterError.invalid_syntax(
                f"{op} needs exactly two multipleValues", predicate.model_dump()
            )
        condition = col.between(bounds[0], bounds[1])
        return condition if op == "BETWEEN" else not_(condition)

    if op == "IS NULL":
        return col.is_(None)
    if op == "IS NOT NULL":
        return col.is_not(None)

    operand = wrapped if wrapped is not None else predicate.value
    return _COMPARATORS[op](col, operand)


def build_select(
    metadata: ModelMetadata,
    predicates: Iterable[FilterPredicate] = (),
    globals_: Mapping[str, Any] | None = None,
) -> Select[Any]:
    source = select_source(metadata, globals_)
    if metadata.fields:
        statement = select(*(source.c[f.column_name].label(f.field) for f in metadata.fields))
    else:
        statement = select(literal_column("*")).select_from(source)
    for predicate in predicates:
        statement = statement.where(build_condition(metadata, predicate))
    return statement


def _key_equalities(target: TableClause, values: Mapping[str, Any]) -> list[ColumnElement[bool]]:
    return [target.c[name] == value for name, value in values.items()]


def build_insert(metadata: ModelMetadata, values: Mapping[str, Any]) -> Insert:
    target = physical_table(metadata, values.keys())
    return insert(target).values(dict(values)).returning(literal_column("*"))


def build_update(
    metadata: ModelMetadata,
    old_values: Mapping[str, Any],
    new_values: Mapping[str, Any],
) -> Update:
    target = physical_table(metadata, [*old_values.keys(), *new_values.keys()])
    statement = update(target).values(dict(new_values)).returning(literal_column("*"))
    if old_values:
        statement = statement.where(and_(*_key_equalities(target, old_values)))
    return statement


def build_delete(metadata: ModelMetadata, values: Mapping[str, Any]) -> Delete:
    target = physical_table(metadata, values.keys())
    statement = delete(target).returning(literal_column("*"))
    if values:
        statement = statement.where(and_(*_key_equalities(target, values)))
    return statement
