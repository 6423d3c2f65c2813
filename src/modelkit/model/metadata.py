"""Model metadata types and the resolver that reads them from the control schema.

A model is described by one row in ``models`` and its field rows in
``models_det`` (see modelkit.db.schema). The resolver turns those rows into
an immutable ModelMetadata record. The field lookup and the primary key list
are computed from the field list on access, so they cannot drift from it.
"""

from __future__ import annotations

from collections import Counter
from typing import Annotated, Any, Literal

import structlog
from pydantic import BaseModel, ConfigDict, Field, computed_field
from sqlalchemy import select
from sqlalchemy.exc import DBAPIError

from modelkit.core.errors import MetadataError
from modelkit.db.executor import QueryExecutor
from modelkit.db.schema import COLUMNS_TABLE, HEADER_TABLE, YES

# SQLSTATE for undefined_table (PostgreSQL)
_UNDEFINED_TABLE = "42P01"


class FieldDescriptor(BaseModel):
    """One logical field of a model."""

    model_config = ConfigDict(frozen=True)

    field: str
    type: str | None = None
    required: bool = False
    base_table: bool = True  # False for fields computed by the raw select SQL
    column_name: str
    max_length: int | None = None
    primary_key: bool = False
    uppercase: bool = False  # Display hint only
    default_value: Any = None


class Permissions(BaseModel):
    model_config = ConfigDict(frozen=True)

    select: bool = False
    insert: bool = False
    update: bool = False
    delete: bool = False


class TableSource(BaseModel):
    """Select from the physical table."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["table"] = "table"


class RawQuerySource(BaseModel):
    """Select from raw SQL; ``:name`` placeholders are bound from model globals."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["raw"] = "raw"
    sql: str


SelectSource = Annotated[TableSource | RawQuerySource, Field(discriminator="kind")]


class ModelMetadata(BaseModel):
    """Resolved description of one model."""

    model_config = ConfigDict(frozen=True)

    name: str
    schema_name: str | None = None
    table_name: str
    source: SelectSource = Field(default_factory=TableSource)
    permissions: Permissions = Field(default_factory=Permissions)
    fields: tuple[FieldDescriptor, ...] = ()
    row_limit: int | None = None

    @computed_field  # type: ignore[prop-decorator]
    @property
    def field_map(self) -> dict[str, FieldDescriptor]:
        """Field name to descriptor. Later duplicates replace earlier ones."""
        return {f.field: f for f in self.fields}

    @computed_field  # type: ignore[prop-decorator]
    @property
    def primary_key(self) -> list[str]:
        return [f.field for f in self.fields if f.primary_key]

    @property
    def qualified_table(self) -> str:
        """Physical table used by insert/update/delete, and by select for TableSource."""
        table = self.table_name.lower()
        if self.schema_name:
            return f"{self.schema_name}.{table}"
        return table


def _flag(value: Any) -> bool:
    return value == YES


def _is_undefined_table_error(error: DBAPIError) -> bool:
    """Check if the driver reports a missing relation."""
    orig = error.orig
    code = getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)
    if code == _UNDEFINED_TABLE:
        return True
    return "no such table" in str(orig).lower()


def field_from_row(row: dict[str, Any]) -> FieldDescriptor:
    return FieldDescriptor(
        field=row["field"],
        type=row.get("type"),
        required=_flag(row.get("required")),
        base_table=_flag(row.get("base_table")),
        column_name=row.get("column_name") or row["field"],
        max_length=row.get("length"),
        primary_key=_flag(row.get("primary_key")),
        uppercase=_flag(row.get("uppercase")),
        default_value=row.get("default_value"),
    )


def metadata_from_rows(
    model_name: str, header: dict[str, Any], columns: list[dict[str, Any]]
) -> ModelMetadata:
    """Assemble metadata from a header row and its field rows."""
    raw_sql = header.get("sql")
    source: TableSource | RawQuerySource
    if raw_sql and raw_sql.strip():
        source = RawQuerySource(sql=raw_sql)
    else:
        source = TableSource()
    return ModelMetadata(
        name=model_name,
        schema_name=header.get("schema_name") or None,
        table_name=header["table_name"],
        source=source,
        permissions=Permissions(
            select=_flag(header.get("sel")),
            insert=_flag(header.get("ins")),
            update=_flag(header.get("upd")),
            delete=_flag(header.get("del")),
        ),
        fields=tuple(field_from_row(row) for row in columns),
        row_limit=header.get("row_limit"),
    )


class MetadataResolver:
    """Reads model metadata from the models / models_det control tables."""

    def __init__(self, executor: QueryExecutor, logger: Any = None) -> None:
        self.executor = executor
        self.logger = logger or structlog.get_logger()

    async def resolve(self, model_name: str) -> ModelMetadata:
        """Fetch header and fields for ``model_name`` (matched upper-cased).

        Raises:
            MetadataError: MODEL_NOT_FOUND when no header row matches,
                MODEL_STORE_NOT_CONFIGURED when the control tables are missing.
        """
        model_id = model_name.upper()
        header = await self._fetch_header(model_id)
        columns = await self._fetch_columns(model_id)
        metadata = metadata_from_rows(model_name, header, columns)

        duplicates = [name for name, n in Counter(f.field for f in metadata.fields).items() if n > 1]
        if duplicates:
            # Tolerated; field_map keeps the last definition
            self.logger.warning("model_duplicate_fields", model=model_name, fields=duplicates)

        self.logger.debug(
            "model_metadata_resolved",
            model=model_name,
            fields=len(metadata.fields),
            primary_key=metadata.primary_key,
        )
        return metadata

    async def _fetch_header(self, model_id: str) -> dict[str, Any]:
        self.logger.debug("model_header_fetch", model=model_id)
        statement = select(HEADER_TABLE).where(HEADER_TABLE.c.id_model == model_id)
        try:
            result = await self.executor.query(statement)
        except DBAPIError as e:
            if _is_undefined_table_error(e):
                self.logger.error(
                    "model_store_not_configured",
                    hint="create the MODELS and MODELS_DET tables on your database",
                )
                raise MetadataError.store_not_configured(str(e.orig)) from e
            self.logger.error("model_header_fetch_failed", model=model_id, error=str(e))
            raise
        if result.row_count == 0 or not result.rows:
            self.logger.error("model_not_found", model=model_id)
            raise MetadataError.model_not_found(model_id)
        return result.rows[0]

    async def _fetch_columns(self, model_id: str) -> list[dict[str, Any]]:
        statement = select(COLUMNS_TABLE).where(COLUMNS_TABLE.c.id_model == model_id)
        try:
            result = await self.executor.query(statement)
        except DBAPIError as e:
            self.logger.error("model_columns_fetch_failed", model=model_id, error=str(e))
            raise
        return result.rows
