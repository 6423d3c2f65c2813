"""SQLModel definitions for the model control schema.

Two tables describe every model:
- models: one header row per model (physical table, optional raw select SQL,
  permission flags, fetch limit)
- models_det: one row per model field

Flags are single characters, 'Y' meaning true and anything else false.
"""

from sqlalchemy import Column, String
from sqlalchemy.ext.asyncio import AsyncEngine
from sqlmodel import Field, SQLModel

YES = "Y"
NO = "N"


class ModelHeaderRow(SQLModel, table=True):
    """Model header. See MetadataResolver for how columns are decoded."""

    __tablename__ = "models"

    id_model: str = Field(primary_key=True, max_length=64)  # Upper-case model name
    schema_name: str | None = None
    table_name: str
    sql: str | None = None  # Replaces table_name as the select source when set
    sel: str = Field(default=YES, max_length=1)
    ins: str = Field(default=YES, max_length=1)
    upd: str = Field(default=YES, max_length=1)
    del_: str = Field(default=YES, sa_column=Column("del", String(1)))
    row_limit: int | None = None


class ModelColumnRow(SQLModel, table=True):
    """Model field definition."""

    __tablename__ = "models_det"

    id_model: str = Field(primary_key=True, max_length=64)
    field: str = Field(primary_key=True)
    column_name: str | None = None  # Defaults to field
    type: str | None = None
    base_table: str = Field(default=YES, max_length=1)
    required: str = Field(default=NO, max_length=1)
    primary_key: str = Field(default=NO, max_length=1)
    uppercase: str = Field(default=NO, max_length=1)
    length: int | None = None
    default_value: str | None = None


HEADER_TABLE = ModelHeaderRow.__table__  # type: ignore[attr-defined]
COLUMNS_TABLE = ModelColumnRow.__table__  # type: ignore[attr-defined]


async def create_control_schema(engine: AsyncEngine) -> None:
    """Create the models and models_det tables if they do not exist."""
    async with engine.begin() as conn:
        await conn.run_sync(
            SQLModel.metadata.create_all,
            tables=[HEADER_TABLE, COLUMNS_TABLE],
        )
