"""modelkit describe command - show resolved model metadata."""

import asyncio
import json

import click
from rich.console import Console
from rich.table import Table

from modelkit.cli.utils import load_cli_config, open_factory
from modelkit.config.models import ModelKitConfig
from modelkit.core.errors import ModelKitError
from modelkit.model.metadata import ModelMetadata, RawQuerySource


async def _describe(config: ModelKitConfig, model_name: str) -> ModelMetadata:
    async with open_factory(config) as factory:
        model = await factory.get_model(model_name)
        return model.metadata


def _fields_table(metadata: ModelMetadata) -> Table:
    table = Table(title=f"{metadata.name} ({metadata.qualified_table})")
    table.add_column("field")
    table.add_column("column")
    table.add_column("type")
    table.add_column("pk")
    table.add_column("required")
    table.add_column("max length")
    for f in metadata.fields:
        table.add_row(
            f.field,
            f.column_name,
            f.type or "",
            "yes" if f.primary_key else "",
            "yes" if f.required else "",
            "" if f.max_length is None else str(f.max_length),
        )
    return table


@click.command()
@click.argument("model_name")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def describe_command(ctx: click.Context, model_name: str, as_json: bool) -> None:
    """Resolve MODEL_NAME from the control schema and print its metadata."""
    config = load_cli_config(ctx)
    try:
        metadata = asyncio.run(_describe(config, model_name))
    except ModelKitError as e:
        raise click.ClickException(str(e)) from e

    if as_json:
        click.echo(json.dumps(metadata.model_dump(mode="json"), indent=2))
        return

    console = Console()
    console.print(_fields_table(metadata))
    granted = [name for name, allowed in metadata.permissions.model_dump().items() if allowed]
    console.print(f"Permissions: {', '.join(granted) or 'none'}")
    console.print(f"Primary key: {', '.join(metadata.primary_key) or 'none'}")
    if isinstance(metadata.source, RawQuerySource):
        console.print(f"Select source: raw query\n{metadata.source.sql}")
