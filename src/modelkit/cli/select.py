"""modelkit select command - query a model from the shell."""

import asyncio
import json
from typing import Any

import click
from rich.console import Console
from rich.table import Table

from modelkit.cli.utils import load_cli_config, open_factory, parse_globals
from modelkit.config.models import ModelKitConfig
from modelkit.core.errors import ModelKitError
from modelkit.model.model import SelectResult


async def _select(
    config: ModelKitConfig,
    model_name: str,
    filters: str | None,
    globals_: dict[str, Any],
) -> SelectResult:
    async with open_factory(config) as factory:
        model = await factory.get_model(model_name, globals_)
        return await model.select(filters)


@click.command()
@click.argument("model_name")
@click.option("--filter", "filters", help='JSON filters, e.g. \'{"status": "active"}\'')
@click.option(
    "--global",
    "global_pairs",
    multiple=True,
    metavar="KEY=VALUE",
    help="Substitution value for the model's raw query (repeatable)",
)
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def select_command(
    ctx: click.Context,
    model_name: str,
    filters: str | None,
    global_pairs: tuple[str, ...],
    as_json: bool,
) -> None:
    """Select rows from MODEL_NAME."""
    config = load_cli_config(ctx)
    globals_ = parse_globals(global_pairs)
    try:
        result = asyncio.run(_select(config, model_name, filters, globals_))
    except ModelKitError as e:
        raise click.ClickException(str(e)) from e

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2, default=str))
        return

    console = Console()
    if not result.data:
        console.print(f"{result.rows} rows")
        return
    table = Table()
    for name in result.data[0]:
        table.add_column(name)
    for row in result.data:
        table.add_row(*("" if v is None else str(v) for v in row.values()))
    console.print(table)
    console.print(f"{result.rows} rows")
