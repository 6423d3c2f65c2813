"""modelkit init-schema command - create the control tables."""

import asyncio

import click

from modelkit.cli.utils import load_cli_config, open_executor
from modelkit.config.models import ModelKitConfig
from modelkit.db.schema import create_control_schema


async def _init_schema(config: ModelKitConfig) -> None:
    async with open_executor(config) as executor:
        await create_control_schema(executor.engine)


@click.command()
@click.pass_context
def init_schema_command(ctx: click.Context) -> None:
    """Create the MODELS and MODELS_DET control tables if missing."""
    config = load_cli_config(ctx)
    asyncio.run(_init_schema(config))
    click.echo("Control schema ready: models, models_det")
