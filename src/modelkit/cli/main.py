"""ModelKit CLI - modelkit command."""

from pathlib import Path

import click

from modelkit.cli.describe import describe_command
from modelkit.cli.init_schema import init_schema_command
from modelkit.cli.select import select_command
from modelkit.cli.utils import load_cli_config
from modelkit.core.logging import configure_logging


@click.group()
@click.version_option(version="0.1.0", prog_name="modelkit")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="YAML config file (default: ./modelkit.yaml)",
)
@click.pass_context
def cli(ctx: click.Context, verbose: bool, config_path: Path | None) -> None:
    """ModelKit - metadata-driven record access."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["config_path"] = config_path

    logging_config = load_cli_config(ctx).logging
    if verbose:
        logging_config = logging_config.model_copy(update={"level": "DEBUG"})
    configure_logging(config=logging_config)


cli.add_command(init_schema_command, name="init-schema")
cli.add_command(describe_command, name="describe")
cli.add_command(select_command, name="select")


if __name__ == "__main__":
    cli()
