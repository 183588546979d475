"""Root CLI group for configurator with global flags and command registration."""

from __future__ import annotations

import click

from configurator import __version__
from configurator.commands import register_commands
from configurator.commands._base import CfgGroup
from configurator.commands._context import AppContext
from configurator.config.settings import CfgSettings


@click.group(
    cls=CfgGroup,
    invoke_without_command=True,
    examples="""\
  configurator check 42 --min 0 --max 100
  configurator --json compare 1 2
  configurator -c ./configurator.toml check 8080 --profile port""",
)
@click.version_option(version=__version__, prog_name="configurator")
@click.option("--json", "json_output", is_flag=True, help="Structured JSON output.")
@click.option("-q", "--quiet", is_flag=True, help="Print the bare result only.")
@click.option("-v", "--verbose", is_flag=True, help="Detailed output with debug logs.")
@click.option("--log-json", is_flag=True, help="Structured JSON log output to stderr.")
@click.option("-c", "--config", "config_path", default=None, help="Override config file path.")
@click.pass_context
def cli(
    ctx: click.Context,
    json_output: bool,
    quiet: bool,
    verbose: bool,
    log_json: bool,
    config_path: str | None,
) -> None:
    """configurator: validate, default and assign configuration values."""
    settings = CfgSettings.from_cli(
        config_path=config_path,
        json_output=json_output,
        quiet=quiet,
        verbose=verbose,
        log_json=log_json,
    )
    ctx.obj = AppContext(settings)
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


register_commands(cli)
