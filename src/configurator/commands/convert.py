"""Command: convert a value between types."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from configurator.commands._base import CfgCommand

if TYPE_CHECKING:
    from configurator.commands._context import AppContext


@click.command(
    cls=CfgCommand,
    examples="""\
  configurator convert 300 --from int --to uint8
  configurator convert 3.9 --from float64 --to int16
  configurator convert 1700000000 --from int --to timestamp""",
)
@click.argument("value")
@click.option("--from", "from_type", required=True, help="Type VALUE is parsed as.")
@click.option("--to", "to_type", required=True, help="Type to convert into.")
@click.pass_obj
def convert(app: AppContext, value: str, from_type: str, to_type: str) -> None:
    """Convert VALUE with fixed-width wrapping and float truncation."""
    from configurator.services.check import CheckService

    svc = CheckService(app.settings, app.plugins)
    app.emit(svc.convert(value, from_type=from_type, to_type=to_type))
