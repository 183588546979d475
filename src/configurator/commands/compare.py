"""Command: order two values."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from configurator.commands._base import CfgCommand

if TYPE_CHECKING:
    from configurator.commands._context import AppContext


@click.command(
    cls=CfgCommand,
    examples="""\
  configurator compare 3 5
  configurator compare 0x10 16 --type uint16
  configurator compare 2024-01-01 2023-12-31T23:00:00-02:00 --type timestamp""",
)
@click.argument("left")
@click.argument("right")
@click.option("-t", "--type", "type_name", default="int", show_default=True, help="Value type.")
@click.pass_obj
def compare(app: AppContext, left: str, right: str, type_name: str) -> None:
    """Print -1, 0 or 1 as LEFT is lower than, equal to or greater than RIGHT."""
    from configurator.services.check import CheckService

    app.emit(CheckService(app.settings, app.plugins).compare(left, right, type_name=type_name))
