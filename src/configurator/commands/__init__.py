"""Subcommand modules for configurator.

register_commands() imports command modules lazily to keep
``configurator --help`` fast.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register the standalone commands on the root CLI group."""
    from configurator.commands.check import check
    from configurator.commands.compare import compare
    from configurator.commands.convert import convert

    cli.add_command(check)
    cli.add_command(compare)
    cli.add_command(convert)
