"""Command: validate a value against constraints and report the result."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from configurator.commands._base import CfgCommand

if TYPE_CHECKING:
    from configurator.commands._context import AppContext


@click.command(
    cls=CfgCommand,
    examples="""\
  configurator check 42 --min 0 --max 100
  configurator check 300 --type uint8
  configurator check -5 --min 0 --default 10
  configurator check debug --type str --allowed debug --allowed info
  configurator check 2024-05-01T12:00:00Z --type timestamp --max 2025-01-01
  configurator check hunter2 --type str --disallowed password --secret
  configurator check 8080 --profile port""",
)
@click.argument("value")
@click.option("-t", "--type", "type_name", default=None, help="Value type (default: int).")
@click.option("--min", "min_value", default=None, help="Lower bound (inclusive).")
@click.option("--max", "max_value", default=None, help="Upper bound (inclusive).")
@click.option("--allowed", multiple=True, help="Allowed value (repeatable).")
@click.option("--disallowed", multiple=True, help="Disallowed value (repeatable).")
@click.option("--default", default=None, help="Value used when the input is invalid.")
@click.option("-p", "--profile", default=None, help="Constraint profile from configurator.toml.")
@click.option("-n", "--name", default=None, help="Name shown in the audit line.")
@click.option("--secret/--no-secret", default=None, help="Redact values in the audit line.")
@click.option(
    "--changes-only/--all-changes",
    "changes_only",
    default=None,
    help="Only log when the value changes.",
)
@click.pass_obj
def check(
    app: AppContext,
    value: str,
    type_name: str | None,
    min_value: str | None,
    max_value: str | None,
    allowed: tuple[str, ...],
    disallowed: tuple[str, ...],
    default: str | None,
    profile: str | None,
    name: str | None,
    secret: bool | None,
    changes_only: bool | None,
) -> None:
    """Validate VALUE, substituting the default when it is invalid."""
    from configurator.services.check import CheckService

    svc = CheckService(app.settings, app.plugins)
    app.emit(
        svc.check(
            value,
            type_name=type_name,
            min_value=min_value,
            max_value=max_value,
            allowed=allowed,
            disallowed=disallowed,
            default=default,
            profile=profile,
            name=name,
            secret=secret,
            changes_only=changes_only,
        )
    )
