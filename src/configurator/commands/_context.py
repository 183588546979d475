"""AppContext: shared Click context for all commands.

Created once by the root group and handed to subcommands via
``@click.pass_obj``. Plugins load lazily, so ``--help`` and ``--version``
never import plugin code.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from configurator.config.logging import configure_logging
from configurator.output.formatters import OutputSettings, format_result

if TYPE_CHECKING:
    from configurator.config.settings import CfgSettings
    from configurator.plugins.manager import PluginManager
    from configurator.services.result import ServiceResult


class AppContext:
    """Shared context flowing through Click's command hierarchy."""

    def __init__(self, settings: CfgSettings) -> None:
        self.settings = settings
        self._plugins: PluginManager | None = None
        configure_logging(verbose=settings.verbose, log_json=settings.log_json)

    @property
    def plugins(self) -> PluginManager:
        """The plugin manager (loaded on first access)."""
        if self._plugins is None:
            from configurator.services.base import load_plugins

            self._plugins = load_plugins(self.settings)
        return self._plugins

    def emit(self, result: ServiceResult) -> None:
        """Print *result*; failures go to stderr and exit with code 1.

        Warnings go to stderr so they stay out of piped output.
        """
        settings = OutputSettings(
            json_output=self.settings.json_output,
            quiet=self.settings.quiet,
            verbose=self.settings.verbose,
        )
        output = format_result(result, settings=settings)
        if result.ok:
            click.echo(output)
            if not settings.json_output and not settings.quiet:
                for warning in result.warnings:
                    click.echo(f"WARNING: {warning}", err=True)
        else:
            click.echo(output, err=True)
            raise SystemExit(1)
