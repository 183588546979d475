"""Pluggy hook specifications for configurator extensions.

Both hooks are collected once, when plugins are loaded, and feed the
process-wide converter registry and the CLI type-name table.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import pluggy

hookspec = pluggy.HookspecMarker("configurator")


class ConfiguratorHookSpec:
    """Hook specifications for the configurator plugin system."""

    @hookspec
    def register_converters(self) -> dict[type, Callable[[Any], Any]] | None:
        """Return target type -> converter mappings for the converter registry."""

    @hookspec
    def register_type_names(self) -> dict[str, type] | None:
        """Return name -> type mappings usable as ``--type`` on the command line."""
