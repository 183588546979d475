"""BaseService: shared foundation for CLI-facing services.

Every service receives the resolved :class:`CfgSettings` and a loaded
:class:`PluginManager`. Plugins are loaded once per manager; the built-in
timestamp plugin is always registered.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from configurator.domain.kinds import KIND_TYPES, Kind

if TYPE_CHECKING:
    from configurator.config.settings import CfgSettings
    from configurator.plugins.manager import PluginManager

logger = logging.getLogger(__name__)


def load_plugins(settings: CfgSettings) -> PluginManager:
    """Create a PluginManager with built-ins, entry points and local plugins."""
    from configurator.plugins.builtins.timestamps import TimestampPlugin
    from configurator.plugins.manager import PluginManager

    pm = PluginManager()
    pm.register_plugin(TimestampPlugin(), name="timestamp-builtin")
    if settings.plugins.enabled:
        pm.discover_and_load(local_dir=settings.plugin_dir)
    else:
        pm.discover_and_load(entry_points=False)
    return pm


class BaseService:
    """Base for CLI-facing services.

    Usage::

        class CheckService(BaseService):
            def check(self, raw: str, ...) -> ServiceResult:
                tp = self.resolve_type(type_name)
                ...
    """

    def __init__(self, settings: CfgSettings, plugins: PluginManager | None = None) -> None:
        self._settings = settings
        self._plugins = plugins if plugins is not None else load_plugins(settings)

    @property
    def settings(self) -> CfgSettings:
        return self._settings

    def type_names(self) -> dict[str, type]:
        """All names accepted for ``--type``: primitive kinds plus plugin types."""
        names: dict[str, type] = {
            kind.value: tp for kind, tp in KIND_TYPES.items() if kind is not Kind.OTHER
        }
        names.update(self._plugins.type_names)
        return names

    def resolve_type(self, type_name: str) -> type | None:
        return self.type_names().get(type_name)
