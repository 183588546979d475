"""Plugin discovery and loading.

Discovery: entry_points (pip-installed) via pluggy setuptools entrypoints,
plus local directory discovery from ``.configurator/plugins/``.
Capabilities: converters for user types and ``--type`` names for the CLI.
"""

from __future__ import annotations

import importlib.util
import inspect
import logging
import sys
from pathlib import Path

import pluggy

from configurator.domain.convert import register_converter
from configurator.plugins.hookspecs import ConfiguratorHookSpec

PROJECT_NAME = "configurator"
ENTRY_POINT_GROUP = "configurator.plugins"

logger = logging.getLogger(__name__)


class PluginManager:
    """Manages plugin discovery, loading, and registration of extensions."""

    def __init__(self) -> None:
        self._pm = pluggy.PluginManager(PROJECT_NAME)
        self._pm.add_hookspecs(ConfiguratorHookSpec)
        self._loaded: bool = False
        self._type_names: dict[str, type] = {}

    def discover_and_load(
        self,
        *,
        local_dir: Path | None = None,
        entry_points: bool = True,
    ) -> list[str]:
        """Discover plugins from entry points and an optional local directory.

        Uses pluggy's native setuptools entry_point discovery for the
        ``configurator.plugins`` group, then scans *local_dir* for
        single-file Python plugins. Converters and type names of every
        registered plugin are collected afterwards.

        With *entry_points* False only already-registered plugins (the
        built-ins) are collected.

        Returns a list of loaded plugin names.
        """
        if entry_points:
            self._pm.load_setuptools_entrypoints(ENTRY_POINT_GROUP)
            self._normalize_plugin_instances()
        if local_dir is not None:
            self._discover_local(local_dir)
        for plugin in self._pm.get_plugins():
            self._collect_extensions(plugin, self._plugin_name(plugin))
        self._loaded = True
        return self.list_plugin_names()

    def register_plugin(self, plugin: object, name: str | None = None) -> None:
        """Register a plugin instance directly (e.g. built-in plugins)."""
        resolved_name = name or plugin.__class__.__name__
        self._pm.register(plugin, name=resolved_name)
        if self._loaded:
            self._collect_extensions(plugin, resolved_name)
        logger.debug("Registered plugin: %s", resolved_name)

    def unregister(self, plugin: object) -> None:
        """Unregister a plugin instance."""
        self._pm.unregister(plugin)

    @property
    def is_loaded(self) -> bool:
        """Whether discover_and_load() has been called."""
        return self._loaded

    @property
    def hook(self) -> pluggy.HookRelay:
        """Access the hook relay."""
        return self._pm.hook

    @property
    def type_names(self) -> dict[str, type]:
        """Type names contributed by plugins."""
        return dict(self._type_names)

    def get_plugins(self) -> list[object]:
        """Return all registered plugins."""
        return list(self._pm.get_plugins())

    def list_plugin_names(self) -> list[str]:
        """Return names of all registered plugins."""
        return [self._plugin_name(p) for p in self._pm.get_plugins()]

    def _plugin_name(self, plugin: object) -> str:
        return self._pm.get_name(plugin) or plugin.__class__.__name__

    # ------------------------------------------------------------------
    # Local directory discovery
    # ------------------------------------------------------------------

    def _discover_local(self, local_dir: Path) -> None:
        """Scan *local_dir* for single-file Python plugins.

        Each ``*.py`` file (excluding ``_``-prefixed names) is loaded as a
        module. Classes inside the module that carry pluggy hookimpl-decorated
        methods are instantiated and registered.

        Errors are logged as warnings but never raised; a broken local plugin
        must not prevent the rest of the system from starting.
        """
        if not local_dir.is_dir():
            return

        for py_file in sorted(local_dir.glob("*.py")):
            if py_file.name.startswith("_"):
                continue
            module_name = f"configurator_local_plugin_{py_file.stem}"
            try:
                spec = importlib.util.spec_from_file_location(module_name, py_file)
                if spec is None or spec.loader is None:
                    logger.warning("Could not create module spec for %s", py_file)
                    continue
                module = importlib.util.module_from_spec(spec)
                sys.modules[module_name] = module
                spec.loader.exec_module(module)
            except Exception:
                logger.warning("Failed to load local plugin %s", py_file, exc_info=True)
                sys.modules.pop(module_name, None)
                continue

            for _attr_name, obj in inspect.getmembers(module, inspect.isclass):
                if obj.__module__ != module_name:
                    continue
                if not self._has_hook_impls(obj):
                    continue
                try:
                    instance = obj()
                    self._pm.register(instance, name=f"{module_name}.{obj.__name__}")
                    logger.debug("Loaded local plugin %s from %s", obj.__name__, py_file)
                except Exception:
                    logger.warning(
                        "Failed to instantiate plugin class %s from %s",
                        obj.__name__,
                        py_file,
                        exc_info=True,
                    )

    def _normalize_plugin_instances(self) -> None:
        """Replace registered plugin classes with instantiated objects.

        Entry-point loading may register a plugin class directly. Hook dispatch
        against class objects leaves ``self`` unbound and fails at runtime.
        """
        for plugin in list(self._pm.get_plugins()):
            if not inspect.isclass(plugin):
                continue
            if not self._has_hook_impls(plugin):
                continue

            plugin_name = self._plugin_name(plugin)
            self._pm.unregister(plugin)

            try:
                instance = plugin()
            except Exception:
                logger.warning(
                    "Failed to instantiate entry-point plugin %s",
                    plugin_name,
                    exc_info=True,
                )
                continue

            self._pm.register(instance, name=plugin_name)
            logger.debug("Instantiated entry-point plugin: %s", plugin_name)

    def _collect_extensions(self, plugin: object, plugin_name: str) -> None:
        """Register converters and type names exposed by one plugin."""
        converters = self._call_registration(plugin, plugin_name, "register_converters")
        for target_type, converter in converters.items():
            try:
                register_converter(target_type, converter)
            except (TypeError, AttributeError):
                logger.warning(
                    "Skipping converter registration %r from plugin %s",
                    target_type,
                    plugin_name,
                    exc_info=True,
                )

        type_names = self._call_registration(plugin, plugin_name, "register_type_names")
        for type_name, tp in type_names.items():
            if not isinstance(type_name, str) or not isinstance(tp, type):
                logger.warning(
                    "Skipping type name registration %r from plugin %s",
                    type_name,
                    plugin_name,
                )
                continue
            self._type_names[type_name] = tp

    @staticmethod
    def _call_registration(plugin: object, plugin_name: str, hook_name: str) -> dict:
        hook = getattr(plugin, hook_name, None)
        if hook is None:
            return {}
        try:
            mapping = hook()
        except Exception:
            logger.warning(
                "Failed to collect %s from plugin %s",
                hook_name,
                plugin_name,
                exc_info=True,
            )
            return {}
        if mapping is None:
            return {}
        if not isinstance(mapping, dict):
            logger.warning("Plugin %s returned non-dict %s", plugin_name, hook_name)
            return {}
        return mapping

    @staticmethod
    def _has_hook_impls(cls: type) -> bool:
        """Check whether *cls* has any methods decorated with ``@hookimpl``.

        Pluggy's ``HookimplMarker("configurator")`` sets a
        ``configurator_impl`` attribute on decorated methods.
        """
        for name in dir(cls):
            if name.startswith("_"):
                continue
            method = getattr(cls, name, None)
            if callable(method) and getattr(method, "configurator_impl", None):
                return True
        return False
