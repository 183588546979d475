"""CfgSettings: one frozen object for everything a command needs to know.

Sources, first match wins:

1. keyword arguments (the CLI flags click collected)
2. ``CONFIGURATOR_*`` environment variables, ``__`` for nesting
   (``CONFIGURATOR_LOG__SECRET=true``)
3. ``configurator.toml``, explicit or found by :func:`find_config`
4. the defaults in :mod:`configurator.config.models`

Sections merge field by field, so an env var can flip ``log.secret`` while
the rest of ``[log]`` still comes from the file.
"""

from __future__ import annotations

import tomllib
from contextvars import ContextVar
from pathlib import Path
from typing import Any

import click
from pydantic import Field
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, TomlConfigSettingsSource

from configurator.config.discovery import find_config
from configurator.config.models import LogConfig, PluginsConfig, ProfileConfig

# The TOML file for the settings object under construction; pydantic-settings
# builds its sources from the class, so the path travels out of band.
_toml_file: ContextVar[Path | None] = ContextVar("configurator_toml_file", default=None)


class CfgSettings(BaseSettings):
    """Resolved settings for one CLI invocation.

    ``project_root`` is the directory holding the TOML file (or the working
    directory when there is none); local plugins are looked up below it.
    """

    model_config = {
        "frozen": True,
        "env_prefix": "CONFIGURATOR_",
        "env_nested_delimiter": "__",
    }

    project_root: Path = Field(default_factory=Path.cwd)
    config_path: Path | None = None

    json_output: bool = False
    quiet: bool = False
    verbose: bool = False
    log_json: bool = False

    log: LogConfig = Field(default_factory=LogConfig)
    plugins: PluginsConfig = Field(default_factory=PluginsConfig)
    profiles: dict[str, ProfileConfig] = Field(default_factory=dict)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,
            env_settings,
            TomlConfigSettingsSource(settings_cls, toml_file=_toml_file.get()),
        )

    @property
    def plugin_dir(self) -> Path:
        return self.project_root / self.plugins.local_dir

    @classmethod
    def from_cli(
        cls,
        *,
        config_path: str | None = None,
        project_root: Path | None = None,
        **cli_flags: Any,
    ) -> CfgSettings:
        """Build settings for a command.

        An explicit *config_path* that does not exist means "no file"; without
        one the file is searched upward from *project_root*.

        Raises:
            click.ClickException: the TOML file does not parse.
        """
        if config_path:
            toml_path = Path(config_path) if Path(config_path).is_file() else None
        else:
            toml_path = find_config(project_root)
        if project_root is None:
            project_root = toml_path.parent if toml_path else Path.cwd()

        token = _toml_file.set(toml_path)
        try:
            return cls(project_root=project_root, config_path=toml_path, **cli_flags)
        except tomllib.TOMLDecodeError as exc:
            msg = f"Invalid TOML in {toml_path}: {exc}"
            raise click.ClickException(msg) from exc
        finally:
            _toml_file.reset(token)
