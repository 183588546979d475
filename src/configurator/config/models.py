"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, configurator.toml only contains
overrides. A project needs no file at all; profiles are added as needed.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

# --- configurator.toml sections ---


class LogConfig(BaseModel):
    """[log] section."""

    model_config = {"frozen": True}

    changes_only: bool = False
    value_format: str = "'%s'"
    secret: bool = False


class PluginsConfig(BaseModel):
    """[plugins] section."""

    model_config = {"frozen": True}

    enabled: bool = True
    local_dir: str = ".configurator/plugins"


class ProfileConfig(BaseModel):
    """[profiles.NAME] section: a reusable constraint set."""

    model_config = {"frozen": True}

    type: str = "int"
    min: Any = None
    max: Any = None
    allowed: list[Any] = Field(default_factory=list)
    disallowed: list[Any] = Field(default_factory=list)
    default: Any = None
    secret: bool = False


class CfgConfig(BaseModel):
    """Top-level configurator.toml model."""

    model_config = {"frozen": True}

    log: LogConfig = Field(default_factory=LogConfig)
    plugins: PluginsConfig = Field(default_factory=PluginsConfig)
    profiles: dict[str, ProfileConfig] = Field(default_factory=dict)
