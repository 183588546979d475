"""Shared pytest fixtures for configurator tests."""

from __future__ import annotations

import logging
import os
from collections.abc import Generator
from pathlib import Path
from typing import Any

import pytest
from click.testing import CliRunner

from configurator.config.settings import CfgSettings


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Drop CONFIGURATOR_* variables leaking in from the calling shell."""
    for key in list(os.environ):
        if key.startswith("CONFIGURATOR_"):
            monkeypatch.delenv(key)


@pytest.fixture(autouse=True)
def _restore_logging() -> Generator[None]:
    """Restore logger state changed by configure_logging()."""
    root = logging.getLogger()
    original_handlers = root.handlers[:]
    original_level = root.level
    levels = {
        name: logging.getLogger(name).level
        for name in ("configurator", "configurator.audit", "pluggy")
    }
    yield
    root.handlers = original_handlers
    root.setLevel(original_level)
    for name, level in levels.items():
        logging.getLogger(name).setLevel(level)


@pytest.fixture
def project_root(tmp_path: Path) -> Path:
    """Empty project directory with no configurator.toml."""
    return tmp_path


@pytest.fixture
def settings(project_root: Path) -> CfgSettings:
    """Settings for an empty project."""
    return CfgSettings.from_cli(project_root=project_root)


@pytest.fixture
def _isolated_project(project_root: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Change CWD to a temp project so the CLI discovers no stray config.

    Use via ``@pytest.mark.usefixtures("_isolated_project")``.
    """
    monkeypatch.chdir(project_root)


# ---------------------------------------------------------------------------
# Shared test helpers
# ---------------------------------------------------------------------------

PORT_PROFILE_TOML = """\
[log]
changes_only = false

[profiles.port]
type = "uint16"
min = 1
max = 65535
default = 8080

[profiles.level]
type = "str"
allowed = ["debug", "info", "warning"]

[profiles.password]
type = "str"
disallowed = ["password", "123456"]
secret = true
"""


def write_config(root: Path, content: str = PORT_PROFILE_TOML) -> Path:
    """Write ``configurator.toml`` under *root* and return its path."""
    path = root / "configurator.toml"
    path.write_text(content, encoding="utf-8")
    return path


class LogRecorder:
    """Audit callback collecting ``(context, format, args)`` calls."""

    def __init__(self) -> None:
        self.calls: list[tuple[dict[str, Any], str, tuple[Any, ...]]] = []

    def __call__(self, context: Any, fmt: str, args: tuple[Any, ...]) -> None:
        self.calls.append((dict(context), fmt, args))

    @property
    def lines(self) -> list[str]:
        return [fmt % args for _, fmt, args in self.calls]
