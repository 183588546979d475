"""Rich Console factory and theme for configurator output.

Consoles render into a StringIO buffer so that ``format_result() -> str``
stays a pure function. Rich drops color codes when it sees no terminal.
"""

from __future__ import annotations

from io import StringIO

from rich.console import Console
from rich.theme import Theme

CFG_THEME = Theme(
    {
        "cfg.ok": "bold green",
        "cfg.error": "bold red",
        "cfg.warning": "bold yellow",
        "cfg.op": "bold cyan",
        "cfg.key": "dim",
        "cfg.value": "bold",
        "cfg.secret": "magenta",
        "cfg.changed": "yellow",
        "cfg.lower": "blue",
        "cfg.greater": "green",
    }
)


def create_console(*, no_color: bool = False, width: int | None = None) -> Console:
    """Create a Console that renders to a StringIO buffer.

    Args:
        no_color: Disable ANSI escape codes.
        width: Override terminal width.
    """
    return Console(
        file=StringIO(),
        theme=CFG_THEME,
        no_color=no_color,
        highlight=False,
        width=width or 120,
    )


def get_output(console: Console) -> str:
    """Extract rendered text from a StringIO-backed Console."""
    assert isinstance(console.file, StringIO)
    return console.file.getvalue()
