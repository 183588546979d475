"""Operation-specific Rich renderers for ServiceResult.

Renderers are dispatched by ``result.op`` in :func:`render_result`; unknown
ops fall through to a generic key-value renderer.
"""

from __future__ import annotations

import json as _json
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from rich.text import Text

from configurator.output.console import create_console, get_output
from configurator.services.configurator import SECRET_MARKER

if TYPE_CHECKING:
    from rich.console import Console

    from configurator.services.result import ServiceResult

Renderer = Callable[..., None]

_ORDER_SYMBOLS = {-1: "<", 0: "=", 1: ">"}
_ORDER_STYLES = {-1: "cfg.lower", 0: "cfg.value", 1: "cfg.greater"}


# ── Public API ────────────────────────────────────────────────────────


def render_result(result: ServiceResult, *, verbose: bool = False) -> str:
    """Render a ServiceResult to a styled string via Rich."""
    console = create_console()
    if result.ok:
        renderer = _OP_RENDERERS.get(result.op, _render_generic)
        renderer(result, console, verbose=verbose)
    else:
        _render_error(result, console, verbose=verbose)
    return get_output(console).rstrip("\n")


def render_quiet(result: ServiceResult) -> str:
    """Render minimal output for ``--quiet`` mode: the bare result value."""
    if not result.ok:
        msg = result.error.message if result.error else "Unknown error"
        return f"ERROR: {result.op}: {msg}"
    for key in ("output", "result"):
        if key in result.data:
            return str(result.data[key])
    return f"OK: {result.op}"


# ── Helpers ───────────────────────────────────────────────────────────


def _status_line(console: Console, result: ServiceResult) -> None:
    console.print(Text("OK", style="cfg.ok"), Text(f"  {result.op}", style="cfg.op"), sep="")


def _field(console: Console, key: str, value: Any, style: str = "") -> None:
    if value == SECRET_MARKER:
        style = "cfg.secret"
    console.print(
        Text(f"  {key}: ", style="cfg.key"),
        Text(str(value), style=style),
        sep="",
        soft_wrap=True,
    )


def _render_error(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    err = result.error
    msg = err.message if err else "Unknown error"
    console.print(
        Text("ERROR", style="cfg.error"),
        Text(f"  {result.op}", style="cfg.op"),
        Text(": "),
        Text(msg),
        sep="",
        soft_wrap=True,
    )
    if verbose and err and err.detail:
        console.print(Text("  detail:", style="dim"))
        for k, v in err.detail.items():
            console.print(Text(f"    {k}: {v}"), soft_wrap=True)


# ── Operation renderers ───────────────────────────────────────────────


def _render_check(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    d = result.data
    _status_line(console, result)
    _field(console, "type", d.get("type", ""))
    _field(console, "input", d.get("input"))
    _field(console, "output", d.get("output"), "cfg.value")
    if d.get("changed"):
        _field(console, "changed", "yes (default applied)", "cfg.changed")


def _render_compare(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    d = result.data
    order = d.get("result", 0)
    _status_line(console, result)
    console.print(
        Text(f"  {d.get('left')} "),
        Text(_ORDER_SYMBOLS.get(order, "?"), style=_ORDER_STYLES.get(order, "")),
        Text(f" {d.get('right')}"),
        sep="",
        soft_wrap=True,
    )
    if verbose:
        _field(console, "type", d.get("type", ""))
        _field(console, "result", order)
        _field(console, "equal", d.get("equal"))


def _render_convert(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    d = result.data
    _status_line(console, result)
    _field(console, d.get("from", "input"), d.get("input"))
    _field(console, d.get("to", "output"), d.get("output"), "cfg.value")


def _render_generic(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Fallback renderer: status line + all data as key-value pairs."""
    _status_line(console, result)
    for key, value in result.data.items():
        if isinstance(value, (dict, list)):
            _field(console, key, _json.dumps(value, separators=(",", ":")))
        else:
            _field(console, key, value)


# ── Dispatch table ────────────────────────────────────────────────────

_OP_RENDERERS: dict[str, Renderer] = {
    "check": _render_check,
    "compare": _render_compare,
    "convert": _render_convert,
}
