"""Log routing for the configurator CLI.

Stdlib and structlog records share a single stderr handler whose
:class:`structlog.stdlib.ProcessorFormatter` renders console text, or JSON
lines with ``--log-json``.

The audit logger carries one line per configured value. It stays at INFO
when the rest of the package is held at WARNING, so audit lines are visible
without ``--verbose``.
"""

from __future__ import annotations

import logging
import sys
from typing import TextIO

import structlog

AUDIT_LOGGER = "configurator.audit"

_PRE_CHAIN: list[structlog.types.Processor] = [
    structlog.contextvars.merge_contextvars,
    structlog.stdlib.add_log_level,
    structlog.stdlib.add_logger_name,
    structlog.processors.TimeStamper(fmt="iso"),
]


def _levels(verbose: bool) -> dict[str, int]:
    package = logging.DEBUG if verbose else logging.WARNING
    audit = logging.DEBUG if verbose else logging.INFO
    return {"configurator": package, AUDIT_LOGGER: audit, "pluggy": logging.WARNING}


def build_formatter(*, log_json: bool, stream: TextIO) -> structlog.stdlib.ProcessorFormatter:
    """Formatter rendering every record as JSON or as console text for *stream*."""
    renderer: structlog.types.Processor
    if log_json:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=stream.isatty())
    return structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=_PRE_CHAIN,
        processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
    )


def configure_logging(*, verbose: bool = False, log_json: bool = False) -> None:
    """Install the stderr handler and per-logger levels. Safe to call repeatedly."""
    structlog.configure(
        processors=[*_PRE_CHAIN, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(build_formatter(log_json=log_json, stream=sys.stderr))

    root = logging.getLogger()
    root.handlers[:] = [handler]
    root.setLevel(logging.WARNING)
    for name, level in _levels(verbose).items():
        logging.getLogger(name).setLevel(level)
