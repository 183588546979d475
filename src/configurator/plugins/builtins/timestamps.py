"""Built-in plugin: ISO-8601 / POSIX timestamps as a configurable type."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import pluggy

from configurator.domain.timestamps import Timestamp

hookimpl = pluggy.HookimplMarker("configurator")


class TimestampPlugin:
    """Registers :class:`Timestamp` under the ``timestamp`` type name."""

    @hookimpl
    def register_converters(self) -> dict[type, Callable[[Any], Any]]:
        return {Timestamp: Timestamp.parse}

    @hookimpl
    def register_type_names(self) -> dict[str, type]:
        return {"timestamp": Timestamp}
