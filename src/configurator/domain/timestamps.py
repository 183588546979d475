"""Timestamp: a timezone-aware datetime with ordering capabilities.

``datetime`` has no capability methods, so the engine can not order it
natively. ``Timestamp`` adds ``equal``, ``before`` and ``after`` and always
carries a timezone (naive inputs are taken as UTC), so two timestamps for the
same instant are equal whatever their offsets.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any


class Timestamp(datetime):
    """Aware datetime comparable by instant."""

    @classmethod
    def from_datetime(cls, value: datetime) -> Timestamp:
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return cls(
            value.year,
            value.month,
            value.day,
            value.hour,
            value.minute,
            value.second,
            value.microsecond,
            tzinfo=value.tzinfo,
            fold=value.fold,
        )

    @classmethod
    def parse(cls, value: Any) -> Timestamp:
        """Build a Timestamp from a datetime, an ISO-8601 string, or POSIX seconds.

        Raises ValueError or TypeError for anything else.
        """
        if isinstance(value, datetime):
            return cls.from_datetime(value)
        if isinstance(value, str):
            return cls.from_datetime(datetime.fromisoformat(value))
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            try:
                return cls.from_datetime(datetime.fromtimestamp(value, tz=UTC))
            except OSError as exc:
                raise ValueError(f"timestamp {value} is out of range") from exc
        msg = f"can not build a timestamp from '{type(value).__name__}'"
        raise TypeError(msg)

    def equal(self, other: Timestamp) -> bool:
        return datetime.__eq__(self, other) is True

    def before(self, other: Timestamp) -> bool:
        return self < other

    def after(self, other: Timestamp) -> bool:
        return self > other

    def __str__(self) -> str:
        return self.isoformat()
