"""Primitive kinds and fixed-width scalar types.

The engine knows a closed set of primitive kinds. Builtin ``int`` keeps
arbitrary precision; the fixed-width types below wrap on construction the way
machine integers do, and :class:`Float32` rounds to single precision.

A user type inherits the kind of its first kinded base, so ``class Port(Uint16)``
or ``class Color(StrEnum)`` behave as aliases of ``uint16`` and ``str``.
"""

from __future__ import annotations

import math
import struct
from enum import StrEnum
from typing import Any, ClassVar


class Kind(StrEnum):
    """Primitive kinds recognized by conversion and native comparison."""

    BOOL = "bool"
    INT = "int"
    INT8 = "int8"
    INT16 = "int16"
    INT32 = "int32"
    INT64 = "int64"
    UINT = "uint"
    UINT8 = "uint8"
    UINT16 = "uint16"
    UINT32 = "uint32"
    UINT64 = "uint64"
    FLOAT32 = "float32"
    FLOAT64 = "float64"
    STR = "str"
    OTHER = "other"


SIGNED_BITS: dict[Kind, int] = {
    Kind.INT8: 8,
    Kind.INT16: 16,
    Kind.INT32: 32,
    Kind.INT64: 64,
}

UNSIGNED_BITS: dict[Kind, int] = {
    Kind.UINT: 64,
    Kind.UINT8: 8,
    Kind.UINT16: 16,
    Kind.UINT32: 32,
    Kind.UINT64: 64,
}

INTEGER_KINDS = frozenset({Kind.INT, *SIGNED_BITS, *UNSIGNED_BITS})
FLOAT_KINDS = frozenset({Kind.FLOAT32, Kind.FLOAT64})
NUMERIC_KINDS = INTEGER_KINDS | FLOAT_KINDS
ORDERED_KINDS = NUMERIC_KINDS | {Kind.STR}


def wrap_signed(value: int, bits: int) -> int:
    """Wrap *value* into a two's-complement integer of *bits* width."""
    value &= (1 << bits) - 1
    if value >= 1 << (bits - 1):
        value -= 1 << bits
    return value


def wrap_unsigned(value: int, bits: int) -> int:
    """Wrap *value* into an unsigned integer of *bits* width."""
    return value & ((1 << bits) - 1)


def round_float32(value: float) -> float:
    """Round *value* to the nearest IEEE-754 single precision float."""
    if math.isnan(value) or math.isinf(value):
        return value
    try:
        return struct.unpack("f", struct.pack("f", value))[0]
    except OverflowError:
        return math.copysign(math.inf, value)


class _FixedInt(int):
    """Base for fixed-width integers. Construction wraps into range."""

    kind: ClassVar[Kind]

    def __new__(cls, value: Any = 0) -> _FixedInt:
        return super().__new__(cls, coerce(value, cls.kind))

    def __repr__(self) -> str:
        return f"{type(self).__name__}({int.__repr__(self)})"

    def __str__(self) -> str:
        return int.__repr__(self)


class Int8(_FixedInt):
    kind = Kind.INT8


class Int16(_FixedInt):
    kind = Kind.INT16


class Int32(_FixedInt):
    kind = Kind.INT32


class Int64(_FixedInt):
    kind = Kind.INT64


class Uint(_FixedInt):
    kind = Kind.UINT


class Uint8(_FixedInt):
    kind = Kind.UINT8


class Uint16(_FixedInt):
    kind = Kind.UINT16


class Uint32(_FixedInt):
    kind = Kind.UINT32


class Uint64(_FixedInt):
    kind = Kind.UINT64


class Float32(float):
    """Single precision float. Construction rounds to the nearest float32."""

    kind: ClassVar[Kind] = Kind.FLOAT32

    def __new__(cls, value: Any = 0.0) -> Float32:
        return super().__new__(cls, coerce(value, Kind.FLOAT32))

    def __repr__(self) -> str:
        return f"Float32({float.__repr__(self)})"

    def __str__(self) -> str:
        return float.__repr__(self)


# Order matters only for documentation; lookup walks the MRO.
_BASE_KINDS: dict[type, Kind] = {
    bool: Kind.BOOL,
    Int8: Kind.INT8,
    Int16: Kind.INT16,
    Int32: Kind.INT32,
    Int64: Kind.INT64,
    Uint: Kind.UINT,
    Uint8: Kind.UINT8,
    Uint16: Kind.UINT16,
    Uint32: Kind.UINT32,
    Uint64: Kind.UINT64,
    Float32: Kind.FLOAT32,
    int: Kind.INT,
    float: Kind.FLOAT64,
    str: Kind.STR,
}

KIND_TYPES: dict[Kind, type] = {kind: tp for tp, kind in _BASE_KINDS.items()}


def kind_of(tp: type) -> Kind:
    """Return the primitive kind of type *tp* (``Kind.OTHER`` if none)."""
    for base in tp.__mro__:
        kind = _BASE_KINDS.get(base)
        if kind is not None:
            return kind
    return Kind.OTHER


def is_convertible(source: Kind, target: Kind) -> bool:
    """Whether a value of kind *source* may be converted to kind *target*.

    Numeric kinds convert among themselves; ``str`` and ``bool`` only to
    themselves. ``bool`` is never numeric.
    """
    if source in NUMERIC_KINDS and target in NUMERIC_KINDS:
        return True
    return source is target and source is not Kind.OTHER


def coerce(value: Any, kind: Kind) -> Any:
    """Return the raw representation of *value* in *kind*.

    Integers wrap, floats truncate toward zero into integer kinds, and
    ``float32`` rounds. Raises ``ValueError`` or ``OverflowError`` for values
    with no representation (NaN or infinity into an integer kind).
    """
    if kind in INTEGER_KINDS:
        raw = int(value)
        if kind in SIGNED_BITS:
            return wrap_signed(raw, SIGNED_BITS[kind])
        if kind in UNSIGNED_BITS:
            return wrap_unsigned(raw, UNSIGNED_BITS[kind])
        return raw
    if kind is Kind.FLOAT32:
        return round_float32(float(value))
    if kind is Kind.FLOAT64:
        return float(value)
    if kind is Kind.STR:
        return str(value)
    if kind is Kind.BOOL:
        return bool(value)
    raise ValueError(f"kind '{kind}' has no primitive representation")
