"""Equality and ordering of runtime-typed values.

User types take precedence over native comparison by exposing capability
methods, looked up by name on the value's type:

* equality: ``equal(self, other) -> bool``
* ordering: ``lower(self, other) -> bool`` / ``before``,
  ``greater(self, other) -> bool`` / ``after``

A capability is usable only when it is a plain method taking exactly one
other positional argument, annotated (if at all) as the receiver's own type or
a :class:`~configurator.domain.refs.Ref` to it, and returning a ``bool``. It is
only called when the other operand is an instance of the accepted type.
When a capability is not usable the engine falls back to builtin equality,
structural equality, or native kind ordering.

Handles on both sides are unwrapped in lockstep before any of this happens,
so ``Ref(Ref(1))`` compares like ``1``.
"""

from __future__ import annotations

import dataclasses
import functools
import inspect
import typing
from collections.abc import Iterable, Mapping
from typing import Any, Protocol, Self, runtime_checkable

from configurator.domain.errors import CapabilityError, ComparisonError
from configurator.domain.kinds import ORDERED_KINDS, coerce, is_convertible, kind_of
from configurator.domain.refs import Handle, Ref, is_bound

EQUAL_METHOD_NAMES: tuple[str, ...] = ("equal",)
LOWER_METHOD_NAMES: tuple[str, ...] = ("lower", "before")
GREATER_METHOD_NAMES: tuple[str, ...] = ("greater", "after")


@runtime_checkable
class SupportsEqual(Protocol):
    def equal(self, other: Any, /) -> bool: ...


@runtime_checkable
class SupportsLower(Protocol):
    def lower(self, other: Any, /) -> bool: ...


@runtime_checkable
class SupportsGreater(Protocol):
    def greater(self, other: Any, /) -> bool: ...


# --- Capabilities ---

_POSITIONAL = (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD)


def _argument_mode(annotation: Any, receiver_type: type) -> tuple[str, type] | None:
    """Return how the argument is passed (``"bare"`` or ``"ref"``) and its type, or None."""
    if annotation is inspect.Parameter.empty or annotation is Any or annotation is Self:
        return "bare", receiver_type
    origin = typing.get_origin(annotation) or annotation
    if isinstance(origin, type) and issubclass(origin, Ref):
        args = typing.get_args(annotation)
        if not args or args[0] is Any or args[0] is Self:
            return "ref", receiver_type
        if isinstance(args[0], type) and issubclass(receiver_type, args[0]):
            return "ref", args[0]
        return None
    if isinstance(annotation, type) and issubclass(receiver_type, annotation):
        return "bare", annotation
    return None


@functools.lru_cache(maxsize=1024)
def _resolve_capability(receiver_type: type, name: str) -> tuple[Any, str, type] | str:
    """Find capability *name* on *receiver_type*.

    Returns ``(function, mode, argument_type)`` when usable, or an error message.
    """
    type_name = receiver_type.__name__
    raw = inspect.getattr_static(receiver_type, name, None)
    if raw is None:
        return f"type '{type_name}' has no method '{name}'"

    malformed = (
        f"method '{name}' of type '{type_name}' should accept argument of type "
        f"'{type_name}' or 'Ref[{type_name}]' and should return result of type 'bool'"
    )
    if not inspect.isfunction(raw):
        return malformed
    params = list(inspect.signature(raw).parameters.values())
    if len(params) != 2 or any(p.kind not in _POSITIONAL for p in params):
        return malformed

    try:
        hints = typing.get_type_hints(raw)
    except (NameError, TypeError):
        hints = {}
    returns = hints.get("return", inspect.Parameter.empty)
    if returns is not inspect.Parameter.empty and returns is not bool:
        return malformed
    accepted = _argument_mode(hints.get(params[1].name, inspect.Parameter.empty), receiver_type)
    if accepted is None:
        return malformed
    return raw, *accepted


def call_capability(name: str, receiver: Any, argument: Any) -> bool:
    """Invoke capability *name* as ``receiver.name(argument)``.

    Raises:
        CapabilityError: the capability is missing or malformed, an operand is
            an unbound handle, the argument is not of the accepted type, or
            the call did not return a ``bool``.
    """
    if isinstance(receiver, Handle) and not is_bound(receiver):
        raise CapabilityError(
            f"method '{name}' should not be called with unbound receiver",
            context={"method": name},
        )
    if isinstance(argument, Handle) and not is_bound(argument):
        raise CapabilityError(
            f"method '{name}' should not be called with unbound argument",
            context={"method": name},
        )
    if isinstance(receiver, Handle) or isinstance(argument, Handle):
        raise CapabilityError(
            f"method '{name}' should not be called with a reference operand",
            context={"method": name},
        )

    receiver_type = type(receiver)
    resolved = _resolve_capability(receiver_type, name)
    if isinstance(resolved, str):
        raise CapabilityError(resolved, context={"method": name, "type": receiver_type.__name__})

    func, mode, argument_type = resolved
    if not isinstance(argument, argument_type):
        raise CapabilityError(
            f"method '{name}' of type '{receiver_type.__name__}' can not be called with "
            f"argument of type '{type(argument).__name__}'",
            context={"method": name, "type": receiver_type.__name__},
        )
    result = func(receiver, Ref(argument) if mode == "ref" else argument)
    if not isinstance(result, bool):
        raise CapabilityError(
            f"method '{name}' of type '{receiver_type.__name__}' should return result of "
            f"type 'bool', returned '{type(result).__name__}'",
            context={"method": name, "type": receiver_type.__name__},
        )
    return result


def indirect(a: Any, b: Any) -> tuple[Any, Any]:
    """Dereference handles on both sides while both are bound handles."""
    while isinstance(a, Handle) and isinstance(b, Handle) and is_bound(a) and is_bound(b):
        a = a.get()
        b = b.get()
    return a, b


# --- Equality ---

_MISSING: Any = object()


def _fields(obj: Any) -> dict[str, Any] | None:
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return {f.name: getattr(obj, f.name) for f in dataclasses.fields(obj)}
    fields: dict[str, Any] = {}
    found = False
    for klass in type(obj).__mro__:
        slots = klass.__dict__.get("__slots__", ())
        if isinstance(slots, str):
            slots = (slots,)
        for slot in slots:
            if slot in ("__dict__", "__weakref__"):
                continue
            found = True
            fields[slot] = getattr(obj, slot, _MISSING)
    if hasattr(obj, "__dict__"):
        found = True
        fields.update(vars(obj))
    return fields if found else None


def deep_equal(a: Any, b: Any) -> bool:
    """Structural equality: identical types and recursively equal contents."""
    if a is b:
        return True
    if type(a) is not type(b):
        return False
    if isinstance(a, Handle):
        a_bound, b_bound = is_bound(a), is_bound(b)
        if not (a_bound and b_bound):
            return a_bound == b_bound
        return deep_equal(a.get(), b.get())
    if isinstance(a, Mapping):
        if a.keys() != b.keys():
            return False
        return all(deep_equal(a[key], b[key]) for key in a)
    if isinstance(a, (list, tuple)):
        return len(a) == len(b) and all(deep_equal(x, y) for x, y in zip(a, b, strict=True))
    if not isinstance(a, (str, bytes, int, float, complex, set, frozenset)):
        a_fields, b_fields = _fields(a), _fields(b)
        if a_fields is not None and b_fields is not None:
            return deep_equal(a_fields, b_fields)
    result = a == b
    return isinstance(result, bool) and result


def equal(a: Any, b: Any) -> bool:
    """Whether *a* and *b* are equal.

    Tries the ``equal`` capability, then builtin ``==`` for operands of the
    same type, then structural equality. Values of different types are never
    equal, so ``equal(True, 1)`` and ``equal(1, 1.0)`` are both False.
    """
    left, right = indirect(a, b)
    for name in EQUAL_METHOD_NAMES:
        try:
            return call_capability(name, left, right)
        except CapabilityError:
            continue
    if type(left) is type(right):
        result = left == right
        if isinstance(result, bool) and result:
            return True
    return deep_equal(a, b)


def has_equal(target: Any, candidates: Iterable[Any] | None) -> bool:
    """Whether any of *candidates* is :func:`equal` to *target*."""
    if candidates is None:
        return False
    return any(equal(target, candidate) for candidate in candidates)


# --- Ordering ---


def _compare_by_method(name: str, left: Any, right: Any) -> int | None:
    """Order by a lower-style capability; None when unusable or contradictory."""
    try:
        lower = call_capability(name, left, right)
        greater = call_capability(name, right, left)
    except CapabilityError:
        return None
    if lower and greater:
        return None
    if lower:
        return -1
    if greater:
        return 1
    return 0


def _compare_by_methods(names: Iterable[str], left: Any, right: Any) -> int | None:
    for name in names:
        result = _compare_by_method(name, left, right)
        if result is not None:
            return result
    return None


def compare(a: Any, b: Any) -> int:
    """Order *a* against *b*: ``-1`` lower, ``0`` equal, ``1`` greater.

    Raises:
        ComparisonError: no usable capability and no native ordering.
    """
    left, right = indirect(a, b)
    result = _compare_by_methods(LOWER_METHOD_NAMES, left, right)
    if result is not None:
        return result
    result = _compare_by_methods(GREATER_METHOD_NAMES, right, left)
    if result is not None:
        return result

    kind = kind_of(type(left))
    if kind not in ORDERED_KINDS or not is_convertible(kind_of(type(right)), kind):
        raise _not_comparable(a, b)
    try:
        x, y = coerce(left, kind), coerce(right, kind)
    except (ValueError, OverflowError) as exc:
        raise _not_comparable(a, b) from exc
    if x > y:
        return 1
    if x < y:
        return -1
    return 0


def _not_comparable(a: Any, b: Any) -> ComparisonError:
    left_name, right_name = type(a).__name__, type(b).__name__
    return ComparisonError(
        f"argument of type '{left_name}' can not be lower than or greater than "
        f"value of type '{right_name}'",
        context={"left_type": left_name, "right_type": right_name},
    )
