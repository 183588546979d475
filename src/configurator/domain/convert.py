"""Conversion of runtime values into a target type.

Rules, first match wins:

1. ``None`` never converts.
2. A value already of the target type is returned unchanged.
3. A converter registered for the target type (or one of its bases) is used.
4. Kind rules from :mod:`configurator.domain.kinds`: numeric to numeric,
   ``str`` to ``str``, ``bool`` to ``bool``.
5. Any other target accepts instances of itself.
"""

from __future__ import annotations

import threading
from collections.abc import Callable, Iterable
from typing import Any

from configurator.domain.errors import ConversionError
from configurator.domain.kinds import Kind, coerce, is_convertible, kind_of

Converter = Callable[[Any], Any]

_registry: dict[type, Converter] = {}
_registry_lock = threading.Lock()


def register_converter(target_type: type, converter: Converter) -> None:
    """Register *converter* for values converted into *target_type*.

    The converter receives the source value and returns an instance of
    *target_type*. ``ValueError``, ``TypeError`` and ``ArithmeticError``
    raised by it are reported as :class:`ConversionError`.
    """
    if not callable(converter):
        msg = f"converter for '{target_type.__name__}' should be callable"
        raise TypeError(msg)
    with _registry_lock:
        _registry[target_type] = converter


def unregister_converter(target_type: type) -> None:
    """Remove the converter registered for *target_type*, if any."""
    with _registry_lock:
        _registry.pop(target_type, None)


def registered_converters() -> dict[type, Converter]:
    """Return a snapshot of the converter registry."""
    with _registry_lock:
        return dict(_registry)


def _find_converter(target_type: type) -> Converter | None:
    registry = _registry
    for base in target_type.__mro__:
        converter = registry.get(base)
        if converter is not None:
            return converter
    return None


def _type_name(tp: type) -> str:
    return tp.__name__


def _not_convertible(value: Any, target_type: type, cause: Exception | None = None) -> ConversionError:
    source_name = _type_name(type(value))
    target_name = _type_name(target_type)
    message = f"argument of type '{source_name}' should be convertible to type '{target_name}'"
    if cause is not None:
        message = f"{message}: {cause}"
    return ConversionError(
        message,
        context={"source_type": source_name, "target_type": target_name},
    )


def convert(target_type: type, value: Any) -> Any:
    """Convert *value* into *target_type*.

    Raises:
        ConversionError: *value* is ``None`` or not convertible.
    """
    if value is None:
        raise ConversionError(
            "argument should not be None",
            context={"target_type": _type_name(target_type)},
        )
    if type(value) is target_type:
        return value

    converter = _find_converter(target_type)
    if converter is not None:
        try:
            return converter(value)
        except (ValueError, TypeError, ArithmeticError) as exc:
            raise _not_convertible(value, target_type, exc) from exc

    target_kind = kind_of(target_type)
    if target_kind is Kind.OTHER:
        if isinstance(value, target_type):
            return value
        raise _not_convertible(value, target_type)

    if not is_convertible(kind_of(type(value)), target_kind):
        raise _not_convertible(value, target_type)
    try:
        return target_type(coerce(value, target_kind))
    except (ValueError, TypeError, ArithmeticError) as exc:
        raise _not_convertible(value, target_type, exc) from exc


def convert_not_none(target_type: type, value: Any) -> Any:
    """Like :func:`convert`, but an absent value stays absent."""
    if value is None:
        return None
    return convert(target_type, value)


def convert_sequence(target_type: type, values: Iterable[Any] | None) -> tuple[Any, ...] | None:
    """Convert every element of *values*, failing on the first bad element.

    Raises:
        ConversionError: with ``index`` in its context.
    """
    if values is None:
        return None
    result: list[Any] = []
    for index, value in enumerate(values):
        try:
            result.append(convert(target_type, value))
        except ConversionError as exc:
            raise ConversionError(
                f"invalid element at index '{index}': {exc.message}",
                context={**exc.context, "index": index},
            ) from exc
    return tuple(result)
