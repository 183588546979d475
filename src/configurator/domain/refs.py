"""Handles: references to a caller's storage location.

``configure`` reads the current value through a handle and writes the result
back through it. Handles also act as indirections for equality and ordering:
two handles are compared by what they point at.
"""

from __future__ import annotations

from collections.abc import MutableMapping, MutableSequence
from typing import Any, Generic, Protocol, TypeVar, runtime_checkable

T = TypeVar("T")

_UNBOUND: Any = object()


class UnboundReferenceError(LookupError):
    """Raised when reading a handle that points at nothing."""


@runtime_checkable
class Handle(Protocol):
    """Anything that can read and write one storage location."""

    def get(self) -> Any: ...

    def set(self, value: Any) -> None: ...


class Ref(Generic[T]):
    """A mutable cell. ``Ref()`` is unbound until the first ``set``."""

    __slots__ = ("_value",)

    def __init__(self, value: T = _UNBOUND) -> None:
        self._value = value

    @property
    def bound(self) -> bool:
        return self._value is not _UNBOUND

    def get(self) -> T:
        if self._value is _UNBOUND:
            raise UnboundReferenceError("reference is unbound")
        return self._value

    def set(self, value: T) -> None:
        self._value = value

    def __repr__(self) -> str:
        if not self.bound:
            return "Ref(<unbound>)"
        return f"Ref({self._value!r})"


class AttrRef:
    """Handle to attribute *name* of *obj*."""

    __slots__ = ("_name", "_obj")

    def __init__(self, obj: object, name: str) -> None:
        self._obj = obj
        self._name = name

    @property
    def bound(self) -> bool:
        return hasattr(self._obj, self._name)

    def get(self) -> Any:
        try:
            return getattr(self._obj, self._name)
        except AttributeError as exc:
            msg = f"'{type(self._obj).__name__}' has no attribute '{self._name}'"
            raise UnboundReferenceError(msg) from exc

    def set(self, value: Any) -> None:
        setattr(self._obj, self._name, value)

    def __repr__(self) -> str:
        return f"AttrRef({type(self._obj).__name__}.{self._name})"


class ItemRef:
    """Handle to item *key* of a mutable mapping or sequence."""

    __slots__ = ("_container", "_key")

    def __init__(self, container: MutableMapping[Any, Any] | MutableSequence[Any], key: Any) -> None:
        self._container = container
        self._key = key

    @property
    def bound(self) -> bool:
        try:
            self._container[self._key]
        except LookupError:
            return False
        return True

    def get(self) -> Any:
        try:
            return self._container[self._key]
        except LookupError as exc:
            raise UnboundReferenceError(f"no item {self._key!r}") from exc

    def set(self, value: Any) -> None:
        self._container[self._key] = value

    def __repr__(self) -> str:
        return f"ItemRef({type(self._container).__name__}[{self._key!r}])"


def is_bound(handle: Handle) -> bool:
    """Whether *handle* currently points at a value."""
    bound = getattr(handle, "bound", None)
    if bound is not None:
        return bool(bound)
    try:
        handle.get()
    except UnboundReferenceError:
        return False
    return True
