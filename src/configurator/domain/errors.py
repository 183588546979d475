"""Exception hierarchy for configurator.

Every runtime failure of the engine or the pipeline is a
:class:`ConfiguratorError`. Each carries a human-readable message (callers
pattern-match on the wording) and a ``context`` dict with the structured
pieces of that message (type names, field, offending values).

Example:
    ```python
    try:
        Configurator().with_min(1).configure(ref)
    except ConstraintViolation as e:
        print(e)  # configuration error: target value error: argument should be ...
        print(e.context["constraint"])  # "min"
    ```

Two errors deliberately live outside the hierarchy:

- :class:`LoggerConfigurationError` is a programming mistake detected while
  building a configurator and is raised immediately from ``with_logger``.
- :class:`~configurator.domain.refs.UnboundReferenceError` is raised by
  handles and converted to :class:`NotConfigurableError` by ``configure``.
"""

from __future__ import annotations

from typing import Any, Self


class ConfiguratorError(Exception):
    """Base exception for all configurator runtime errors.

    Attributes:
        context: Structured details about the error.
    """

    def __init__(self, message: str, context: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def wrap(self, prefix: str) -> Self:
        """Return a copy of this error whose message is prefixed with *prefix*.

        The copy keeps the concrete class and the context so callers can still
        catch a wrapped :class:`ConstraintViolation` as a violation.
        """
        wrapped = self.__class__(f"{prefix}: {self.message}", context=dict(self.context))
        wrapped.__cause__ = self
        return wrapped


class NotConfigurableError(ConfiguratorError):
    """The destination handle is missing, not a handle, or unbound."""


class ConversionError(ConfiguratorError):
    """A value's runtime type can not be represented as the target type."""


class ComparisonError(ConfiguratorError):
    """Neither a user capability nor a native kind can order two values."""


class CapabilityError(ConfiguratorError):
    """A user capability is missing, malformed, or returned a non-bool."""


class ConstraintAuthoringError(ConfiguratorError):
    """A constraint value itself is invalid (bad type, or a default that violates)."""


class ConstraintViolation(ConfiguratorError):
    """A value fails min, max, allowed, or disallowed."""


class LoggerConfigurationError(TypeError):
    """A logger callback with an unsupported shape was registered."""
