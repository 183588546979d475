"""Configurator: immutable builder over the validation pipeline.

Every ``with_*`` call returns a new Configurator; a configured instance can be
shared freely and reused for any number of values::

    port = Ref(0)
    DEFAULT.with_name("server.port").with_min(1).with_max(65535).with_default(8080).configure(port)

The audit log line has one fixed callback shape, ``log_fn(context, format, args)``.
Use :func:`structlog_logger` or :func:`printf_logger` to adapt other loggers.
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any

import structlog

from configurator.config.logging import AUDIT_LOGGER
from configurator.domain.compare import equal
from configurator.domain.constraints import Constraints, Invalid, Valid, check, normalize, resolve
from configurator.domain.constraints import validate as validate_value
from configurator.domain.convert import convert
from configurator.domain.errors import (
    ConfiguratorError,
    LoggerConfigurationError,
    NotConfigurableError,
)
from configurator.domain.refs import Handle, UnboundReferenceError

logger = logging.getLogger(__name__)

LogFn = Callable[[Mapping[str, Any], str, tuple[Any, ...]], None]

SECRET_MARKER = "*secret*"
DEFAULT_VALUE_FORMAT = "'%s'"


def _check_log_fn(log_fn: Any) -> None:
    """Reject callbacks that can not be called as ``log_fn(context, format, args)``."""
    if not callable(log_fn):
        msg = f"invalid logger function type '{type(log_fn).__name__}' (logger should be callable)"
        raise LoggerConfigurationError(msg)
    try:
        signature = inspect.signature(log_fn)
    except (TypeError, ValueError):
        return
    try:
        signature.bind({}, "", ())
    except TypeError as exc:
        msg = (
            f"invalid logger function signature '{signature}' "
            "(logger should accept '(context, format, args)')"
        )
        raise LoggerConfigurationError(msg) from exc


def _check_value_format(value_format: Any) -> None:
    """Reject value formats that do not render exactly one value."""
    if not isinstance(value_format, str):
        msg = f"invalid log value format type '{type(value_format).__name__}' (should be str)"
        raise LoggerConfigurationError(msg)
    try:
        value_format % (0,)
    except (TypeError, ValueError) as exc:
        msg = f"invalid log value format '{value_format}' (should format exactly one value)"
        raise LoggerConfigurationError(msg) from exc


def structlog_logger(log: Any = None, *, level: str = "info") -> LogFn:
    """Adapt a structlog logger: context becomes bound key-value pairs."""
    target = log if log is not None else structlog.get_logger(AUDIT_LOGGER)

    def log_fn(context: Mapping[str, Any], fmt: str, args: tuple[Any, ...]) -> None:
        getattr(target, level)(fmt % args, **context)

    return log_fn


def printf_logger(fn: Callable[[str], Any]) -> LogFn:
    """Adapt any single-message callable such as ``print`` or ``Logger.info``."""

    def log_fn(context: Mapping[str, Any], fmt: str, args: tuple[Any, ...]) -> None:
        fn(fmt % args)

    return log_fn


@dataclass(frozen=True)
class Configurator:
    """Validate a value against constraints and assign the result.

    Attributes:
        name: Configuration name used in log lines and error messages.
        log_fn: Audit callback, or None to disable audit logging.
        log_context: Fields passed to every audit call.
        log_changes_only: Log only when the assigned value differs from the input.
        log_value_format: ``%``-format applied to each logged value.
        secret: Replace every logged value with ``*secret*``.
        constraints: The constraint set.
    """

    name: str = ""
    log_fn: LogFn | None = None
    log_context: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))
    log_changes_only: bool = False
    log_value_format: str = DEFAULT_VALUE_FORMAT
    secret: bool = False
    constraints: Constraints = field(default_factory=Constraints)

    # --- Builder ---

    def with_logger(self, log_fn: LogFn | None) -> Configurator:
        """Set the audit callback. Raises LoggerConfigurationError for a bad shape."""
        if log_fn is not None:
            _check_log_fn(log_fn)
        return replace(self, log_fn=log_fn)

    def with_log_secret(self) -> Configurator:
        return replace(self, secret=True)

    def with_log_changes_only(self, log_changes_only: bool = True) -> Configurator:
        return replace(self, log_changes_only=log_changes_only)

    def with_log_value_format(self, log_value_format: str) -> Configurator:
        """Set the per-value format, e.g. ``"%s"`` or ``"%r"``. Empty restores the default.

        Raises LoggerConfigurationError unless the format takes exactly one value.
        """
        if log_value_format:
            _check_value_format(log_value_format)
        return replace(self, log_value_format=log_value_format or DEFAULT_VALUE_FORMAT)

    def with_context(self, **fields: Any) -> Configurator:
        return replace(self, log_context=MappingProxyType({**self.log_context, **fields}))

    def with_name(self, name: str) -> Configurator:
        return replace(self, name=name)

    def with_constraints(self, constraints: Constraints) -> Configurator:
        return replace(self, constraints=constraints)

    def with_min(self, value: Any) -> Configurator:
        return replace(self, constraints=self.constraints.with_min(value))

    def with_max(self, value: Any) -> Configurator:
        return replace(self, constraints=self.constraints.with_max(value))

    def with_allowed(self, *values: Any) -> Configurator:
        return replace(self, constraints=self.constraints.with_allowed(*values))

    def with_disallowed(self, *values: Any) -> Configurator:
        return replace(self, constraints=self.constraints.with_disallowed(*values))

    def with_default(self, value: Any) -> Configurator:
        return replace(self, constraints=self.constraints.with_default(value))

    def with_current(self, value: Any) -> Configurator:
        return replace(self, constraints=self.constraints.with_current(value))

    # --- Operations ---

    def check(self, target: Any) -> Valid | Invalid:
        """Check *target* without raising for a plain constraint violation."""
        try:
            target = convert(type(target), target)
            constraints = normalize(self.constraints, type(target))
            return check(target, constraints)
        except ConfiguratorError as exc:
            raise self._wrap_error("validation", exc) from exc

    def validate(self, target: Any) -> Any:
        """Return *target* if it satisfies the constraints.

        Raises:
            ConversionError: *target* is None.
            ConstraintAuthoringError: a constraint does not convert to the target type.
            ConstraintViolation: *target* fails a constraint.
        """
        try:
            target = convert(type(target), target)
            constraints = normalize(self.constraints, type(target))
            return validate_value(target, constraints)
        except ConfiguratorError as exc:
            raise self._wrap_error("validation", exc) from exc

    def configure(self, handle: Handle) -> Any:
        """Validate the value behind *handle* and write back the result.

        The candidate is the ``current`` override if set, else the value read
        through *handle*. A failing candidate is replaced by the default when
        one is configured. Nothing is written when an error is raised.

        Returns:
            The value written through *handle*.
        """
        try:
            target = self._read(handle)
            constraints = normalize(self.constraints, type(target))
            result = resolve(target, constraints)
        except ConfiguratorError as exc:
            raise self._wrap_error("configuration", exc) from exc

        candidate = constraints.current if constraints.current is not None else target
        if not self.log_changes_only or not equal(candidate, result):
            replace(self, constraints=constraints).log(candidate, result)
        handle.set(result)
        logger.debug("Configured %s", self.name or type(result).__name__)
        return result

    # --- Internals ---

    @staticmethod
    def _read(handle: Any) -> Any:
        prefix = "target value is not configurable"
        if handle is None:
            raise NotConfigurableError(f"{prefix}: argument should be a reference")
        if not isinstance(handle, Handle):
            raise NotConfigurableError(
                f"{prefix}: argument of type '{type(handle).__name__}' should be a reference",
                context={"type": type(handle).__name__},
            )
        try:
            return handle.get()
        except UnboundReferenceError as exc:
            raise NotConfigurableError(
                f"{prefix}: argument of type '{type(handle).__name__}' should not be unbound",
                context={"type": type(handle).__name__},
            ) from exc

    def _wrap_error(self, action: str, exc: ConfiguratorError) -> ConfiguratorError:
        if self.name:
            return exc.wrap(f"{action} of '{self.name}' error")
        return exc.wrap(f"{action} error")

    def log(self, input_value: Any, output_value: Any) -> None:
        """Emit the audit line for one configuration."""
        if self.log_fn is None:
            return
        value_format = SECRET_MARKER if self.secret else self.log_value_format
        parts: list[str] = ["configuration"]
        args: list[Any] = []
        if self.name:
            parts.append(" of '%s'")
            args.append(self.name)
        parts.append(":")

        def add(label: str, *values: Any, listed: bool = False) -> None:
            rendered = ",".join([value_format] * len(values))
            parts.append(f" {label}: [{rendered}]" if listed else f" {label}: {rendered}")
            if not self.secret:
                args.extend(values)

        c = self.constraints
        if c.min is not None:
            add("min", c.min)
        if c.max is not None:
            add("max", c.max)
        if c.allowed:
            add("allowed", *c.allowed, listed=True)
        if c.disallowed:
            add("disallowed", *c.disallowed, listed=True)
        if c.default is not None:
            add("default", c.default)
        add("input", input_value)
        add("output", output_value)

        self.log_fn(self.log_context, "".join(parts), tuple(args))


DEFAULT = Configurator().with_logger(structlog_logger())
SECRET = DEFAULT.with_log_secret()
