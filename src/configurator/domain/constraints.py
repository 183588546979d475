"""Constraint sets and the validation pipeline.

Pipeline for one value: normalize -> validate default -> check candidate ->
substitute default. Checks always run in the same order and stop at the first
failure: min, max, allowed, disallowed.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel

from configurator.domain.compare import compare, has_equal
from configurator.domain.errors import (
    ComparisonError,
    ConstraintAuthoringError,
    ConstraintViolation,
    ConversionError,
)
from configurator.domain.convert import convert_not_none, convert_sequence


class Constraints(BaseModel):
    """Immutable bag of optional constraints. ``None`` means absent.

    ``current`` overrides the value read from the destination.
    """

    model_config = {"frozen": True}

    min: Any = None
    max: Any = None
    allowed: tuple[Any, ...] | None = None
    disallowed: tuple[Any, ...] | None = None
    default: Any = None
    current: Any = None

    def with_min(self, value: Any) -> Constraints:
        return self.model_copy(update={"min": value})

    def with_max(self, value: Any) -> Constraints:
        return self.model_copy(update={"max": value})

    def with_allowed(self, *values: Any) -> Constraints:
        return self.model_copy(update={"allowed": tuple(values)})

    def with_disallowed(self, *values: Any) -> Constraints:
        return self.model_copy(update={"disallowed": tuple(values)})

    def with_default(self, value: Any) -> Constraints:
        return self.model_copy(update={"default": value})

    def with_current(self, value: Any) -> Constraints:
        return self.model_copy(update={"current": value})


@dataclass(frozen=True)
class Valid:
    """The checked value satisfied every constraint."""

    value: Any


@dataclass(frozen=True)
class Invalid:
    """The checked value failed; *reason* names the constraint."""

    reason: ConstraintViolation


def format_values(values: Iterable[Any]) -> str:
    """Render values as ``['a','b']`` for messages."""
    return "[" + ",".join(f"'{value}'" for value in values) + "]"


def normalize(constraints: Constraints, target_type: type) -> Constraints:
    """Convert every present constraint value into *target_type*.

    Raises:
        ConstraintAuthoringError: naming the first field that does not convert.
    """
    update: dict[str, Any] = {}
    for field in ("current", "default", "min", "max"):
        try:
            update[field] = convert_not_none(target_type, getattr(constraints, field))
        except ConversionError as exc:
            raise _invalid_field(field, f"invalid {field} value", exc) from exc
    for field in ("allowed", "disallowed"):
        try:
            update[field] = convert_sequence(target_type, getattr(constraints, field))
        except ConversionError as exc:
            raise _invalid_field(field, f"invalid {field} values", exc) from exc
    return constraints.model_copy(update=update)


def _invalid_field(field: str, label: str, exc: Exception) -> ConstraintAuthoringError:
    context = dict(getattr(exc, "context", {}))
    context["field"] = field
    return ConstraintAuthoringError(f"{label}: {exc}", context=context)


def _violation(message: str, constraint: str, values: Any) -> Invalid:
    return Invalid(
        ConstraintViolation(message, context={"constraint": constraint, "values": values})
    )


def check(value: Any, constraints: Constraints) -> Valid | Invalid:
    """Check *value* against already-normalized *constraints*.

    Raises:
        ConstraintAuthoringError: min or max can not be ordered against *value*.
    """
    if constraints.min is not None:
        try:
            result = compare(value, constraints.min)
        except ComparisonError as exc:
            raise _invalid_field("min", "invalid min value", exc) from exc
        if result == -1:
            return _violation(
                f"argument should be greater than or equal to '{constraints.min}'",
                "min",
                constraints.min,
            )
    if constraints.max is not None:
        try:
            result = compare(value, constraints.max)
        except ComparisonError as exc:
            raise _invalid_field("max", "invalid max value", exc) from exc
        if result == 1:
            return _violation(
                f"argument should be lower than or equal to '{constraints.max}'",
                "max",
                constraints.max,
            )
    if constraints.allowed and not has_equal(value, constraints.allowed):
        return _violation(
            f"argument should be in allowed values {format_values(constraints.allowed)}",
            "allowed",
            constraints.allowed,
        )
    if constraints.disallowed and has_equal(value, constraints.disallowed):
        return _violation(
            f"argument should not be in disallowed values {format_values(constraints.disallowed)}",
            "disallowed",
            constraints.disallowed,
        )
    return Valid(value)


def validate(value: Any, constraints: Constraints) -> Any:
    """Return *value* if it satisfies *constraints*, else raise the violation."""
    outcome = check(value, constraints)
    if isinstance(outcome, Invalid):
        raise outcome.reason
    return outcome.value


def resolve(target: Any, constraints: Constraints) -> Any:
    """Pick the value to assign for *target* under normalized *constraints*.

    The default must satisfy the constraints itself. The candidate is
    ``constraints.current`` when present, else *target*. A failing candidate is
    replaced by the default when there is one.

    Raises:
        ConstraintAuthoringError: the default violates the constraints.
        ConstraintViolation: the candidate fails and there is no default.
    """
    if constraints.default is not None:
        try:
            validate(constraints.default, constraints)
        except (ConstraintViolation, ConstraintAuthoringError) as exc:
            raise ConstraintAuthoringError(
                f"default value error: {exc}",
                context={**exc.context, "field": "default"},
            ) from exc

    candidate = constraints.current if constraints.current is not None else target
    try:
        outcome = check(candidate, constraints)
    except ConstraintAuthoringError as exc:
        raise exc.wrap("target value error") from exc
    if isinstance(outcome, Valid):
        return outcome.value
    if constraints.default is not None:
        return constraints.default
    raise outcome.reason.wrap("target value error")
