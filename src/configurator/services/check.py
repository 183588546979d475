"""CheckService: check, compare and convert values given as text.

The CLI hands over raw strings; TOML profiles hand over TOML scalars. Both are
parsed into the requested type before the engine sees them, so the engine
only ever deals with typed values.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

from configurator.domain.compare import compare, equal
from configurator.domain.constraints import Constraints
from configurator.domain.convert import convert
from configurator.domain.errors import (
    ComparisonError,
    ConfiguratorError,
    ConstraintAuthoringError,
    ConstraintViolation,
    ConversionError,
    LoggerConfigurationError,
)
from configurator.domain.kinds import FLOAT_KINDS, INTEGER_KINDS, KIND_TYPES, Kind, kind_of
from configurator.domain.refs import Ref
from configurator.services.base import BaseService
from configurator.services.configurator import SECRET_MARKER, Configurator, structlog_logger
from configurator.services.result import ServiceResult

logger = logging.getLogger(__name__)

_TRUE = frozenset({"true", "yes", "on", "1"})
_FALSE = frozenset({"false", "no", "off", "0"})


def parse_value(raw: Any, tp: type) -> Any:
    """Parse *raw* (text or a TOML scalar) into an instance of *tp*.

    Raises:
        ConversionError: *raw* does not parse or does not convert.
    """
    if not isinstance(raw, str):
        return convert(tp, raw)
    kind = kind_of(tp)
    try:
        if kind is Kind.BOOL:
            lowered = raw.strip().lower()
            if lowered not in _TRUE | _FALSE:
                raise ValueError(f"'{raw}' is not a boolean")
            value: Any = lowered in _TRUE
        elif kind in INTEGER_KINDS:
            value = int(raw.strip(), 0)
        elif kind in FLOAT_KINDS:
            value = float(raw)
        else:
            value = raw
    except ValueError as exc:
        raise ConversionError(
            f"argument '{raw}' should be parsable as '{tp.__name__}': {exc}",
            context={"source_type": "str", "target_type": tp.__name__},
        ) from exc
    return convert(tp, value)


def render(value: Any) -> Any:
    """Render *value* as a JSON-friendly scalar."""
    if value is None:
        return None
    kind = kind_of(type(value))
    if kind is Kind.OTHER:
        return str(value)
    if kind in FLOAT_KINDS:
        return float(value)
    if kind in INTEGER_KINDS:
        return int(value)
    return KIND_TYPES[kind](value)


class CheckService(BaseService):
    """Parse, validate and assign values for the command line."""

    def check(
        self,
        raw: str,
        *,
        type_name: str | None = None,
        min_value: str | None = None,
        max_value: str | None = None,
        allowed: Sequence[str] = (),
        disallowed: Sequence[str] = (),
        default: str | None = None,
        profile: str | None = None,
        name: str | None = None,
        secret: bool | None = None,
        changes_only: bool | None = None,
    ) -> ServiceResult:
        """Validate *raw* and report the value that would be assigned.

        Explicit options override the values of *profile*.
        """
        op = "check"
        fields: dict[str, Any] = {}
        if profile is not None:
            profile_cfg = self.settings.profiles.get(profile)
            if profile_cfg is None:
                return ServiceResult.failure(
                    op,
                    "UNKNOWN_PROFILE",
                    f"No profile named '{profile}'",
                    available=sorted(self.settings.profiles),
                )
            fields = profile_cfg.model_dump()
            if secret is None:
                secret = profile_cfg.secret
        overrides = {
            "type": type_name,
            "min": min_value,
            "max": max_value,
            "allowed": list(allowed) or None,
            "disallowed": list(disallowed) or None,
            "default": default,
        }
        fields.update({key: value for key, value in overrides.items() if value is not None})
        resolved_type_name = fields.get("type") or "int"

        tp = self.resolve_type(resolved_type_name)
        if tp is None:
            return self._invalid_type(op, resolved_type_name)

        try:
            value = parse_value(raw, tp)
        except ConversionError as exc:
            return ServiceResult.failure(op, "CONVERSION_ERROR", str(exc), **exc.context)

        constraints = Constraints()
        try:
            for field in ("min", "max", "default"):
                if fields.get(field) is not None:
                    constraints = constraints.model_copy(
                        update={field: parse_value(fields[field], tp)}
                    )
            for field in ("allowed", "disallowed"):
                if fields.get(field):
                    constraints = constraints.model_copy(
                        update={field: tuple(parse_value(v, tp) for v in fields[field])}
                    )
        except ConversionError as exc:
            return ServiceResult.failure(
                op,
                "INVALID_CONSTRAINT",
                f"invalid {field} value: {exc}",
                field=field,
                **exc.context,
            )

        log_cfg = self.settings.log
        try:
            configurator = (
                Configurator()
                .with_logger(structlog_logger())
                .with_context(op=op)
                .with_name(name or profile or "")
                .with_log_value_format(log_cfg.value_format)
                .with_log_changes_only(
                    log_cfg.changes_only if changes_only is None else changes_only
                )
                .with_constraints(constraints)
            )
        except LoggerConfigurationError as exc:
            return ServiceResult.failure(op, "CONFIGURATION_ERROR", str(exc))
        is_secret = log_cfg.secret if secret is None else secret
        if is_secret:
            configurator = configurator.with_log_secret()

        ref: Ref[Any] = Ref(value)
        try:
            output = configurator.configure(ref)
        except ConstraintViolation as exc:
            return ServiceResult.failure(op, "VIOLATION", str(exc), **self._detail(exc, is_secret))
        except ConstraintAuthoringError as exc:
            return ServiceResult.failure(
                op, "INVALID_CONSTRAINT", str(exc), **self._detail(exc, is_secret)
            )
        except ConfiguratorError as exc:
            return ServiceResult.failure(op, "CONFIGURATION_ERROR", str(exc))

        changed = not equal(value, output)
        logger.debug("check %s: changed=%s", resolved_type_name, changed)
        return ServiceResult(
            ok=True,
            op=op,
            data={
                "type": resolved_type_name,
                "input": SECRET_MARKER if is_secret else render(value),
                "output": SECRET_MARKER if is_secret else render(output),
                "changed": changed,
            },
            warnings=["Input replaced by default"] if changed else [],
        )

    def compare(self, left: str, right: str, *, type_name: str = "int") -> ServiceResult:
        """Order *left* against *right* after parsing both as *type_name*."""
        op = "compare"
        tp = self.resolve_type(type_name)
        if tp is None:
            return self._invalid_type(op, type_name)
        try:
            a = parse_value(left, tp)
            b = parse_value(right, tp)
            result = compare(a, b)
        except ConversionError as exc:
            return ServiceResult.failure(op, "CONVERSION_ERROR", str(exc), **exc.context)
        except ComparisonError as exc:
            return ServiceResult.failure(op, "COMPARISON_ERROR", str(exc), **exc.context)
        return ServiceResult(
            ok=True,
            op=op,
            data={
                "type": type_name,
                "left": render(a),
                "right": render(b),
                "result": result,
                "equal": equal(a, b),
            },
        )

    def convert(self, raw: str, *, from_type: str, to_type: str) -> ServiceResult:
        """Parse *raw* as *from_type* and convert it into *to_type*."""
        op = "convert"
        source = self.resolve_type(from_type)
        if source is None:
            return self._invalid_type(op, from_type)
        target = self.resolve_type(to_type)
        if target is None:
            return self._invalid_type(op, to_type)
        try:
            value = parse_value(raw, source)
            output = convert(target, value)
        except ConversionError as exc:
            return ServiceResult.failure(op, "CONVERSION_ERROR", str(exc), **exc.context)
        return ServiceResult(
            ok=True,
            op=op,
            data={
                "from": from_type,
                "to": to_type,
                "input": render(value),
                "output": render(output),
            },
        )

    # --- Helpers ---

    def _invalid_type(self, op: str, type_name: str) -> ServiceResult:
        return ServiceResult.failure(
            op,
            "INVALID_TYPE",
            f"Unknown type '{type_name}'",
            available=sorted(self.type_names()),
        )

    @staticmethod
    def _detail(exc: ConfiguratorError, secret: bool) -> dict[str, Any]:
        detail: dict[str, Any] = {}
        for key in ("constraint", "field"):
            if key in exc.context:
                detail[key] = exc.context[key]
        if not secret and "values" in exc.context:
            values = exc.context["values"]
            if isinstance(values, tuple):
                detail["values"] = [render(v) for v in values]
            else:
                detail["values"] = render(values)
        return detail
