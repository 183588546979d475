"""Tests for the Configurator builder and configure()."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import pytest

from configurator.domain.constraints import Invalid, Valid
from configurator.domain.errors import (
    ConstraintAuthoringError,
    ConstraintViolation,
    ConversionError,
    LoggerConfigurationError,
    NotConfigurableError,
)
from configurator.domain.kinds import Uint8
from configurator.domain.refs import AttrRef, ItemRef, Ref
from configurator.services.configurator import (
    DEFAULT,
    SECRET,
    Configurator,
    printf_logger,
    structlog_logger,
)
from tests.conftest import LogRecorder


@dataclass
class ServerConfig:
    port: int = 0
    host: str = ""


class Level:
    def __init__(self, rank: int) -> None:
        self.rank = rank

    def lower(self, other: Level) -> bool:
        return self.rank < other.rank

    def equal(self, other: Level) -> bool:
        return self.rank == other.rank

    def __str__(self) -> str:
        return f"L{self.rank}"


@pytest.fixture
def recorder() -> LogRecorder:
    return LogRecorder()


class TestBuilder:
    def test_builders_do_not_mutate(self) -> None:
        base = Configurator()
        named = base.with_name("port").with_min(1)
        assert base.name == ""
        assert base.constraints.min is None
        assert named.name == "port"
        assert named.constraints.min == 1

    def test_context_is_merged(self) -> None:
        cfg = Configurator().with_context(a=1).with_context(b=2)
        assert dict(cfg.log_context) == {"a": 1, "b": 2}

    def test_empty_value_format_restores_default(self) -> None:
        assert Configurator().with_log_value_format("").log_value_format == "'%s'"

    def test_secret_preset(self) -> None:
        assert SECRET.secret
        assert not DEFAULT.secret
        assert DEFAULT.log_fn is not None


class TestLoggerShape:
    def test_non_callable(self) -> None:
        with pytest.raises(LoggerConfigurationError, match="logger should be callable"):
            Configurator().with_logger(42)  # type: ignore[arg-type]

    def test_wrong_arity(self) -> None:
        with pytest.raises(LoggerConfigurationError, match=r"should accept '\(context, format, args\)'"):
            Configurator().with_logger(lambda message: None)  # type: ignore[arg-type]

    def test_is_a_type_error(self) -> None:
        assert issubclass(LoggerConfigurationError, TypeError)

    def test_none_disables_logging(self) -> None:
        assert Configurator().with_logger(None).log_fn is None

    @pytest.mark.parametrize("fmt", ["value", "%s %s", "%(name)s", "%"])
    def test_bad_value_format(self, fmt: str) -> None:
        with pytest.raises(LoggerConfigurationError, match="should format exactly one value"):
            Configurator().with_log_value_format(fmt)

    def test_bad_value_format_is_rejected_before_configure(self, recorder: LogRecorder) -> None:
        ref = Ref(0)
        base = Configurator().with_logger(recorder).with_disallowed(0).with_default(1)
        with pytest.raises(LoggerConfigurationError):
            base.with_log_value_format("value")
        assert base.configure(ref) == 1
        assert ref.get() == 1
        assert recorder.lines

    @pytest.mark.parametrize("fmt", ["%s", "%r", "%d", "<%s>", "100%% %s"])
    def test_good_value_format(self, fmt: str) -> None:
        assert Configurator().with_log_value_format(fmt).log_value_format == fmt


class TestConfigure:
    def test_valid_value_is_written_back(self) -> None:
        ref = Ref(5)
        assert Configurator().with_min(1).configure(ref) == 5
        assert ref.get() == 5

    def test_default_replaces_invalid_value(self) -> None:
        ref = Ref(0)
        Configurator().with_min(1).with_default(8080).configure(ref)
        assert ref.get() == 8080

    def test_default_takes_target_type(self) -> None:
        ref = Ref(Uint8(0))
        Configurator().with_min(1).with_default(300).configure(ref)
        assert type(ref.get()) is Uint8
        assert ref.get() == 44

    def test_violation_without_default(self) -> None:
        ref = Ref(0)
        with pytest.raises(ConstraintViolation) as exc_info:
            Configurator().with_min(1).configure(ref)
        assert str(exc_info.value) == (
            "configuration error: target value error: "
            "argument should be greater than or equal to '1'"
        )
        assert exc_info.value.context["constraint"] == "min"
        assert ref.get() == 0

    def test_named_error(self) -> None:
        with pytest.raises(ConstraintViolation, match="^configuration of 'port' error: "):
            Configurator().with_name("port").with_max(10).configure(Ref(11))

    def test_invalid_default(self) -> None:
        ref = Ref(50)
        with pytest.raises(ConstraintAuthoringError) as exc_info:
            Configurator().with_min(10).with_default(5).configure(ref)
        assert str(exc_info.value) == (
            "configuration error: default value error: "
            "argument should be greater than or equal to '10'"
        )
        assert ref.get() == 50

    def test_constraint_of_wrong_type(self) -> None:
        with pytest.raises(ConstraintAuthoringError) as exc_info:
            Configurator().with_min("one").configure(Ref(5))
        assert str(exc_info.value) == (
            "configuration error: invalid min value: "
            "argument of type 'str' should be convertible to type 'int'"
        )

    def test_unorderable_bound(self) -> None:
        with pytest.raises(ConstraintAuthoringError, match="target value error: invalid min value"):
            Configurator().with_min(False).configure(Ref(True))

    def test_current_overrides_value(self) -> None:
        ref = Ref(1)
        Configurator().with_current(7).configure(ref)
        assert ref.get() == 7

    def test_allowed_values(self) -> None:
        ref = Ref("trace")
        Configurator().with_allowed("debug", "info").with_default("info").configure(ref)
        assert ref.get() == "info"

    def test_disallowed_values(self) -> None:
        with pytest.raises(ConstraintViolation, match=r"disallowed values \['password'\]"):
            Configurator().with_disallowed("password").configure(Ref("password"))

    def test_attribute_handle(self) -> None:
        config = ServerConfig(port=0)
        Configurator().with_min(1).with_default(8080).configure(AttrRef(config, "port"))
        assert config.port == 8080

    def test_item_handle(self) -> None:
        data: dict[str, Any] = {"port": 70000}
        Configurator().with_max(65535).with_default(80).configure(ItemRef(data, "port"))
        assert data["port"] == 80

    def test_user_capabilities(self) -> None:
        ref = Ref(Level(0))
        Configurator().with_min(Level(1)).with_default(Level(2)).configure(ref)
        assert ref.get().rank == 2


class TestNotConfigurable:
    def test_none(self) -> None:
        with pytest.raises(NotConfigurableError) as exc_info:
            Configurator().configure(None)  # type: ignore[arg-type]
        assert str(exc_info.value) == (
            "configuration error: target value is not configurable: "
            "argument should be a reference"
        )

    def test_plain_value(self) -> None:
        with pytest.raises(NotConfigurableError, match="argument of type 'int' should be a reference"):
            Configurator().configure(5)  # type: ignore[arg-type]

    def test_unbound_ref(self) -> None:
        with pytest.raises(NotConfigurableError, match="argument of type 'Ref' should not be unbound"):
            Configurator().configure(Ref())

    def test_missing_attribute(self) -> None:
        with pytest.raises(NotConfigurableError, match="type 'AttrRef' should not be unbound"):
            Configurator().configure(AttrRef(ServerConfig(), "missing"))


class TestCheckAndValidate:
    def test_check_valid(self) -> None:
        assert Configurator().with_max(10).check(3) == Valid(3)

    def test_check_invalid_does_not_raise(self) -> None:
        outcome = Configurator().with_max(10).check(11)
        assert isinstance(outcome, Invalid)
        assert str(outcome.reason) == "argument should be lower than or equal to '10'"

    def test_check_none(self) -> None:
        with pytest.raises(ConversionError, match="^validation error: argument should not be None"):
            Configurator().check(None)

    def test_validate_raises_wrapped_violation(self) -> None:
        with pytest.raises(ConstraintViolation) as exc_info:
            Configurator().with_name("port").with_min(1).validate(0)
        assert str(exc_info.value) == (
            "validation of 'port' error: argument should be greater than or equal to '1'"
        )

    def test_validate_returns_value(self) -> None:
        assert Configurator().with_min(1).validate(2) == 2


class TestAuditLog:
    def test_line_lists_constraints_and_values(self, recorder: LogRecorder) -> None:
        cfg = Configurator().with_logger(recorder).with_name("port").with_min(1).with_max(10)
        cfg.configure(Ref(5))
        assert recorder.lines == [
            "configuration of 'port': min: '1' max: '10' input: '5' output: '5'"
        ]
        _, fmt, args = recorder.calls[0]
        assert fmt == "configuration of '%s': min: '%s' max: '%s' input: '%s' output: '%s'"
        assert args == ("port", 1, 10, 5, 5)

    def test_lists_and_default(self, recorder: LogRecorder) -> None:
        cfg = (
            Configurator()
            .with_logger(recorder)
            .with_allowed(1, 2)
            .with_disallowed(3)
            .with_default(1)
        )
        cfg.configure(Ref(4))
        assert recorder.lines == [
            "configuration: allowed: ['1','2'] disallowed: ['3'] default: '1' input: '4' output: '1'"
        ]

    def test_logs_current_as_input(self, recorder: LogRecorder) -> None:
        Configurator().with_logger(recorder).with_current(7).configure(Ref(1))
        assert recorder.lines == ["configuration: input: '7' output: '7'"]

    def test_secret_redacts_every_value(self, recorder: LogRecorder) -> None:
        cfg = Configurator().with_logger(recorder).with_log_secret().with_name("pw")
        cfg.with_disallowed("hunter2").configure(Ref("s3cret"))
        assert recorder.lines == [
            "configuration of 'pw': disallowed: [*secret*] input: *secret* output: *secret*"
        ]
        _, _, args = recorder.calls[0]
        assert args == ("pw",)

    def test_changes_only_skips_unchanged(self, recorder: LogRecorder) -> None:
        cfg = Configurator().with_logger(recorder).with_log_changes_only().with_min(1).with_default(9)
        cfg.configure(Ref(5))
        assert recorder.calls == []
        cfg.configure(Ref(0))
        assert recorder.lines == ["configuration: min: '1' default: '9' input: '0' output: '9'"]

    def test_value_format(self, recorder: LogRecorder) -> None:
        Configurator().with_logger(recorder).with_log_value_format("%r").configure(Ref("a"))
        assert recorder.lines == ["configuration: input: 'a' output: 'a'"]
        recorder.calls.clear()
        Configurator().with_logger(recorder).with_log_value_format("<%s>").configure(Ref(1))
        assert recorder.lines == ["configuration: input: <1> output: <1>"]

    def test_context_is_passed(self, recorder: LogRecorder) -> None:
        Configurator().with_logger(recorder).with_context(request="r1").configure(Ref(1))
        assert recorder.calls[0][0] == {"request": "r1"}

    def test_nothing_logged_on_error(self, recorder: LogRecorder) -> None:
        with pytest.raises(ConstraintViolation):
            Configurator().with_logger(recorder).with_min(1).configure(Ref(0))
        assert recorder.calls == []

    def test_no_logger(self) -> None:
        ref = Ref(1)
        Configurator().configure(ref)
        assert ref.get() == 1


class TestLoggerAdapters:
    def test_printf_logger(self) -> None:
        lines: list[str] = []
        Configurator().with_logger(printf_logger(lines.append)).configure(Ref(3))
        assert lines == ["configuration: input: '3' output: '3'"]

    def test_structlog_logger_binds_context(self) -> None:
        class Recorder:
            def __init__(self) -> None:
                self.events: list[tuple[str, dict[str, Any]]] = []

            def info(self, event: str, **kw: Any) -> None:
                self.events.append((event, kw))

        target = Recorder()
        cfg = Configurator().with_logger(structlog_logger(target)).with_context(op="check")
        cfg.configure(Ref(2))
        assert target.events == [("configuration: input: '2' output: '2'", {"op": "check"})]

    def test_structlog_logger_level(self) -> None:
        seen: list[str] = []

        class Recorder:
            def debug(self, event: str, **kw: Any) -> None:
                seen.append(event)

        Configurator().with_logger(structlog_logger(Recorder(), level="debug")).configure(Ref(1))
        assert seen == ["configuration: input: '1' output: '1'"]


class TestPipelineProperties:
    def test_disallowed_with_default(self) -> None:
        ref = Ref(0)
        Configurator().with_disallowed(0).with_default(1).configure(ref)
        assert ref.get() == 1

    def test_default_outside_allowed(self) -> None:
        ref = Ref(5)
        with pytest.raises(ConstraintAuthoringError, match="default value error"):
            Configurator().with_allowed(1, 2).with_default(0).configure(ref)
        assert ref.get() == 5

    def test_validate_names_allowed_values(self) -> None:
        with pytest.raises(ConstraintViolation) as exc_info:
            Configurator().with_allowed(1, 2).validate(5)
        assert exc_info.value.context == {"constraint": "allowed", "values": (1, 2)}

    @pytest.mark.parametrize(
        "cfg",
        [
            Configurator().with_min(1),
            Configurator().with_max(3).with_default(2),
            Configurator().with_allowed(7, 8).with_default(8),
            Configurator().with_disallowed(4).with_current(9),
        ],
    )
    def test_secret_never_leaks_values(self, cfg: Configurator, recorder: LogRecorder) -> None:
        cfg.with_logger(recorder).with_log_secret().configure(Ref(4))
        for line in recorder.lines:
            assert not any(digit in line for digit in "0123456789")
