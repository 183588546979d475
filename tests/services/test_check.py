"""Tests for CheckService."""

from __future__ import annotations

from pathlib import Path

import pytest

from configurator.config.settings import CfgSettings
from configurator.domain.errors import ConversionError
from configurator.domain.kinds import Uint8
from configurator.domain.timestamps import Timestamp
from configurator.services.check import CheckService, parse_value, render
from configurator.services.configurator import SECRET_MARKER
from tests.conftest import write_config


@pytest.fixture
def svc(settings: CfgSettings) -> CheckService:
    return CheckService(settings)


@pytest.fixture
def profile_svc(project_root: Path) -> CheckService:
    path = write_config(project_root)
    return CheckService(CfgSettings.from_cli(config_path=str(path)))


class TestParseValue:
    def test_integer_literals(self) -> None:
        assert parse_value("42", int) == 42
        assert parse_value("0x10", int) == 16
        assert parse_value(" -7 ", int) == -7

    def test_fixed_width_wraps(self) -> None:
        result = parse_value("300", Uint8)
        assert type(result) is Uint8
        assert result == 44

    def test_bool_words(self) -> None:
        assert parse_value("yes", bool) is True
        assert parse_value("False", bool) is False

    def test_bad_bool(self) -> None:
        with pytest.raises(ConversionError, match="should be parsable as 'bool'"):
            parse_value("maybe", bool)

    def test_float(self) -> None:
        assert parse_value("1.5", float) == 1.5

    def test_non_string_is_converted(self) -> None:
        assert parse_value(3, Uint8) == 3

    def test_registered_type(self, svc: CheckService) -> None:
        assert isinstance(parse_value("2024-01-01", Timestamp), Timestamp)


class TestRender:
    def test_scalars(self) -> None:
        assert render(Uint8(5)) == 5
        assert type(render(Uint8(5))) is int
        assert render(True) is True
        assert render(None) is None

    def test_other_types_as_text(self) -> None:
        assert render(Timestamp.parse("2024-01-01T00:00:00Z")) == "2024-01-01T00:00:00+00:00"


class TestCheck:
    def test_valid_value(self, svc: CheckService) -> None:
        result = svc.check("42", min_value="0", max_value="100")
        assert result.ok
        assert result.data == {"type": "int", "input": 42, "output": 42, "changed": False}
        assert result.warnings == []

    def test_default_applied(self, svc: CheckService) -> None:
        result = svc.check("-5", min_value="0", default="10")
        assert result.ok
        assert result.data["output"] == 10
        assert result.data["changed"] is True
        assert result.warnings == ["Input replaced by default"]

    def test_violation(self, svc: CheckService) -> None:
        result = svc.check("-5", min_value="0")
        assert not result.ok
        assert result.error is not None
        assert result.error.code == "VIOLATION"
        assert result.error.message == (
            "configuration error: target value error: "
            "argument should be greater than or equal to '0'"
        )
        assert result.error.detail == {"constraint": "min", "values": 0}

    def test_allowed_violation_lists_values(self, svc: CheckService) -> None:
        result = svc.check("trace", type_name="str", allowed=["debug", "info"])
        assert result.error is not None
        assert result.error.detail["values"] == ["debug", "info"]

    def test_unknown_type(self, svc: CheckService) -> None:
        result = svc.check("1", type_name="complex")
        assert result.error is not None
        assert result.error.code == "INVALID_TYPE"
        assert "timestamp" in result.error.detail["available"]
        assert "uint8" in result.error.detail["available"]

    def test_unparsable_value(self, svc: CheckService) -> None:
        result = svc.check("abc")
        assert result.error is not None
        assert result.error.code == "CONVERSION_ERROR"

    def test_unparsable_constraint(self, svc: CheckService) -> None:
        result = svc.check("1", min_value="low")
        assert result.error is not None
        assert result.error.code == "INVALID_CONSTRAINT"
        assert result.error.detail["field"] == "min"

    def test_invalid_default(self, svc: CheckService) -> None:
        result = svc.check("50", min_value="10", default="5")
        assert result.error is not None
        assert result.error.code == "INVALID_CONSTRAINT"
        assert result.error.message.startswith("configuration error: default value error:")

    def test_fixed_width_type(self, svc: CheckService) -> None:
        result = svc.check("300", type_name="uint8")
        assert result.data["output"] == 44

    def test_timestamp_type(self, svc: CheckService) -> None:
        result = svc.check(
            "2024-05-01T12:00:00Z", type_name="timestamp", max_value="2025-01-01"
        )
        assert result.ok
        assert result.data["output"] == "2024-05-01T12:00:00+00:00"

    def test_timestamp_after_max(self, svc: CheckService) -> None:
        result = svc.check("2026-05-01", type_name="timestamp", max_value="2025-01-01")
        assert result.error is not None
        assert result.error.code == "VIOLATION"

    def test_secret_hides_values(self, svc: CheckService) -> None:
        result = svc.check("hunter2", type_name="str", disallowed=["hunter2"], secret=True)
        assert result.error is not None
        assert "values" not in result.error.detail
        ok = svc.check("s3cret", type_name="str", secret=True)
        assert ok.data["input"] == SECRET_MARKER
        assert ok.data["output"] == SECRET_MARKER

    def test_bad_value_format_in_config(self, project_root: Path) -> None:
        path = write_config(project_root, "[log]\nvalue_format = \"value\"\n")
        result = CheckService(CfgSettings.from_cli(config_path=str(path))).check("5")
        assert not result.ok
        assert result.error is not None
        assert result.error.code == "CONFIGURATION_ERROR"
        assert "should format exactly one value" in result.error.message


class TestProfiles:
    def test_profile_default(self, profile_svc: CheckService) -> None:
        result = profile_svc.check("0", profile="port")
        assert result.ok
        assert result.data["type"] == "uint16"
        assert result.data["output"] == 8080

    def test_explicit_option_overrides_profile(self, profile_svc: CheckService) -> None:
        result = profile_svc.check("0", profile="port", default="9090")
        assert result.data["output"] == 9090

    def test_profile_allowed(self, profile_svc: CheckService) -> None:
        result = profile_svc.check("trace", profile="level")
        assert result.error is not None
        assert result.error.code == "VIOLATION"

    def test_profile_secret(self, profile_svc: CheckService) -> None:
        result = profile_svc.check("letmein", profile="password")
        assert result.data["output"] == SECRET_MARKER

    def test_unknown_profile(self, profile_svc: CheckService) -> None:
        result = profile_svc.check("1", profile="nope")
        assert result.error is not None
        assert result.error.code == "UNKNOWN_PROFILE"
        assert result.error.detail["available"] == ["level", "password", "port"]


class TestCompare:
    def test_lower(self, svc: CheckService) -> None:
        result = svc.compare("3", "5")
        assert result.data == {"type": "int", "left": 3, "right": 5, "result": -1, "equal": False}

    def test_equal_after_parsing(self, svc: CheckService) -> None:
        result = svc.compare("0x10", "16", type_name="uint16")
        assert result.data["result"] == 0
        assert result.data["equal"] is True

    def test_timestamps(self, svc: CheckService) -> None:
        result = svc.compare(
            "2024-01-01T00:00:00Z", "2023-12-31T23:00:00-02:00", type_name="timestamp"
        )
        assert result.data["result"] == -1

    def test_bool_is_not_ordered(self, svc: CheckService) -> None:
        result = svc.compare("true", "false", type_name="bool")
        assert result.error is not None
        assert result.error.code == "COMPARISON_ERROR"

    def test_unparsable(self, svc: CheckService) -> None:
        result = svc.compare("x", "1")
        assert result.error is not None
        assert result.error.code == "CONVERSION_ERROR"


class TestConvert:
    def test_wraps(self, svc: CheckService) -> None:
        result = svc.convert("300", from_type="int", to_type="uint8")
        assert result.data == {"from": "int", "to": "uint8", "input": 300, "output": 44}

    def test_truncates(self, svc: CheckService) -> None:
        result = svc.convert("3.9", from_type="float64", to_type="int16")
        assert result.data["output"] == 3

    def test_posix_seconds_to_timestamp(self, svc: CheckService) -> None:
        result = svc.convert("1700000000", from_type="int", to_type="timestamp")
        assert result.data["output"] == "2023-11-14T22:13:20+00:00"

    def test_not_convertible(self, svc: CheckService) -> None:
        result = svc.convert("1.5", from_type="float64", to_type="str")
        assert result.error is not None
        assert result.error.code == "CONVERSION_ERROR"
        assert result.error.detail == {"source_type": "float", "target_type": "str"}

    def test_unknown_target(self, svc: CheckService) -> None:
        result = svc.convert("1", from_type="int", to_type="decimal")
        assert result.error is not None
        assert result.error.code == "INVALID_TYPE"
