"""configurator: validate, default and assign values of any runtime type."""

from configurator.domain.compare import call_capability, compare, equal, has_equal
from configurator.domain.constraints import Constraints, Invalid, Valid
from configurator.domain.convert import (
    convert,
    convert_not_none,
    convert_sequence,
    register_converter,
    unregister_converter,
)
from configurator.domain.errors import (
    CapabilityError,
    ComparisonError,
    ConfiguratorError,
    ConstraintAuthoringError,
    ConstraintViolation,
    ConversionError,
    LoggerConfigurationError,
    NotConfigurableError,
)
from configurator.domain.refs import AttrRef, Handle, ItemRef, Ref, UnboundReferenceError
from configurator.services.configurator import DEFAULT, SECRET, Configurator

__version__ = "0.3.0"

__all__ = [
    "DEFAULT",
    "SECRET",
    "AttrRef",
    "CapabilityError",
    "ComparisonError",
    "Configurator",
    "ConfiguratorError",
    "ConstraintAuthoringError",
    "ConstraintViolation",
    "Constraints",
    "ConversionError",
    "Handle",
    "Invalid",
    "ItemRef",
    "LoggerConfigurationError",
    "NotConfigurableError",
    "Ref",
    "UnboundReferenceError",
    "Valid",
    "call_capability",
    "compare",
    "convert",
    "convert_not_none",
    "convert_sequence",
    "equal",
    "has_equal",
    "register_converter",
    "unregister_converter",
]
