"""
Validation and error handling for the perfspotter package.

This module provides input validation, the diagnosis error taxonomy and
consistent error reporting across the application.
"""

from .exceptions import (
    DiagnosisCancelledError,
    ErrorSeverity,
    ExtensionResolutionError,
    InstrumentationError,
    MeasurementError,
    SpotterError,
    ValidationError,
    WorkloadError,
    handle_cli_error,
    handle_config_error,
    handle_error,
    handle_satellite_error,
)

from .validators import (
    validate_boolean,
    validate_enum_choice,
    validate_non_empty_string,
    validate_path_exists,
    validate_positive_float,
    validate_positive_integer,
)

__all__ = [
    # Errors
    "DiagnosisCancelledError",
    "ErrorSeverity",
    "ExtensionResolutionError",
    "InstrumentationError",
    "MeasurementError",
    "SpotterError",
    "ValidationError",
    "WorkloadError",
    # Handlers
    "handle_cli_error",
    "handle_config_error",
    "handle_error",
    "handle_satellite_error",
    # Validators
    "validate_boolean",
    "validate_enum_choice",
    "validate_non_empty_string",
    "validate_path_exists",
    "validate_positive_float",
    "validate_positive_integer",
]
