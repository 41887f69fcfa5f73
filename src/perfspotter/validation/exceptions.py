"""
Exception types and error handling for performance problem diagnosis.

Satellite operations, extension lookup and configuration all report failures
through the typed exceptions defined here. `handle_error` gives every layer the
same way of logging an error before deciding whether to propagate it.
"""

import logging
import sys
from enum import Enum
from typing import Any, Optional, Union

logger = logging.getLogger(__name__)


class ErrorSeverity(Enum):
    """Severity levels for error handling."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ValidationError(Exception):
    """
    Exception raised when validation of configuration or input data fails.
    """

    def __init__(self, message: str, field_name: Optional[str] = None,
                 value: Any = None, severity: ErrorSeverity = ErrorSeverity.ERROR):
        super().__init__(message)
        self.field_name = field_name
        self.value = value
        self.severity = severity


class SpotterError(Exception):
    """Base class for all errors raised while diagnosing a system under test."""


class InstrumentationError(SpotterError):
    """Instrumenting or uninstrumenting failed on one or more satellites."""


class MeasurementError(SpotterError):
    """Enabling, disabling or collecting measurements failed."""


class WorkloadError(SpotterError):
    """Starting load or waiting for a load phase failed."""


class ExtensionResolutionError(SpotterError):
    """
    Raised when an extension name cannot be resolved in the registry.
    """

    def __init__(self, kind: str, name: str):
        super().__init__(f"Unknown {kind} extension: '{name}'")
        self.kind = kind
        self.name = name


class DiagnosisCancelledError(SpotterError):
    """Raised at a step boundary after a shutdown has been requested."""


def handle_error(
    error: Exception,
    context: str,
    severity: Union[ErrorSeverity, str] = ErrorSeverity.ERROR,
    reraise: bool = True,
    logger: Optional[logging.Logger] = None
) -> None:
    """
    Handle errors with consistent logging and optional re-raising.

    Args:
        error: The exception that occurred
        context: Context description of where the error occurred
        severity: Severity level for logging
        reraise: Whether to re-raise the exception after logging
        logger: Logger instance to use (defaults to module logger)
    """
    effective_logger = logger or globals()['logger']

    error_msg = f"Error in {context}: {error}"

    if isinstance(severity, str):
        severity_str = severity.lower()
    else:
        severity_str = severity.value

    if severity_str == "debug":
        effective_logger.debug(error_msg, exc_info=True)
    elif severity_str == "info":
        effective_logger.info(error_msg)
    elif severity_str == "warning":
        effective_logger.warning(error_msg)
    elif severity_str == "error":
        effective_logger.error(error_msg)
    elif severity_str == "critical":
        effective_logger.critical(error_msg, exc_info=True)

    if reraise:
        raise error


def handle_config_error(error: Exception, context: str, **kwargs) -> None:
    """Handle configuration-related errors."""
    handle_error(error, f"config {context}", **kwargs)


def handle_satellite_error(error: Exception, adapter_name: str, operation: str, **kwargs) -> None:
    """Handle a failure reported by a single satellite adapter."""
    handle_error(error, f"satellite '{adapter_name}' during {operation}", **kwargs)


def handle_cli_error(error: Exception, context: str, **kwargs) -> None:
    """Handle CLI-related errors by logging and exiting."""
    exit_code = kwargs.pop('exit_code', 1)
    include_traceback = kwargs.pop('include_traceback', False)

    severity = kwargs.pop('severity', ErrorSeverity.CRITICAL if include_traceback else ErrorSeverity.ERROR)
    handle_error(error, f"CLI {context}", severity=severity, reraise=False, **kwargs)

    sys.exit(exit_code)
