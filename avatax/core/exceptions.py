"""Structured exception hierarchy for fatal client errors.

This module defines the exceptions raised by the AvaTax client. Only fatal
conditions are raised: misconfiguration detected at construction time and
misuse of the transaction builder. Remote and transport failures are
captured as values by the dispatcher unless the client runs in raise mode.

Key components:
- **ErrorCode enum**: Standardized error identifiers for programmatic handling
- **Severity enum**: Whether an error concerns one call or the calling code
- **AvaTaxError**: Base exception carrying an error code and context
- **Specialized exceptions**: Configuration, builder misuse, response format

The original cause is chained so debuggers show the underlying failure.
"""

from enum import Enum

from avatax.core.types import ErrorContext


class ErrorCode(Enum):
    """Standardized error codes for the AvaTax client.

    These codes are shared by raised exceptions and captured failures so
    that callers can handle both uniformly.
    """

    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"
    """The client was constructed with missing or invalid settings."""

    BUILDER_MISUSE = "BUILDER_MISUSE"
    """A transaction builder operation was called out of order."""

    UNEXPECTED_FORMAT = "UNEXPECTED_FORMAT"
    """The server returned a body that could not be decoded."""

    HTTP_ERROR = "HTTP_ERROR"
    """The server answered with an error status code."""

    TRANSPORT_ERROR = "TRANSPORT_ERROR"
    """The request never got a response (network failure, timeout)."""


class Severity(Enum):
    """Severity levels for client errors."""

    MEDIUM = "MEDIUM"
    """Medium severity errors that may affect a single call."""

    HIGH = "HIGH"
    """Programming or configuration errors in the calling code."""


class AvaTaxError(Exception):
    """Base exception class for all AvaTax client exceptions.

    Args:
        error_code: Unique identifier for the error type (string or ErrorCode enum)
        message: Human-readable error message
        severity: Severity level of the error (defaults to MEDIUM)
        context: Additional context information about the error
        cause: The original exception that caused this error
    """

    def __init__(
        self,
        error_code: str | ErrorCode,
        message: str,
        severity: Severity = Severity.MEDIUM,
        context: ErrorContext | None = None,
        cause: Exception | None = None,
    ) -> None:
        self.error_code = (
            error_code.value if isinstance(error_code, ErrorCode) else error_code
        )
        self.message = message
        self.severity = severity
        self.context = context or {}
        self.cause = cause

        super().__init__(message)
        if cause:
            self.__cause__ = cause

    def __str__(self) -> str:
        """Return a string representation of the exception.

        Returns:
            str: A formatted string containing the error code and message
        """
        return f"[{self.error_code}] {self.message}"

    def __repr__(self) -> str:
        """Return a detailed representation of the exception.

        Returns:
            str: A string showing the class name, error code, message, severity,
                and context
        """
        class_name = self.__class__.__name__
        context_str = f", context={self.context}" if self.context else ""
        return (
            f"{class_name}(error_code='{self.error_code}', "
            f"message='{self.message}', severity={self.severity.value}{context_str})"
        )


class ConfigurationError(AvaTaxError):
    """Exception raised when the client is constructed with invalid settings.

    Args:
        message: Description of the configuration problem
        context: Additional context information about the error
        cause: The original exception that caused this error
    """

    def __init__(
        self,
        message: str,
        context: ErrorContext | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(
            ErrorCode.CONFIGURATION_ERROR, message, Severity.HIGH, context, cause
        )


class BuilderMisuseError(AvaTaxError):
    """Exception raised when a line operation is called before any line exists.

    This always indicates an ordering bug in the calling code.

    Args:
        operation: Name of the builder operation that was misused
    """

    def __init__(self, operation: str) -> None:
        message = (
            f"No lines have been added. The {operation} method applies to the "
            "most recent line. To use this function, first add a line."
        )
        super().__init__(
            ErrorCode.BUILDER_MISUSE,
            message,
            Severity.HIGH,
            {"operation": operation},
        )
        self.operation = operation


class UnexpectedResponseFormatError(AvaTaxError):
    """Exception raised in raise mode when a response body cannot be decoded.

    Args:
        message: Description of the decode failure
        raw_body: The undecodable response body
        status_code: HTTP status of the response
        correlation_id: Server correlation id, if the response carried one
        cause: The original decode exception
    """

    def __init__(
        self,
        message: str,
        raw_body: str,
        status_code: int | None = None,
        correlation_id: str | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(
            ErrorCode.UNEXPECTED_FORMAT,
            message,
            Severity.MEDIUM,
            {"status_code": status_code, "correlation_id": correlation_id},
            cause,
        )
        self.raw_body = raw_body
        self.status_code = status_code
        self.correlation_id = correlation_id
