"""Unit tests for avatax/core/exceptions.py module."""

import pytest
import pytest_check

from avatax.core.exceptions import (
    AvaTaxError,
    BuilderMisuseError,
    ConfigurationError,
    ErrorCode,
    Severity,
    UnexpectedResponseFormatError,
)


@pytest.mark.unit
class TestAvaTaxError:
    """Tests for the base exception."""

    def test_accepts_enum_error_code(self) -> None:
        """Verify ErrorCode members are stored by value."""
        error = AvaTaxError(ErrorCode.HTTP_ERROR, "failed")

        assert error.error_code == "HTTP_ERROR"
        assert error.message == "failed"
        assert error.severity is Severity.MEDIUM
        assert error.context == {}

    def test_accepts_string_error_code(self) -> None:
        """Verify custom string codes are kept as-is."""
        error = AvaTaxError("CUSTOM", "custom failure")

        assert error.error_code == "CUSTOM"

    def test_str_and_repr(self) -> None:
        """Verify the string forms include code, message and context."""
        error = AvaTaxError(
            ErrorCode.TRANSPORT_ERROR,
            "connection refused",
            Severity.HIGH,
            {"host": "example.com"},
        )

        assert str(error) == "[TRANSPORT_ERROR] connection refused"
        assert repr(error) == (
            "AvaTaxError(error_code='TRANSPORT_ERROR', "
            "message='connection refused', severity=HIGH, "
            "context={'host': 'example.com'})"
        )

    def test_cause_is_chained(self) -> None:
        """Verify the original exception is kept for debugging."""
        cause = ValueError("bad value")

        error = AvaTaxError(ErrorCode.UNEXPECTED_FORMAT, "wrapped", cause=cause)

        assert error.cause is cause
        assert error.__cause__ is cause


@pytest.mark.unit
class TestSpecializedExceptions:
    """Tests for the concrete exception types."""

    def test_configuration_error(self) -> None:
        """Verify configuration errors are high severity."""
        error = ConfigurationError("missing app_name", context={"app_name": None})

        with pytest_check.check:
            assert isinstance(error, AvaTaxError)
        with pytest_check.check:
            assert error.error_code == ErrorCode.CONFIGURATION_ERROR.value
        with pytest_check.check:
            assert error.severity is Severity.HIGH
        with pytest_check.check:
            assert error.context == {"app_name": None}

    def test_builder_misuse_error_message(self) -> None:
        """Verify the message names the misused operation."""
        error = BuilderMisuseError("with_line_parameter")

        assert error.message == (
            "No lines have been added. The with_line_parameter method applies to "
            "the most recent line. To use this function, first add a line."
        )
        assert error.operation == "with_line_parameter"
        assert error.context == {"operation": "with_line_parameter"}
        assert error.error_code == ErrorCode.BUILDER_MISUSE.value
        assert error.severity is Severity.HIGH

    def test_unexpected_response_format_error(self) -> None:
        """Verify the raw body and response metadata are attached."""
        cause = ValueError("Expecting value")

        error = UnexpectedResponseFormatError(
            "unexpected format",
            "not-json",
            status_code=200,
            correlation_id="abc-123",
            cause=cause,
        )

        assert error.raw_body == "not-json"
        assert error.status_code == 200
        assert error.correlation_id == "abc-123"
        assert error.context == {"status_code": 200, "correlation_id": "abc-123"}
        assert error.__cause__ is cause
        assert error.severity is Severity.MEDIUM
