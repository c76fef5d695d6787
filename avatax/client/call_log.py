"""Per-call log record for AvaTax API calls.

Every dispatcher call owns exactly one ``CallLogRecord``. The record moves
through a fixed lifecycle::

    CREATED -> REQUEST_POPULATED -> RESPONSE_POPULATED | ERROR_POPULATED -> FINALIZED

and is handed to the logger once, after finalization. Request and response
bodies are only kept when body logging is enabled, and are redacted before
they are logged.
"""

import time
from collections.abc import Sequence
from datetime import UTC, datetime
from enum import Enum

import httpx

from avatax.core.constants import (
    CORRELATION_ID_HEADER,
    ERROR_STATUS_THRESHOLD,
    LOG_TIMESTAMP_FORMAT,
    MILLISECONDS_PER_SECOND,
    UNEXPECTED_FORMAT_STATUS,
)
from avatax.core.error_context import sanitize_headers, sanitize_value
from avatax.core.types import HeaderMap, JsonValue, LogContext


class CallLogState(Enum):
    """Lifecycle states of a call log record."""

    CREATED = "created"
    REQUEST_POPULATED = "request_populated"
    RESPONSE_POPULATED = "response_populated"
    ERROR_POPULATED = "error_populated"
    FINALIZED = "finalized"


def correlation_id_of(response: httpx.Response | None) -> str | None:
    """Read the correlation id header, which some responses omit."""
    if response is None:
        return None
    return response.headers.get(CORRELATION_ID_HEADER)


class CallLogRecord:
    """Timing, correlation and optional body capture for one API call.

    Args:
        log_bodies: Keep request and response bodies on the record.
        sensitive_fields: Field names redacted from logged bodies in
            addition to the built-in patterns.
    """

    def __init__(
        self,
        *,
        log_bodies: bool = False,
        sensitive_fields: Sequence[str] | None = None,
    ) -> None:
        self.log_bodies = log_bodies
        self.sensitive_fields = sensitive_fields
        self.state = CallLogState.CREATED
        self._start_time = time.perf_counter()

        self.timestamp: str | None = None
        self.http_method: str | None = None
        self.request_uri: str | None = None
        self.request_headers: HeaderMap | None = None
        self.request_details: JsonValue = None
        self.response_details: JsonValue = None
        self.header_correlation_id: str | None = None
        self.status_code: int | None = None
        self.total_execution_time: int | None = None
        self.exception_message: str | None = None

    def populate_request_info(
        self,
        verb: str,
        request_uri: str,
        body: JsonValue = None,
        headers: HeaderMap | None = None,
    ) -> None:
        """Record the outgoing request.

        Args:
            verb: HTTP method.
            request_uri: Target path, relative to the environment host.
            body: Serializable request body, kept only with body logging.
            headers: Request headers, kept (redacted) only with body logging.
        """
        self.timestamp = datetime.now(UTC).strftime(LOG_TIMESTAMP_FORMAT)
        self.http_method = verb
        self.request_uri = request_uri
        if self.log_bodies:
            self.request_details = body
            self.request_headers = sanitize_headers(headers) if headers else None
        self.state = CallLogState.REQUEST_POPULATED

    def populate_response_info(
        self, decoded: JsonValue, response: httpx.Response
    ) -> None:
        """Record a successfully handled response.

        Args:
            decoded: The decoded body (or raw text for passthrough responses).
            response: The HTTP response.
        """
        self._populate_common_response_info(response)
        if self.log_bodies:
            self.response_details = decoded
        self.state = CallLogState.RESPONSE_POPULATED

    def populate_error_info_with_message(
        self, message: str, response: httpx.Response
    ) -> None:
        """Record a response that arrived but could not be handled.

        The status is recorded as 500 so the call is logged as an error even
        when the server answered 2xx with an undecodable body.

        Args:
            message: Description of the failure.
            response: The HTTP response.
        """
        self._populate_common_response_info(response)
        self.exception_message = message
        self.status_code = UNEXPECTED_FORMAT_STATUS
        self.state = CallLogState.ERROR_POPULATED

    def populate_error_info(self, error: httpx.HTTPError) -> None:
        """Record a transport or status failure reported by httpx.

        Args:
            error: The httpx exception. Status failures carry the response.
        """
        self._populate_total_execution_time()
        if isinstance(error, httpx.HTTPStatusError):
            self.status_code = error.response.status_code
            self.header_correlation_id = correlation_id_of(error.response)
            self.exception_message = error.response.text
        else:
            self.exception_message = str(error) or type(error).__name__
        self.state = CallLogState.ERROR_POPULATED

    def finalize(self) -> "CallLogRecord":
        """Close the record; elapsed time is computed if no response set it."""
        if self.total_execution_time is None:
            self._populate_total_execution_time()
        self.state = CallLogState.FINALIZED
        return self

    @property
    def is_error(self) -> bool:
        """Whether the call should be logged at error level."""
        if self.exception_message is not None or self.status_code is None:
            return True
        return self.status_code >= ERROR_STATUS_THRESHOLD

    def to_log_context(self) -> LogContext:
        """Build the structured, redacted fields handed to the logger."""
        context: LogContext = {
            "timestamp": self.timestamp,
            "http_method": self.http_method,
            "request_uri": self.request_uri,
            "status_code": self.status_code,
            "duration_ms": self.total_execution_time,
            "correlation_id": self.header_correlation_id,
        }
        if self.exception_message is not None:
            context["exception_message"] = self.exception_message
        if self.log_bodies:
            context["request_headers"] = self.request_headers
            context["request_details"] = sanitize_value(
                self.request_details, sensitive_fields=self.sensitive_fields
            )
            context["response_details"] = sanitize_value(
                self.response_details, sensitive_fields=self.sensitive_fields
            )
        return context

    def _populate_common_response_info(self, response: httpx.Response) -> None:
        self._populate_total_execution_time()
        self.header_correlation_id = correlation_id_of(response)
        self.status_code = response.status_code

    def _populate_total_execution_time(self) -> None:
        elapsed = time.perf_counter() - self._start_time
        self.total_execution_time = round(elapsed * MILLISECONDS_PER_SECOND)
