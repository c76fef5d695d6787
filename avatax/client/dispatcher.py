"""Request dispatch engine for the AvaTax REST API.

Every typed operation describes its call as an ``EndpointRequest`` and hands
it to ``RequestDispatcher.execute``, the single chokepoint for HTTP traffic.
The dispatcher:

- **Assembles headers**: rendered auth headers, overridden by caller headers
- **Resolves timeouts**: per call, then per client, then a 20 minute default.
  Each bound applies to every phase (connect, read, write, pool) on its own,
  so a slow but steady response can run past it in total
- **Sends one request**: no automatic retries
- **Classifies responses**: CSV passthrough, no-content marker, JSON decode
- **Captures failures**: status and transport errors become CapturedFailure
  values unless the client runs in raise mode
- **Logs every call once**: from a ``finally`` block, at info or error level

Decoding is schema-agnostic: JSON bodies are materialized as plain
dicts/lists/scalars. Typed wrappers in ``avatax.client.client`` perform the
structured decode.
"""

from collections.abc import Sequence
from typing import Any, Final, Literal

import httpx
import orjson
from loguru import logger as default_logger
from pydantic import BaseModel, ConfigDict, Field

from avatax.client.auth import AuthenticationContext, ClientIdentity
from avatax.client.call_log import CallLogRecord, correlation_id_of
from avatax.core.config import ErrorMode
from avatax.core.constants import (
    AUTHORIZATION_HEADER,
    CSV_CONTENT_TYPE,
    DEFAULT_TIMEOUT_SECONDS,
    JSON_CONTENT_TYPE,
    SDK_VERSION,
)
from avatax.core.exceptions import ErrorCode, UnexpectedResponseFormatError
from avatax.core.types import HeaderMap, JsonValue, QueryParams

type HttpVerb = Literal["GET", "POST", "PUT", "DELETE"]

NO_CONTENT_STATUS: Final[int] = 204
LOG_MESSAGE: Final[str] = "AvaTax call {http_method} {request_uri} returned {status_code}"


class NoContent:
    """Marker for successful responses without a body (204 or zero length).

    Distinct from a decoded JSON ``null``, which is returned as ``None``.
    """

    _instance: "NoContent | None" = None

    def __new__(cls) -> "NoContent":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "NO_CONTENT"


NO_CONTENT: Final[NoContent] = NoContent()


class CapturedFailure(BaseModel):
    """Non-throwing representation of a failed call.

    Failures are falsy so batch callers can write ``if not result:``.
    """

    model_config = ConfigDict(frozen=True)

    message: str = Field(description="Human-readable description of the failure")
    error_code: ErrorCode = Field(description="Failure classification")
    status_code: int | None = Field(default=None, description="HTTP status, if any")
    correlation_id: str | None = Field(
        default=None, description="Server correlation id, if the response carried one"
    )
    raw_body: str | None = Field(default=None, description="Raw response body")
    remote_error_code: str | None = Field(
        default=None, description="Machine-readable error code from the error body"
    )

    def __bool__(self) -> bool:
        return False

    def __str__(self) -> str:
        return self.message


type DecodedBody = JsonValue | NoContent | bytes
type DispatchResult = DecodedBody | CapturedFailure


class EndpointRequest(BaseModel):
    """Description of one endpoint invocation."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    path: str
    verb: HttpVerb = "GET"
    query: QueryParams = Field(default_factory=dict)
    body: Any = None
    headers: HeaderMap | None = None
    timeout: float | None = Field(default=None, gt=0)

    def query_params(self) -> dict[str, str]:
        """Query parameters to send; null and empty values are omitted."""
        params: dict[str, str] = {}
        for key, value in self.query.items():
            if value is None or value == "":
                continue
            if isinstance(value, bool):
                params[key] = "true" if value else "false"
            else:
                params[key] = str(value)
        return params

    def json_body(self) -> JsonValue:
        """The body as JSON-compatible data; models are dumped by alias."""
        if isinstance(self.body, BaseModel):
            return self.body.model_dump(mode="json", by_alias=True, exclude_none=True)
        return self.body


class RequestDispatcher:
    """Executes endpoint requests on behalf of one client instance.

    Args:
        http_client: The httpx client bound to the environment base URL.
        auth: The client's authentication context.
        identity: The client's identity for the X-Avalara-Client banner.
        timeout_seconds: Client-level timeout; None uses the 20 minute default.
        default_timeout: Timeout given through the httpx client options,
            used when neither the call nor the settings set one.
        error_mode: How failures are reported to the caller.
        log_bodies: Keep request and response bodies in call logs.
        sensitive_fields: Field names redacted from logged bodies.
        logger: Loguru-compatible logger receiving one record per call.
    """

    def __init__(
        self,
        http_client: httpx.Client,
        auth: AuthenticationContext,
        identity: ClientIdentity,
        *,
        timeout_seconds: float | None = None,
        default_timeout: httpx.Timeout | float | None = None,
        error_mode: ErrorMode = ErrorMode.CAPTURE,
        log_bodies: bool = False,
        sensitive_fields: Sequence[str] | None = None,
        logger: Any = None,  # noqa: ANN401 - any object with info()/error()
    ) -> None:
        self.http_client = http_client
        self.auth = auth
        self.identity = identity
        self.timeout_seconds = timeout_seconds
        self.default_timeout = (
            httpx.Timeout(default_timeout) if default_timeout is not None else None
        )
        self.error_mode = error_mode
        self.log_bodies = log_bodies
        self.sensitive_fields = sensitive_fields
        self.logger = logger if logger is not None else default_logger

    def execute(
        self, request: EndpointRequest, api_version: str = SDK_VERSION
    ) -> DispatchResult:
        """Make a single REST call to the AvaTax API.

        Args:
            request: The endpoint invocation to perform.
            api_version: Version reported in the X-Avalara-Client banner.

        Returns:
            DispatchResult: Decoded JSON, ``NO_CONTENT``, raw CSV bytes, or a
                CapturedFailure.

        Raises:
            httpx.HTTPError: In raise mode, for status and transport failures.
            UnexpectedResponseFormatError: In raise mode, for undecodable bodies.
        """
        record = CallLogRecord(
            log_bodies=self.log_bodies, sensitive_fields=self.sensitive_fields
        )
        try:
            rendered = self.auth.render_headers(self.identity, api_version)
            headers = merge_headers(rendered.headers, request.headers)
            basic_auth = rendered.basic_auth
            if request.headers and any(
                key.lower() == AUTHORIZATION_HEADER.lower() for key in request.headers
            ):
                basic_auth = None

            body = request.json_body()
            content = None if body is None else orjson.dumps(body)
            if content is not None:
                headers = merge_headers(headers, {"Content-Type": JSON_CONTENT_TYPE})

            record.populate_request_info(request.verb, request.path, body, headers)

            try:
                response = self.execute_request(
                    request,
                    headers=headers,
                    content=content,
                    basic_auth=basic_auth,
                    timeout=self.resolve_timeout(request),
                )
                response.raise_for_status()
            except httpx.HTTPError as exc:
                record.populate_error_info(exc)
                if self.error_mode is ErrorMode.RAISE:
                    raise
                return capture_http_error(exc)

            return self.parse_response(response, record)
        finally:
            self._log(record.finalize())

    def resolve_timeout(self, request: EndpointRequest) -> httpx.Timeout:
        """Pick the timeout for one call.

        The per-call value wins, then the client setting, then a timeout passed
        in the httpx client options, then the 20 minute default. The bound is
        applied per phase by httpx and is not an overall deadline.
        """
        seconds = request.timeout or self.timeout_seconds
        if seconds is None and self.default_timeout is not None:
            return self.default_timeout
        seconds = seconds or DEFAULT_TIMEOUT_SECONDS
        return httpx.Timeout(seconds, connect=seconds)

    def execute_request(
        self,
        request: EndpointRequest,
        *,
        headers: HeaderMap,
        content: bytes | None,
        basic_auth: tuple[str, str] | None,
        timeout: httpx.Timeout,
    ) -> httpx.Response:
        """Send the request; subclasses may override to wrap the transport."""
        return self.http_client.request(
            request.verb,
            request.path,
            params=request.query_params(),
            headers=headers,
            content=content,
            auth=basic_auth if basic_auth is not None else httpx.USE_CLIENT_DEFAULT,
            timeout=timeout,
        )

    def parse_response(
        self, response: httpx.Response, record: CallLogRecord
    ) -> DispatchResult:
        """Classify and decode a successful response.

        Args:
            response: A response with a status below 400.
            record: The call log record to populate.

        Returns:
            DispatchResult: Raw bytes for CSV, ``NO_CONTENT`` for empty JSON
                responses, the decoded JSON otherwise, or a CapturedFailure for
                malformed JSON.

        Raises:
            UnexpectedResponseFormatError: In raise mode, for malformed JSON.
        """
        content_type = response.headers.get("content-type", "").lower()

        if CSV_CONTENT_TYPE in content_type:
            record.populate_response_info(response.text, response)
            return response.content

        if response.status_code == NO_CONTENT_STATUS or (
            JSON_CONTENT_TYPE in content_type
            and (response.headers.get("content-length") == "0" or not response.content)
        ):
            record.populate_response_info(None, response)
            return NO_CONTENT

        try:
            decoded: JsonValue = orjson.loads(response.content)
        except orjson.JSONDecodeError as exc:
            raw_body = response.text
            message = (
                f"The response is in an unexpected format ({exc}). "
                f"Response body: {raw_body}"
            )
            record.populate_error_info_with_message(message, response)
            if self.error_mode is ErrorMode.RAISE:
                raise UnexpectedResponseFormatError(
                    message,
                    raw_body,
                    status_code=response.status_code,
                    correlation_id=correlation_id_of(response),
                    cause=exc,
                ) from exc
            return CapturedFailure(
                message=message,
                error_code=ErrorCode.UNEXPECTED_FORMAT,
                status_code=response.status_code,
                correlation_id=correlation_id_of(response),
                raw_body=raw_body,
            )

        record.populate_response_info(decoded, response)
        return decoded

    def _log(self, record: CallLogRecord) -> None:
        context = record.to_log_context()
        if record.is_error:
            self.logger.error(LOG_MESSAGE, **context)
        else:
            self.logger.info(LOG_MESSAGE, **context)


def merge_headers(base: HeaderMap, overrides: HeaderMap | None) -> HeaderMap:
    """Merge headers; override keys win, matched case-insensitively."""
    merged = dict(base)
    for key, value in (overrides or {}).items():
        for existing in [k for k in merged if k.lower() == key.lower()]:
            del merged[existing]
        merged[key] = value
    return merged


def _remote_error_code(raw_body: str) -> str | None:
    """Extract ``error.code`` from an AvaTax JSON error envelope."""
    try:
        payload = orjson.loads(raw_body)
    except orjson.JSONDecodeError:
        return None
    if isinstance(payload, dict) and isinstance(payload.get("error"), dict):
        code = payload["error"].get("code")
        return str(code) if code is not None else None
    return None


def capture_http_error(error: httpx.HTTPError) -> CapturedFailure:
    """Convert an httpx failure into a CapturedFailure value.

    Args:
        error: A status error (with response) or a transport error.

    Returns:
        CapturedFailure: The failure with status, correlation id and body.
    """
    if isinstance(error, httpx.HTTPStatusError):
        raw_body = error.response.text
        return CapturedFailure(
            message=str(error),
            error_code=ErrorCode.HTTP_ERROR,
            status_code=error.response.status_code,
            correlation_id=correlation_id_of(error.response),
            raw_body=raw_body,
            remote_error_code=_remote_error_code(raw_body),
        )
    return CapturedFailure(
        message=str(error) or type(error).__name__,
        error_code=ErrorCode.TRANSPORT_ERROR,
    )
