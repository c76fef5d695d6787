"""Core client constants."""

from typing import Final

# SDK identification reported in the X-Avalara-Client banner
SDK_IDENTIFIER: Final[str] = "PythonRestClient"
SDK_VERSION: Final[str] = "24.6.0"

# Environments
SANDBOX_ENVIRONMENT: Final[str] = "sandbox"
SANDBOX_URL: Final[str] = "https://sandbox-rest.avatax.com"
PRODUCTION_URL: Final[str] = "https://rest.avatax.com"
CUSTOM_URL_PREFIXES: Final[tuple[str, ...]] = ("https://", "http://")

# Headers
ACCEPT_HEADER: Final[str] = "Accept"
AUTHORIZATION_HEADER: Final[str] = "Authorization"
CLIENT_HEADER: Final[str] = "X-Avalara-Client"
CORRELATION_ID_HEADER: Final[str] = "x-correlation-id"

# Content types
JSON_CONTENT_TYPE: Final[str] = "application/json"
CSV_CONTENT_TYPE: Final[str] = "text/csv"

# Tax calculation and batch endpoints can legitimately run for a long time
DEFAULT_TIMEOUT_SECONDS: Final[float] = 1200.0

# Time constants
MILLISECONDS_PER_SECOND = 1000

# Log record timestamps are UTC
LOG_TIMESTAMP_FORMAT: Final[str] = "%Y/%m/%d %H:%M:%S"

# Status boundary between info and error log levels
ERROR_STATUS_THRESHOLD: Final[int] = 400

# Status code recorded when a response could not be decoded
UNEXPECTED_FORMAT_STATUS: Final[int] = 500

# Security and redaction
REDACTED = "[REDACTED]"
