"""Type aliases for dynamic data structures throughout the client.

This module centralizes type definitions for data that cannot be statically
typed, providing clear semantic meaning for the values that cross the
dispatcher boundary.

The dispatcher itself is schema-agnostic: it materializes response bodies
as a generic ``JsonValue`` and leaves structured decoding to the typed
operation wrappers.
"""

from typing import Any

# JSON-compatible type that represents any valid JSON value
# Used for decoded response bodies and serialized request payloads
type JsonValue = (
    dict[str, "JsonValue"] | list["JsonValue"] | str | int | float | bool | None
)

# Query string parameters before empty values are dropped
type QueryParams = dict[str, str | int | float | bool | None]

# Header mapping sent with a request
type HeaderMap = dict[str, str]

# Context dictionary for logging additional information
# Values must be JSON-serializable for structured logging
type LogContext = dict[str, Any]  # JSON-serializable values

# Context dictionary for error details and debugging information
type ErrorContext = dict[str, Any]  # flexible error context
