"""AvaTax - Python client for the AvaTax tax calculation REST API.

The package is organized in three layers:

- **core**: Configuration, logging, exceptions and shared types
- **client**: Credentials, the request dispatcher and typed API operations
- **builder**: A fluent builder for multi-line transactions

Quick start::

    from avatax import AvaTaxClient

    client = AvaTaxClient("myApp", "1.0", "localhost", "sandbox")
    client.with_license_key(123456, "my-license-key")
    result = client.ping()
"""

from avatax.builder import TransactionBuilder
from avatax.client import NO_CONTENT, AvaTaxClient, CapturedFailure
from avatax.core.config import ClientSettings, ErrorMode
from avatax.core.constants import SDK_VERSION
from avatax.core.exceptions import (
    AvaTaxError,
    BuilderMisuseError,
    ConfigurationError,
    UnexpectedResponseFormatError,
)

__version__ = SDK_VERSION

__all__ = [
    "NO_CONTENT",
    "AvaTaxClient",
    "AvaTaxError",
    "BuilderMisuseError",
    "CapturedFailure",
    "ClientSettings",
    "ConfigurationError",
    "ErrorMode",
    "TransactionBuilder",
    "UnexpectedResponseFormatError",
    "__version__",
]
