"""AvaTax REST client: credentials, dispatch engine and typed operations."""

from avatax.client.auth import (
    AccountIdLicenseKey,
    AuthenticationContext,
    BearerToken,
    ClientIdentity,
    UsernamePassword,
)
from avatax.client.base import AvaTaxClientBase, resolve_environment
from avatax.client.call_log import CallLogRecord, CallLogState
from avatax.client.client import AvaTaxClient
from avatax.client.dispatcher import (
    NO_CONTENT,
    CapturedFailure,
    EndpointRequest,
    NoContent,
    RequestDispatcher,
)

__all__ = [
    "NO_CONTENT",
    "AccountIdLicenseKey",
    "AuthenticationContext",
    "AvaTaxClient",
    "AvaTaxClientBase",
    "BearerToken",
    "CallLogRecord",
    "CallLogState",
    "CapturedFailure",
    "ClientIdentity",
    "EndpointRequest",
    "NoContent",
    "RequestDispatcher",
    "UsernamePassword",
    "resolve_environment",
]
