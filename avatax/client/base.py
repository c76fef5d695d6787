"""Base AvaTax client handling connectivity to the AvaTax v2 API.

``AvaTaxClientBase`` owns everything a client instance shares across calls:
the identity reported to AvaTax, the active credentials, the httpx client
bound to the selected environment, and the dispatcher configuration. The
descendant ``AvaTaxClient`` implements the API methods on top of
``rest_call``.

Each instance carries its own configuration, so clients with different
credentials or environments can coexist in one process.
"""

from typing import Any, Self

import httpx

from avatax.client.auth import AuthenticationContext, ClientIdentity
from avatax.client.dispatcher import (
    CapturedFailure,
    DispatchResult,
    EndpointRequest,
    RequestDispatcher,
)
from avatax.core.config import ClientSettings, ErrorMode
from avatax.core.constants import (
    CUSTOM_URL_PREFIXES,
    PRODUCTION_URL,
    SANDBOX_ENVIRONMENT,
    SANDBOX_URL,
    SDK_VERSION,
)
from avatax.core.exceptions import ConfigurationError


def resolve_environment(environment: str | None) -> str:
    """Map an environment setting to the base URL of an AvaTax instance.

    Args:
        environment: ``"sandbox"``, a full ``http(s)://`` URL, or anything
            else for production.

    Returns:
        str: The base URL to send requests to.
    """
    if environment == SANDBOX_ENVIRONMENT:
        return SANDBOX_URL
    if environment and environment.startswith(CUSTOM_URL_PREFIXES):
        return environment
    return PRODUCTION_URL


class AvaTaxClientBase:
    """Connectivity, credentials and error handling for AvaTax clients.

    Args:
        app_name: Name of your application. Should not contain semicolons.
        app_version: Version of your application. Should not contain semicolons.
        machine_name: Machine running this code. Should not contain semicolons.
        environment: ``"sandbox"``, ``"production"``, or the full URL of your
            AvaTax instance.
        http_options: Extra keyword arguments for ``httpx.Client``. The base
            URL cannot be overridden this way. A ``timeout`` given here is
            the client default when the settings leave ``timeout_seconds``
            unset.
        settings: Client settings for timeout, error mode and logging.
        logger: Loguru-compatible logger receiving one record per call.

    Raises:
        ConfigurationError: If app_name or app_version is empty.
    """

    def __init__(
        self,
        app_name: str,
        app_version: str,
        machine_name: str | None = "",
        environment: str = SANDBOX_ENVIRONMENT,
        http_options: dict[str, Any] | None = None,
        settings: ClientSettings | None = None,
        logger: Any = None,  # noqa: ANN401 - any object with info()/error()
    ) -> None:
        self.identity = ClientIdentity(
            app_name=app_name, app_version=app_version, machine_name=machine_name
        )
        self.environment = environment
        self.base_url = resolve_environment(environment)
        self.settings = settings or ClientSettings()
        self.auth = AuthenticationContext()

        options = dict(http_options or {})
        # Prevent overriding the base URL
        options["base_url"] = self.base_url
        self.http_client = httpx.Client(**options)

        self.dispatcher = RequestDispatcher(
            self.http_client,
            self.auth,
            self.identity,
            timeout_seconds=self.settings.timeout_seconds,
            default_timeout=options.get("timeout"),
            error_mode=self.settings.error_mode,
            log_bodies=self.settings.log_config.log_request_and_response_body,
            sensitive_fields=self.settings.log_config.sensitive_fields,
            logger=logger,
        )

    @classmethod
    def from_settings(
        cls,
        settings: ClientSettings,
        http_options: dict[str, Any] | None = None,
        logger: Any = None,  # noqa: ANN401 - any object with info()/error()
    ) -> Self:
        """Build a client from settings, applying any configured credentials.

        A bearer token takes precedence over a license key, which takes
        precedence over a username and password.

        Args:
            settings: Loaded client settings.
            http_options: Extra keyword arguments for ``httpx.Client``.
            logger: Loguru-compatible logger.

        Returns:
            Self: A configured client.

        Raises:
            ConfigurationError: If the settings lack app_name or app_version.
        """
        client = cls(
            settings.app_name,
            settings.app_version,
            settings.machine_name,
            settings.environment,
            http_options=http_options,
            settings=settings,
            logger=logger,
        )
        if settings.bearer_token:
            client.with_bearer_token(settings.bearer_token)
        elif settings.account_id and settings.license_key:
            client.with_license_key(settings.account_id, settings.license_key)
        elif settings.username and settings.password:
            client.with_security(settings.username, settings.password)
        elif settings.account_id or settings.license_key:
            msg = "account_id and license_key must be configured together"
            raise ConfigurationError(msg, context={"account_id": settings.account_id})
        return client

    def with_security(self, username: str, password: str) -> Self:
        """Use username/password security.

        Args:
            username: The username for your AvaTax user account.
            password: The password for your AvaTax user account.

        Returns:
            Self: This client, for chaining.
        """
        self.auth.set_username_password(username, password)
        return self

    def with_license_key(self, account_id: str | int, license_key: str) -> Self:
        """Use account id/license key security.

        Args:
            account_id: The account id for your AvaTax account.
            license_key: The private license key for your AvaTax account.

        Returns:
            Self: This client, for chaining.
        """
        self.auth.set_license_key(account_id, license_key)
        return self

    def with_bearer_token(self, bearer_token: str) -> Self:
        """Use an OAuth bearer token.

        Returns:
            Self: This client, for chaining.
        """
        self.auth.set_bearer_token(bearer_token)
        return self

    def with_catch_exceptions(self, catch_exceptions: bool = True) -> Self:  # noqa: FBT001, FBT002
        """Capture failures as values, or let transport exceptions propagate.

        Returns:
            Self: This client, for chaining.
        """
        mode = ErrorMode.CAPTURE if catch_exceptions else ErrorMode.RAISE
        return self.with_error_mode(mode)

    def with_error_mode(self, error_mode: ErrorMode) -> Self:
        """Select how failed calls are reported.

        Returns:
            Self: This client, for chaining.
        """
        self.dispatcher.error_mode = error_mode
        return self

    def with_logging(self, log_bodies: bool = True) -> Self:  # noqa: FBT001, FBT002
        """Include request and response bodies in call logs.

        Returns:
            Self: This client, for chaining.
        """
        self.dispatcher.log_bodies = log_bodies
        return self

    @property
    def error_mode(self) -> ErrorMode:
        """The active error mode."""
        return self.dispatcher.error_mode

    def get_client(self) -> Self:
        """Return this client, for subclasses that add their own configuration."""
        return self

    def rest_call(
        self, request: EndpointRequest, api_version: str = SDK_VERSION
    ) -> DispatchResult | str:
        """Make a single REST call through the dispatcher.

        Args:
            request: The endpoint invocation.
            api_version: Version reported in the X-Avalara-Client banner.

        Returns:
            DispatchResult | str: The dispatcher result; in message mode a
                failure is returned as its message string.
        """
        result = self.dispatcher.execute(request, api_version)
        if isinstance(result, CapturedFailure) and self.error_mode is ErrorMode.MESSAGE:
            return result.message
        return result

    def close(self) -> None:
        """Close the underlying HTTP client."""
        self.http_client.close()

    def __enter__(self) -> Self:
        """Context manager entry."""
        return self

    def __exit__(self, *args: object) -> None:
        """Context manager exit."""
        self.close()
