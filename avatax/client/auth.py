"""Credentials, client identity and authentication header rendering.

An AvaTax client authenticates with exactly one of three credential sets:

- **UsernamePassword**: HTTP Basic auth with an AvaTax user account
- **AccountIdLicenseKey**: HTTP Basic auth with an account id and license key
- **BearerToken**: ``Authorization: Bearer <token>`` for OAuth tokens

The ``AuthenticationContext`` holds the active variant and renders the
transport headers for every call. Credentials are never validated locally;
only the remote service decides whether they are correct.
"""

from pydantic import BaseModel, ConfigDict, Field, SecretStr, field_validator

from avatax.core.constants import (
    ACCEPT_HEADER,
    AUTHORIZATION_HEADER,
    CLIENT_HEADER,
    JSON_CONTENT_TYPE,
    SDK_IDENTIFIER,
    SDK_VERSION,
)
from avatax.core.exceptions import ConfigurationError
from avatax.core.types import HeaderMap


class UsernamePassword(BaseModel):
    """Username and password of an AvaTax user account."""

    model_config = ConfigDict(frozen=True)

    username: str
    password: SecretStr


class AccountIdLicenseKey(BaseModel):
    """Account id and private license key of an AvaTax account."""

    model_config = ConfigDict(frozen=True, coerce_numbers_to_str=True)

    account_id: str
    license_key: SecretStr


class BearerToken(BaseModel):
    """OAuth bearer token."""

    model_config = ConfigDict(frozen=True)

    token: SecretStr


type Credentials = UsernamePassword | AccountIdLicenseKey | BearerToken


class ClientIdentity(BaseModel):
    """Application identity reported to AvaTax on every call.

    Raises:
        ConfigurationError: If app_name or app_version is empty.
    """

    model_config = ConfigDict(frozen=True)

    app_name: str | None = Field(description="Name of the calling application")
    app_version: str | None = Field(description="Version of the calling application")
    machine_name: str = Field(default="", description="Machine running the client")

    @field_validator("machine_name", mode="before")
    @classmethod
    def none_to_empty(cls, v: str | None) -> str:
        """Machine name is nullable but always rendered into the banner."""
        _ = cls
        return v or ""

    def model_post_init(self, __context: object) -> None:
        """Reject identities without an application name and version."""
        if not self.app_name or not self.app_version:
            msg = "app_name and app_version are mandatory fields"
            raise ConfigurationError(
                msg,
                context={"app_name": self.app_name, "app_version": self.app_version},
            )

    def banner(self, api_version: str = SDK_VERSION) -> str:
        """Render the X-Avalara-Client header value.

        Args:
            api_version: Version reported in the SDK version slot.

        Returns:
            str: ``"<app>; <version>; PythonRestClient; <api_version>; <machine>"``
        """
        return (
            f"{self.app_name}; {self.app_version}; {SDK_IDENTIFIER}; "
            f"{api_version}; {self.machine_name}"
        )


class AuthHeaders(BaseModel):
    """Headers and transport auth rendered for one call.

    ``basic_auth`` is handed to httpx as the ``auth`` argument; it is set
    for the two-part credential variants only.
    """

    model_config = ConfigDict(frozen=True)

    headers: HeaderMap = Field(default_factory=dict)
    basic_auth: tuple[str, str] | None = None


class AuthenticationContext:
    """Holds the active credential variant of a client instance.

    Args:
        credentials: Initial credentials, if already known.
    """

    def __init__(self, credentials: Credentials | None = None) -> None:
        self._credentials = credentials

    @property
    def credentials(self) -> Credentials | None:
        """The currently configured credentials, if any."""
        return self._credentials

    def set_username_password(self, username: str, password: str) -> None:
        """Use username/password security, replacing any previous credentials."""
        self._credentials = UsernamePassword(
            username=username, password=SecretStr(password)
        )

    def set_license_key(self, account_id: str | int, license_key: str) -> None:
        """Use account id/license key security, replacing any previous credentials."""
        self._credentials = AccountIdLicenseKey(
            account_id=str(account_id), license_key=SecretStr(license_key)
        )

    def set_bearer_token(self, token: str) -> None:
        """Use a bearer token, replacing any previous credentials."""
        self._credentials = BearerToken(token=SecretStr(token))

    def render_headers(
        self, identity: ClientIdentity, api_version: str = SDK_VERSION
    ) -> AuthHeaders:
        """Render the headers for the current credential variant.

        Args:
            identity: The client identity for the X-Avalara-Client banner.
            api_version: Version reported in the banner for this call.

        Returns:
            AuthHeaders: Accept and banner headers plus exactly one auth scheme,
                or no auth scheme when no credentials are configured.
        """
        headers: HeaderMap = {
            ACCEPT_HEADER: JSON_CONTENT_TYPE,
            CLIENT_HEADER: identity.banner(api_version),
        }
        credentials = self._credentials

        if isinstance(credentials, BearerToken):
            headers[AUTHORIZATION_HEADER] = (
                f"Bearer {credentials.token.get_secret_value()}"
            )
            return AuthHeaders(headers=headers)

        if isinstance(credentials, UsernamePassword):
            basic_auth = (credentials.username, credentials.password.get_secret_value())
            return AuthHeaders(headers=headers, basic_auth=basic_auth)

        if isinstance(credentials, AccountIdLicenseKey):
            basic_auth = (
                credentials.account_id,
                credentials.license_key.get_secret_value(),
            )
            return AuthHeaders(headers=headers, basic_auth=basic_auth)

        return AuthHeaders(headers=headers)
