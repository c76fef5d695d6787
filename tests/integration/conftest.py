"""Shared fixtures for integration tests.

Integration tests drive a fully configured client through the public API.
HTTP traffic is answered by ``FakeAvaTax``, an in-process stand-in for the
sandbox service, so the suite runs without network access or credentials.
"""

import base64
from collections.abc import Generator

import httpx
import orjson
import pytest
from pytest_mock import MockerFixture, MockType

from avatax.client import AvaTaxClient
from avatax.core.config import ClientSettings


class FakeAvaTax:
    """Minimal AvaTax sandbox emulation for the endpoints under test.

    Args:
        account_id: Account id accepted by basic auth.
        license_key: License key accepted by basic auth.
    """

    def __init__(self, account_id: str = "123456", license_key: str = "key") -> None:
        token = base64.b64encode(f"{account_id}:{license_key}".encode()).decode()
        self.expected_auth = f"Basic {token}"
        self.requests: list[httpx.Request] = []
        self.overrides: dict[str, httpx.Response] = {}

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.url.path in self.overrides:
            return self.overrides[request.url.path]

        authenticated = request.headers.get("Authorization") == self.expected_auth
        if request.url.path == "/api/v2/utilities/ping":
            return httpx.Response(
                200,
                json={
                    "version": "24.6.0",
                    "authenticated": authenticated,
                    "authenticationType": (
                        "AccountIdLicenseKey" if authenticated else "None"
                    ),
                },
                headers={"x-correlation-id": "ping-correlation"},
            )
        if not authenticated:
            return httpx.Response(
                401,
                json={"error": {"code": "AuthenticationException", "message": "denied"}},
            )
        if request.url.path == "/api/v2/transactions/create":
            return self._create(request)
        return httpx.Response(
            404, json={"error": {"code": "EntityNotFoundError", "message": "nope"}}
        )

    def _create(self, request: httpx.Request) -> httpx.Response:
        body = orjson.loads(request.content)
        lines = [
            {
                "lineNumber": line["number"],
                "lineAmount": line["amount"],
                "quantity": line["quantity"],
                "taxCode": line.get("taxCode"),
                "exemptionCode": line.get("exemptionCode"),
                "tax": 0.0 if line.get("exemptionCode") else line["amount"] * 0.1,
            }
            for line in body["lines"]
        ]
        return httpx.Response(
            201,
            json={
                "id": 987,
                "code": body.get("code") or "generated-code",
                "date": body["date"],
                "status": "Committed" if body.get("commit") else "Saved",
                "type": body["type"],
                "customerCode": body["customerCode"],
                "totalTax": sum(line["tax"] for line in lines),
                "lines": lines,
            },
            headers={"x-correlation-id": "create-correlation"},
        )


@pytest.fixture
def fake_avatax() -> FakeAvaTax:
    """Provide a fresh fake sandbox."""
    return FakeAvaTax()


@pytest.fixture
def call_logger(mocker: MockerFixture) -> MockType:
    """Provide a logger mock recording one call per API request."""
    return mocker.Mock()


@pytest.fixture
def sandbox_client(
    fake_avatax: FakeAvaTax, call_logger: MockType
) -> Generator[AvaTaxClient]:
    """Provide a sandbox client with license key credentials.

    Yields:
        AvaTaxClient: Client routed to the fake sandbox.
    """
    settings = ClientSettings(
        _env_file=None,
        app_name="integrationApp",
        app_version="1.0",
        machine_name="ci",
        account_id="123456",
        license_key="key",
    )
    client = AvaTaxClient.from_settings(
        settings,
        http_options={"transport": httpx.MockTransport(fake_avatax)},
        logger=call_logger,
    )
    yield client
    client.close()
