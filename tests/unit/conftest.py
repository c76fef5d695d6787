"""Shared fixtures for unit tests."""

from collections.abc import Callable, Generator
from typing import Any

import httpx
import pytest
from pytest_mock import MockerFixture, MockType

from avatax.client import AvaTaxClient
from avatax.core.config import ClientSettings

type Handler = Callable[[httpx.Request], httpx.Response]
type ClientFactory = Callable[..., AvaTaxClient]


@pytest.fixture
def client_settings() -> ClientSettings:
    """Provide settings isolated from any .env file.

    Returns:
        ClientSettings: Settings with test identity and defaults.
    """
    return ClientSettings(
        _env_file=None,
        app_name="testApp",
        app_version="1.0",
        machine_name="test-machine",
    )


@pytest.fixture
def mock_logger(mocker: MockerFixture) -> MockType:
    """Provide a logger mock recording info/error calls.

    Returns:
        MockType: Mock exposing ``info`` and ``error``.
    """
    return mocker.Mock()


@pytest.fixture
def make_client(
    client_settings: ClientSettings, mock_logger: MockType
) -> Generator[ClientFactory]:
    """Build clients whose HTTP traffic is answered by a handler function.

    Yields:
        ClientFactory: ``make_client(handler, environment=..., settings=...)``.
    """
    created: list[AvaTaxClient] = []

    def factory(
        handler: Handler,
        environment: str = "sandbox",
        settings: ClientSettings | None = None,
        **http_options: Any,
    ) -> AvaTaxClient:
        client = AvaTaxClient(
            "testApp",
            "1.0",
            "test-machine",
            environment,
            http_options={"transport": httpx.MockTransport(handler), **http_options},
            settings=settings or client_settings,
            logger=mock_logger,
        )
        created.append(client)
        return client

    yield factory

    for client in created:
        client.close()

