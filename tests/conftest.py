"""Root conftest.py for the AvaTax client test suite.

This file contains project-wide fixtures and pytest configuration.
"""

import os
from collections.abc import Generator

import pytest

from avatax.core.config import get_settings


def pytest_configure(config: pytest.Config) -> None:
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "unit: Unit tests that test individual components in isolation"
    )
    config.addinivalue_line(
        "markers", "integration: Integration tests that exercise the client end to end"
    )


@pytest.fixture(autouse=True)
def clean_lru_cache() -> Generator[None]:
    """Clear cached settings before and after each test to ensure isolation."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    """Remove AVATAX_* variables so tests never pick up real credentials.

    Args:
        monkeypatch: Pytest monkeypatch fixture.

    Returns:
        pytest.MonkeyPatch: The monkeypatch instance for env manipulation.
    """
    for key in list(os.environ):
        if key.startswith("AVATAX_"):
            monkeypatch.delenv(key, raising=False)
    return monkeypatch
