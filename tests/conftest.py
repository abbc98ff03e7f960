"""Pytest configuration and shared fixtures for all tests."""

from unittest.mock import Mock

import pytest
import requests

from certin_mapper._enrichment.cache import ProviderCache

CONFIG_ENV_VARS = (
    "GITHUB_TOKEN",
    "EOL_OVERRIDES",
    "HTTP_TIMEOUT",
    "GITHUB_RETRY_DELAY",
    "LOG_LEVEL",
    "SENTRY_DSN",
)


@pytest.fixture(autouse=True)
def isolate_environment(monkeypatch):
    """Clear configuration environment variables for all tests.

    Keeps a developer's GITHUB_TOKEN or SENTRY_DSN from leaking into test runs
    and sending real requests or telemetry.
    """
    for name in CONFIG_ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def cache():
    """Fresh provider cache."""
    return ProviderCache()


@pytest.fixture
def mock_session():
    """Create a mock requests session."""
    return Mock(spec=requests.Session)


def make_response(status_code=200, json_data=None, json_error=None):
    """Build a mock HTTP response."""
    response = Mock()
    response.status_code = status_code
    if json_error is not None:
        response.json.side_effect = json_error
    else:
        response.json.return_value = json_data
    return response


@pytest.fixture
def http_response():
    """Factory for mock HTTP responses."""
    return make_response
