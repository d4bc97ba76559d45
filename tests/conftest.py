"""
Shared fixtures for the test suite.

Builds isolated applications so debug and production behavior can be
tested side by side.
"""

import pytest
from fastapi.testclient import TestClient

from faultline.core.config import Settings
from faultline.main import create_app


def build_client(**overrides) -> TestClient:
    """Return a TestClient for an app built with ``overrides``."""
    config = Settings(**overrides)
    return TestClient(create_app(config))


@pytest.fixture(scope="module")
def client() -> TestClient:
    """Production-mode client."""
    return build_client(debug=False)


@pytest.fixture(scope="module")
def debug_client() -> TestClient:
    """Debug-mode client."""
    return build_client(debug=True)


@pytest.fixture
def make_client():
    """Factory fixture building a client with custom settings."""
    return build_client
