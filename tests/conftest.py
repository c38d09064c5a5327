"""Pytest configuration and shared fixtures for uaa-client tests."""

import pytest

from uaa_client.testing import FakeClock, FakeUAA


@pytest.fixture(autouse=True)
def clear_env(monkeypatch):
    """Auto-cleanup: Clear UAA environment variables before each test.

    This prevents a developer's own UAA settings from leaking into tests.
    """
    import os

    for key in list(os.environ.keys()):
        if key.startswith(("UAA_", "TEST_")):
            monkeypatch.delenv(key, raising=False)

    yield


@pytest.fixture
def uaa():
    """A fresh scripted UAA server."""
    return FakeUAA()


@pytest.fixture
def clock():
    """A manually advanced clock starting at 2024-01-01T00:00:00Z."""
    return FakeClock()
