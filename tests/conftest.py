"""Shared fixtures for the mapping layer tests.

Provides:
- A mock remote client installed as the process-wide client factory
- Reset of the process-wide Configuration after every test
- Shared mapped types live in tests/models.py, declared with an explicit
  "Test" namespace so custom fields are qualified the same way regardless
  of environment.
"""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from src.sobject.config import configure, reset_configuration


@pytest.fixture(autouse=True)
def _reset_configuration():
    """Restore the default Configuration after each test."""
    reset_configuration()
    yield
    reset_configuration()


@pytest.fixture
def mock_client() -> MagicMock:
    """Mock RemoteClient installed as the process-wide client."""
    client = MagicMock()
    configure(client_factory=lambda: client)
    return client
