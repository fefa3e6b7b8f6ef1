"""Shared fixtures for query API tests."""

from __future__ import annotations

from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from track_lrs.web.app import app
from track_lrs.web.service import LrsService


@pytest.fixture
def client():
    """FastAPI test client."""
    with TestClient(app) as c:
        yield c


@pytest.fixture
def service(network):
    return LrsService(network)


@pytest.fixture
def served(client, service):
    """Test client whose endpoints query the two-curve test network."""
    with patch("track_lrs.web.app._service", return_value=service):
        yield client
