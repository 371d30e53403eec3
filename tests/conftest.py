"""Shared pytest fixtures for rgbproxy tests."""
import sys
sys.dont_write_bytecode = True

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from rgbproxy.api.factory import create_app  # noqa: E402
from rgbproxy.config import Settings  # noqa: E402
from rgbproxy.service import RelayService  # noqa: E402


@pytest.fixture
def settings(tmp_path):
    """Settings rooted in a per-test data directory (SQLite inside it)."""
    return Settings.for_data_root(tmp_path / "app-data")


@pytest.fixture
def service(settings):
    """Migrated relay service over the per-test data root."""
    svc = RelayService.from_settings(settings)
    yield svc
    svc.close()


@pytest.fixture
def client(settings, service):
    """HTTP client against an app bound to the test service."""
    app = create_app(settings=settings, service=service)
    with TestClient(app) as test_client:
        yield test_client
