"""Tests for the app factory."""

import os
from unittest.mock import patch

from fastapi.testclient import TestClient

from rgbproxy.api.factory import create_app

from .helpers import rpc_request


class TestCreateApp:
    def test_builds_service_from_environment(self, tmp_path):
        with patch.dict(os.environ, {"APP_DATA": str(tmp_path)}, clear=True):
            app = create_app()

        with TestClient(app) as client:
            response = client.post("/json-rpc", json=rpc_request("server.info"))

        assert response.json()["result"]["protocol_version"] == "0.2"
        assert (tmp_path / "app.db").exists()
        assert (tmp_path / "tmp").is_dir()
        assert (tmp_path / "consignments").is_dir()
        assert (tmp_path / "media").is_dir()

    def test_uses_given_service(self, settings, service):
        app = create_app(settings=settings, service=service)
        assert app.state.service is service
        assert app.state.dispatcher.service is service

    def test_docs_not_mounted(self, client):
        assert client.get("/docs").status_code == 404

    def test_cors_allows_any_origin(self, client):
        response = client.get("/health", headers={"Origin": "https://wallet.example"})
        assert response.headers["access-control-allow-origin"] == "*"
