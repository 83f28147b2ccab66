"""
Unit tests for the CORS policy middleware.
"""

import pytest
from fastapi import FastAPI, HTTPException
from fastapi.testclient import TestClient

from service_poolgateway.app.domain.cors_policy import CORS_HEADERS, install_cors_policy


class TestCORSPolicy:
    """Test cases for CORSPolicyMiddleware."""

    @pytest.fixture
    def calls(self):
        return []

    @pytest.fixture
    def client(self, calls):
        app = FastAPI()

        @app.get("/ok")
        async def ok():
            calls.append("ok")
            return {"ok": True}

        @app.get("/denied")
        async def denied():
            calls.append("denied")
            raise HTTPException(status_code=503, detail="suspended")

        install_cors_policy(app)
        return TestClient(app)

    def assert_cors_headers(self, response):
        for name, value in CORS_HEADERS.items():
            assert response.headers[name] == value

    def test_headers_on_success(self, client):
        response = client.get("/ok")

        assert response.status_code == 200
        self.assert_cors_headers(response)

    def test_headers_on_error(self, client):
        response = client.get("/denied")

        assert response.status_code == 503
        self.assert_cors_headers(response)

    def test_headers_on_unknown_path(self, client):
        response = client.get("/missing")

        assert response.status_code == 404
        self.assert_cors_headers(response)

    @pytest.mark.parametrize("path", ["/ok", "/denied", "/missing", "/"])
    def test_preflight_short_circuits(self, client, calls, path):
        response = client.options(path, headers={
            "Origin": "https://dashboard.example",
            "Access-Control-Request-Method": "GET",
        })

        assert response.status_code == 200
        assert response.content == b""
        self.assert_cors_headers(response)
        assert calls == []

    def test_allowed_methods_is_get_only(self, client):
        response = client.get("/ok")
        assert response.headers["Access-Control-Allow-Methods"] == "GET"
