"""
Tests for the FastAPI surface over the tool registry.
"""

import pytest
from fastapi.testclient import TestClient

from autowp import http_server

from .conftest import APP_PASSWORD, SITE, USERNAME


@pytest.fixture
def client(monkeypatch, tool_context):
    monkeypatch.setattr(http_server, "context", tool_context)
    return TestClient(http_server.app)


class TestHealth:

    @pytest.mark.unit
    def test_root(self, client):
        response = client.get("/")
        assert response.status_code == 200
        assert response.json()["status"] == "running"
        assert response.json()["tools"] == 44

    @pytest.mark.unit
    def test_health_before_authentication(self, client):
        body = client.get("/health").json()
        assert body == {"status": "healthy", "wordpress": False, "image_optimization": False}

    @pytest.mark.unit
    def test_uninitialized_server(self, monkeypatch):
        monkeypatch.setattr(http_server, "context", None)
        response = TestClient(http_server.app).get("/health")
        assert response.status_code == 503


class TestTools:

    @pytest.mark.unit
    def test_list_tools(self, client):
        tools = {t["name"]: t for t in client.get("/tools").json()}
        assert "create-blog-post" in tools
        assert "title" in tools["create-blog-post"]["inputSchema"]["required"]

    @pytest.mark.unit
    def test_unknown_tool_is_404(self, client):
        assert client.post("/tools/make-coffee", json={}).status_code == 404

    @pytest.mark.unit
    def test_authenticate_and_create_post(self, client):
        auth = client.post("/tools/authenticate",
                           json={"siteUrl": SITE, "username": USERNAME, "appPassword": APP_PASSWORD})
        assert auth.json()["isError"] is False

        created = client.post("/tools/create-blog-post", json={"title": "Hello", "content": "<p>World</p>"})
        body = created.json()
        assert body["isError"] is False
        assert body["content"][0]["type"] == "text"
        assert "Hello" in body["content"][0]["text"]

        assert client.get("/health").json()["wordpress"] is True

    @pytest.mark.unit
    def test_tool_error_is_flagged(self, client):
        body = client.post("/tools/list-posts", json={"perPage": 500}).json()
        assert body["isError"] is True

    @pytest.mark.unit
    def test_tool_without_body(self, client):
        body = client.post("/tools/get-wp-tags").json()
        assert body["isError"] is True
        assert "not configured" in body["content"][0]["text"]
