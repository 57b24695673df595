from __future__ import annotations

from fastapi.testclient import TestClient

from conftest import AUTH_HEADERS, DEFAULT_CHANNELS, FakeEngine, make_settings
from pansou.gateway.app import create_app


def test_health_reports_plugins_when_enabled(client: TestClient) -> None:
    response = client.get("/api/health", headers=AUTH_HEADERS)

    assert response.status_code == 200
    assert response.json() == {
        "status": "ok",
        "plugins_enabled": True,
        "channels": DEFAULT_CHANNELS,
        "channels_count": 2,
        "plugin_count": 2,
        "plugins": ["labi", "pansearch"],
    }


def test_health_hides_plugins_when_disabled() -> None:
    app = create_app(settings=make_settings(async_plugin_enabled=False), engine=FakeEngine())
    with TestClient(app) as client:
        body = client.get("/api/health", headers=AUTH_HEADERS).json()

    assert body["plugins_enabled"] is False
    assert "plugin_count" not in body
    assert "plugins" not in body


def test_health_with_empty_registry() -> None:
    app = create_app(settings=make_settings(), engine=FakeEngine(plugin_names=[]))
    with TestClient(app) as client:
        body = client.get("/api/health", headers=AUTH_HEADERS).json()

    assert body["plugin_count"] == 0
    assert body["plugins"] == []


def test_health_requires_token(client: TestClient) -> None:
    assert client.get("/api/health").status_code == 401


def test_pages_render_without_auth(client: TestClient) -> None:
    for path in ("/", "/search", "/token"):
        response = client.get(path)
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/html")
        assert "<!doctype html>" in response.text


def test_missing_page_is_404(tmp_path) -> None:
    app = create_app(settings=make_settings(templates_dir=tmp_path), engine=FakeEngine())
    with TestClient(app) as client:
        assert client.get("/token").status_code == 404
