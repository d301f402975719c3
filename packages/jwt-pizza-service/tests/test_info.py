"""Welcome, docs and unknown-endpoint tests."""

from __future__ import annotations

from jwt_pizza_service import __version__


def test_welcome(client):
    resp = client.get("/")
    assert resp.status_code == 200
    assert resp.json() == {"message": "welcome to JWT Pizza", "version": __version__}


def test_docs_lists_endpoints(client):
    resp = client.get("/api/docs")
    assert resp.status_code == 200
    data = resp.json()
    assert data["version"] == __version__
    assert data["config"] == {"factory": "http://factory.test", "db": "sqlite"}

    endpoints = {(e["method"], e["path"]): e for e in data["endpoints"]}
    assert endpoints[("DELETE", "/api/auth")]["requiresAuth"] is True
    assert endpoints[("POST", "/api/auth")]["requiresAuth"] is False
    assert endpoints[("GET", "/api/order/menu")]["requiresAuth"] is False
    assert endpoints[("GET", "/api/franchise")]["requiresAuth"] is False
    assert endpoints[("PUT", "/api/order/menu")]["requiresAuth"] is True
    assert endpoints[("GET", "/api/order/menu")]["description"]
    assert ("GET", "/api/docs") not in endpoints


def test_unknown_path_returns_404(client):
    resp = client.get("/api/nowhere")
    assert resp.status_code == 404
    assert resp.json() == {"message": "unknown endpoint"}


def test_wrong_method_returns_404(client):
    resp = client.patch("/api/order/menu")
    assert resp.status_code == 404
    assert resp.json() == {"message": "unknown endpoint"}
