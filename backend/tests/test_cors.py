"""CORS allow-list behaviour with credentials enabled."""

from simhub.config import settings


def test_preflight_from_allowed_origin_echoes_origin_with_credentials(client):
    origin = "http://localhost:5173"
    assert origin in settings.cors_origins
    r = client.options(
        "/api/simulations",
        headers={
            "Origin": origin,
            "Access-Control-Request-Method": "POST",
            "Access-Control-Request-Headers": "Authorization, Content-Type",
        },
    )
    assert r.status_code == 200
    assert r.headers["access-control-allow-origin"] == origin
    assert r.headers["access-control-allow-credentials"] == "true"


def test_simple_request_from_allowed_origin_gets_cors_headers(client):
    r = client.get("/health", headers={"Origin": "http://localhost:3000"})
    assert r.status_code == 200
    assert r.headers["access-control-allow-origin"] == "http://localhost:3000"
    assert r.headers["access-control-allow-credentials"] == "true"


def test_origin_outside_allow_list_gets_no_allow_origin(client):
    evil = "https://evil.example"
    preflight = client.options(
        "/api/simulations",
        headers={"Origin": evil, "Access-Control-Request-Method": "POST"},
    )
    assert preflight.status_code == 400
    assert "access-control-allow-origin" not in preflight.headers

    simple = client.get("/health", headers={"Origin": evil})
    assert simple.status_code == 200
    assert "access-control-allow-origin" not in simple.headers
