import pytest

PROTECTED = [
    ("get", "/ads"),
    ("get", "/me"),
    ("post", "/ads/1/view"),
    ("get", "/admin/redemptions"),
    ("post", "/admin/redemptions/1/approve"),
]


@pytest.mark.parametrize("method,path", PROTECTED)
def test_missing_token_is_401(client, method, path):
    r = getattr(client, method)(path)
    assert r.status_code == 401
    assert r.json() == {"error": "Unauthorized"}


@pytest.mark.parametrize("method,path", PROTECTED)
def test_invalid_token_is_403(client, method, path):
    r = getattr(client, method)(path, headers={"Authorization": "Bearer not-a-jwt"})
    assert r.status_code == 403
    assert r.json() == {"error": "Invalid token"}


def test_user_cannot_reach_admin_routes(client, user_headers):
    r = client.get("/admin/redemptions", headers=user_headers)
    assert r.status_code == 403
    assert r.json() == {"error": "Forbidden"}

    body = {"title": "t", "url": "u", "duration": 1, "reward_points": 5}
    r = client.post("/admin/ads", json=body, headers=user_headers)
    assert r.status_code == 403
    # handler never ran
    admin = client.post("/login", json={"username": "admin", "password": "admin-pass"}).json()["token"]
    ads = client.get("/ads", headers={"Authorization": f"Bearer {admin}"}).json()
    assert ads == []


def test_admin_passes_role_check(client, admin_headers):
    r = client.get("/admin/redemptions", headers=admin_headers)
    assert r.status_code == 200
    assert r.json() == []


def test_health_needs_no_token(client):
    assert client.get("/health").json() == {"ok": True}


def test_unknown_route_uses_error_envelope(client):
    r = client.get("/nope")
    assert r.status_code == 404
    assert "error" in r.json()
