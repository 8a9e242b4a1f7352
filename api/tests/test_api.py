from adpoints.main import create_app
from adpoints.users import find_by_username


def test_end_to_end(client, signup, admin_headers):
    user = signup("u1")
    r = client.post(
        "/admin/ads",
        json={"title": "Launch", "url": "https://example.com/launch", "duration": 30, "reward_points": 50},
        headers=admin_headers,
    )
    ad_id = r.json()["id"]

    r = client.post(f"/ads/{ad_id}/view", headers=user)
    assert r.status_code == 200
    assert r.json() == {"success": True, "reward": 50}

    r = client.post(f"/ads/{ad_id}/view", headers=user)
    assert r.status_code == 400
    assert r.json() == {"error": "Cooldown active"}

    assert client.get("/me", headers=user).json()["points"] == 50


def test_ads_listed_in_creation_order(client, user_headers, make_ad):
    first = make_ad(title="first", reward_points=1)
    second = make_ad(title="second", reward_points=2)
    listing = client.get("/ads", headers=user_headers).json()
    assert [a["id"] for a in listing] == [first, second]
    assert listing[1] == {
        "id": second,
        "title": "second",
        "url": "https://example.com/ad",
        "duration": 15,
        "reward_points": 2,
    }


def test_create_ad_validation(client, admin_headers):
    r = client.post("/admin/ads", json={"title": "x", "url": "y", "duration": 5}, headers=admin_headers)
    assert r.status_code == 400
    r = client.post(
        "/admin/ads",
        json={"title": "x", "url": "y", "duration": 5, "reward_points": -10},
        headers=admin_headers,
    )
    assert r.status_code == 400


def test_state_survives_restart(settings):
    first = create_app(settings)
    first.state.db.dispose()
    second = create_app(settings)
    with second.state.db.session() as s:
        assert find_by_username(s, "admin") is not None
    second.state.db.dispose()


def test_apps_do_not_share_storage(tmp_path, settings):
    other = settings.model_copy(update={"db_path": str(tmp_path / "other.db"), "admin_username": None})
    app = create_app(other)
    with app.state.db.session() as s:
        assert find_by_username(s, "admin") is None
    app.state.db.dispose()
