import pytest
from fastapi.testclient import TestClient

from adpoints.config import Settings
from adpoints.main import create_app

ADMIN_USER = "admin"
ADMIN_PASS = "admin-pass"


@pytest.fixture
def settings(tmp_path):
    return Settings(
        db_path=str(tmp_path / "adpoints.db"),
        jwt_secret="test-secret-with-enough-bytes-for-hs256!",
        admin_username=ADMIN_USER,
        admin_password=ADMIN_PASS,
        cooldown_ms=30000,
        bcrypt_rounds=4,
    )


@pytest.fixture
def app(settings):
    app = create_app(settings)
    yield app
    app.state.db.dispose()


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture
def db(app):
    session = app.state.db.session()
    yield session
    session.close()


@pytest.fixture
def login(client):
    def _login(username, password):
        r = client.post("/login", json={"username": username, "password": password})
        assert r.status_code == 200, r.text
        return {"Authorization": f"Bearer {r.json()['token']}"}
    return _login


@pytest.fixture
def signup(client, login):
    def _signup(username, password="secret-pw"):
        r = client.post("/register", json={"username": username, "password": password})
        assert r.status_code == 200, r.text
        return login(username, password)
    return _signup


@pytest.fixture
def admin_headers(login):
    return login(ADMIN_USER, ADMIN_PASS)


@pytest.fixture
def user_headers(signup):
    return signup("alice", "wonderland")


@pytest.fixture
def make_ad(client, admin_headers):
    def _make_ad(reward_points=50, title="Spring sale"):
        body = {"title": title, "url": "https://example.com/ad", "duration": 15, "reward_points": reward_points}
        r = client.post("/admin/ads", json=body, headers=admin_headers)
        assert r.status_code == 200, r.text
        return r.json()["id"]
    return _make_ad
