import pytest

from app import create_app

ADMIN_EMAIL = "admin@example.com"
ADMIN_PASSWORD = "admin-pass-123"
PLAYER_PASSWORD = "player-pass-123"


@pytest.fixture
def app(tmp_path):
    app = create_app({
        "TESTING": True,
        "SECRET_KEY": "test-secret",
        "DATA_FILE": str(tmp_path / "data" / "db.json"),
        "STORE_LOCK_TIMEOUT": 5,
        "BCRYPT_ROUNDS": 4,
        "DEFAULT_ADMIN_EMAIL": ADMIN_EMAIL,
        "DEFAULT_ADMIN_PASSWORD": ADMIN_PASSWORD,
        "SMTP_HOST": None,
        "OTP_DEBUG_ECHO": True,
    })
    yield app


@pytest.fixture
def app_ctx(app):
    with app.app_context():
        yield app


class ApiClient:
    """Test client that replays the CSRF cookie as a header."""

    def __init__(self, client):
        self.client = client

    def _headers(self):
        cookie = self.client.get_cookie("csrf_token")
        return {"X-CSRF-Token": cookie.value} if cookie else {}

    def get(self, url, **kwargs):
        return self.client.get(url, **kwargs)

    def post(self, url, json=None):
        return self.client.post(url, json=json or {}, headers=self._headers())

    def put(self, url, json=None):
        return self.client.put(url, json=json or {}, headers=self._headers())

    def login(self, email, password):
        return self.client.post("/auth/login", json={"email": email, "password": password})


def signup(client, email, first_name="Pat", last_name="Lee", phone="555-0101", password=PLAYER_PASSWORD):
    resp = client.post("/auth/signup", json={
        "first_name": first_name,
        "last_name": last_name,
        "email": email,
        "phone": phone,
        "password": password,
        "confirm_password": password,
    })
    assert resp.status_code == 200, resp.get_json()
    body = resp.get_json()
    return client.post("/auth/signup/verify", json={
        "otp_token": body["otp_token"],
        "code": body["debug_code"],
    })


@pytest.fixture
def admin(app):
    api = ApiClient(app.test_client())
    resp = api.login(ADMIN_EMAIL, ADMIN_PASSWORD)
    assert resp.status_code == 200
    return api


@pytest.fixture
def player(app):
    api = ApiClient(app.test_client())
    resp = signup(api.client, "pat@example.com")
    assert resp.status_code == 201, resp.get_json()
    return api


@pytest.fixture
def other_player(app):
    api = ApiClient(app.test_client())
    resp = signup(api.client, "sam@example.com", first_name="Sam", last_name="Ng", phone="555-0202")
    assert resp.status_code == 201, resp.get_json()
    return api
