import pytest

from contentshare import create_app
from contentshare.config import Config
from contentshare.extensions import db
from contentshare.models.user import Role, User
from contentshare.services.secret_store import SecretStore


class TestConfig(Config):
    __test__ = False

    TESTING = True
    SECRET_KEY = "test-secret-key"
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    JWT_SECRET_KEY = "test-jwt-secret-key-that-is-long-enough-for-hs256"
    PASSWORD_HASH_METHOD = "pbkdf2:sha256:1000"
    MAIL_DEFAULT_SENDER = "noreply@example.com"
    BASE_URL = "http://testserver"
    LOG_LEVEL = "WARNING"


class InMemorySecretStore(SecretStore):
    """Dict-backed store whose clock only moves when a test calls ``advance``."""

    def __init__(self):
        self.now = 0.0
        self.data = {}

    def advance(self, seconds):
        self.now += seconds

    def get(self, key):
        entry = self.data.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if self.now >= expires_at:
            del self.data[key]
            return None
        return value

    def set(self, key, value, ttl_seconds):
        self.data[key] = (value, self.now + ttl_seconds)

    def delete(self, key):
        self.data.pop(key, None)


@pytest.fixture
def store():
    return InMemorySecretStore()


@pytest.fixture
def app(store):
    app = create_app(TestConfig, secret_store=store)
    with app.app_context():
        db.create_all()
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def make_user(app):
    """Create a user straight in the database; returns its id."""
    counter = {"n": 0}

    def _make(role=Role.REGISTERED, username=None, password="secret123"):
        counter["n"] += 1
        username = username or f"user{counter['n']}"
        with app.app_context():
            service = app.extensions["credentials"]
            user = User(
                username=username,
                email=f"{username}@example.com",
                password_hash=service.hash_password(password),
                role=Role(role).value,
            )
            db.session.add(user)
            db.session.commit()
            return user.id

    return _make


@pytest.fixture
def auth_headers(app):
    def _headers(user_id, role=Role.REGISTERED):
        with app.app_context():
            token = app.extensions["credentials"].issue_token(user_id, role)
        return {"Authorization": f"Bearer {token}"}

    return _headers


@pytest.fixture
def owner(make_user, auth_headers):
    user_id = make_user()
    return user_id, auth_headers(user_id)


@pytest.fixture
def other(make_user, auth_headers):
    user_id = make_user()
    return user_id, auth_headers(user_id)


@pytest.fixture
def admin(make_user, auth_headers):
    user_id = make_user(role=Role.ADMIN)
    return user_id, auth_headers(user_id, Role.ADMIN)


@pytest.fixture
def create_content(client):
    def _create(headers=None, **overrides):
        body = {"title": "Capitals", "type": "Quiz", "is_public": True}
        body.update(overrides)
        resp = client.post("/api/content/", json=body, headers=headers or {})
        assert resp.status_code == 201, resp.get_json()
        return resp.get_json()["content"]

    return _create


@pytest.fixture
def add_elements(client):
    def _add(content_id, headers, count=2):
        elements = [
            {"element_type": "Question", "data": {"text": f"Question {i}"}}
            for i in range(1, count + 1)
        ]
        resp = client.post(f"/api/content-elements/{content_id}/elements", json={"elements": elements}, headers=headers)
        assert resp.status_code == 201, resp.get_json()
        return resp.get_json()["elements"]

    return _add


@pytest.fixture
def generate_link(client):
    def _generate(content_id, headers, **body):
        resp = client.post(f"/api/links/{content_id}/generate-link", json=body, headers=headers)
        assert resp.status_code == 201, resp.get_json()
        return resp.get_json()["details"]["link"]

    return _generate
