import pytest
from fastapi.testclient import TestClient

from config import Settings
from main import create_app

TEST_SECRET = "test-secret"


def make_settings(**overrides) -> Settings:
    values = dict(
        app_env="test",
        database_url="sqlite://",
        secret_key=TEST_SECRET,
        static_dir="",
        cors_origins=["*"],
    )
    values.update(overrides)
    return Settings(**values)


def bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def settings():
    return make_settings()


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture
def db_session(client):
    db = client.app.state.context.session_factory()
    yield db
    db.close()


@pytest.fixture
def register(client):
    def _register(username="alice", email="a@x.com", password="pw1"):
        return client.post(
            "/api/auth/register",
            json={"username": username, "email": email, "password": password},
        )
    return _register


@pytest.fixture
def token(register):
    response = register()
    assert response.status_code == 201
    return response.json()["token"]
