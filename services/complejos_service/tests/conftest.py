import os

os.environ.setdefault("JWT_SECRET", "test-secret")

import mongomock
import pytest
from fastapi.testclient import TestClient

from database import Database
from main import create_app
from settings import Settings

TEST_SECRET = "test-secret"


@pytest.fixture
def settings():
    return Settings(jwt_secret=TEST_SECRET, mongo_db_name="COMPLEJOS_TEST", _env_file=None)


@pytest.fixture
def database():
    db = Database(mongomock.MongoClient())
    yield db
    db.close()


@pytest.fixture
def app(settings, database):
    return create_app(settings, database)


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def tokens(app):
    return app.state.token_service


@pytest.fixture
def admin_headers(tokens):
    return {"Authorization": tokens.issue("admin-1", "admin", "boss")}


def complejo_payload(**overrides):
    payload = {
        "username": "test_user",
        "password": "securepassword",
        "role": "user",
        "weight": "70",
        "height": "1.8",
        "gender": "male",
        "bench": "100",
        "squad": "140",
        "dl": "180",
    }
    payload.update(overrides)
    return payload


def event_payload(**overrides):
    payload = {
        "title": "Gym Meetup",
        "description": "A gathering of fitness enthusiasts.",
        "date": "2025-02-01T10:00:00Z",
        "location": "Local Gym, Main Street",
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def created_user(client):
    """Crea un Complejo con rol user y devuelve (datos, cabeceras)."""
    response = client.post("/complejo", json=complejo_payload())
    assert response.status_code == 201
    body = response.json()
    return body["data"], {"Authorization": body["token"]}


@pytest.fixture
def created_event(client, admin_headers):
    response = client.post("/event", json=event_payload(), headers=admin_headers)
    assert response.status_code == 201
    return response.json()["data"]
