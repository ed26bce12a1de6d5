import mongomock
import pytest
from fastapi.testclient import TestClient

from api_client import ApiClient
from database import ensure_indexes, get_db
from main import app


@pytest.fixture
def mongo_db():
    db = mongomock.MongoClient()["hyperattend_test"]
    ensure_indexes(db)
    return db


@pytest.fixture
def client(mongo_db):
    app.dependency_overrides[get_db] = lambda: mongo_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def api(client):
    return ApiClient(base_url="http://testserver", session=client)
