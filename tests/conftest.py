import mongomock
import pytest
from fastapi.testclient import TestClient

from database import get_db
from main import app


@pytest.fixture
def db():
    return mongomock.MongoClient()["agrocatalog_test"]


@pytest.fixture
def client(db):
    # no context manager: the lifespan would try to reach a real MongoDB
    app.dependency_overrides[get_db] = lambda: db
    yield TestClient(app)
    app.dependency_overrides.clear()
