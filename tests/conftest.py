import os

# Settings are read at import time; configure before hotel_cms is imported.
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["STORAGE_BACKEND"] = "local"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["ADMIN_EMAIL"] = "admin@test.local"
os.environ["ADMIN_PASSWORD"] = "s3cret-pass"
os.environ.pop("UPLOADTHING_TOKEN", None)
os.environ.pop("UPLOADTHING_SECRET", None)

import pytest
from fastapi.testclient import TestClient

from hotel_cms.db import Base, SessionLocal, engine
from hotel_cms.main import app
from hotel_cms.services.media import get_storage

from .fakes import ADMIN_EMAIL, ADMIN_PASSWORD, FakeStorage


@pytest.fixture
def db():
    """Fresh schema per test on the shared in-memory database."""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def storage():
    return FakeStorage()


@pytest.fixture
def client(db, storage):
    """Anonymous client; startup creates the default admin."""
    app.dependency_overrides[get_storage] = lambda: storage
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def admin_client(client):
    """Client holding a valid admin session cookie."""
    res = client.post("/api/auth", json={"email": ADMIN_EMAIL, "password": ADMIN_PASSWORD})
    assert res.status_code == 200, res.text
    return client
