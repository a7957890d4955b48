import os

# Must be set before anything imports app.database
os.environ["DATABASE_URL"] = "sqlite://"

import pytest
from fastapi.testclient import TestClient

from app.database import Base, SessionLocal, engine
from app.main import app
from app.services.auth import AuthService, AuthStateChannel
from app.services.validation import StudentDraft

TEST_USER_EMAIL = "professora@example.com"
TEST_USER_PASSWORD = "segredo123"


@pytest.fixture
def db():
    """
    A database session on the shared in-memory database.
    Every table is emptied after the test.
    """
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        with engine.begin() as connection:
            for table in reversed(Base.metadata.sorted_tables):
                connection.execute(table.delete())


@pytest.fixture
def channel():
    return AuthStateChannel()


@pytest.fixture
def auth(db, channel):
    return AuthService(db, channel)


@pytest.fixture
def owner(auth):
    return auth.sign_up(TEST_USER_EMAIL, TEST_USER_PASSWORD)


@pytest.fixture
def sample_draft():
    return StudentDraft(
        full_name="Ana Silva",
        registration_number="2024001",
        email="ana@example.com",
        course="Engenharia",
    )


@pytest.fixture
def client(db):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def logged_in_client(client, owner):
    """
    Provides a client whose cookie jar already holds a session for the
    test user.
    """
    response = client.post("/login", data={"email": TEST_USER_EMAIL, "password": TEST_USER_PASSWORD})
    assert response.status_code == 200, response.text
    assert response.url.path == "/records"
    return client
