import os

# Must be set before config/database/main are imported.
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("SECRET_KEY", "test_secret")

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from fastapi.testclient import TestClient

from database import Base, get_db
from main import app

# Create engine globally for the test session
TEST_DATABASE_URL = "sqlite:///:memory:"
engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="session", autouse=True)
def setup_database():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def db_session():
    connection = engine.connect()
    transaction = connection.begin()
    session = TestingSessionLocal(bind=connection)

    yield session

    session.close()
    transaction.rollback()
    connection.close()


@pytest.fixture(scope="function")
def client(db_session):
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def register(client):
    """Register a user and return ``(user_id, auth_headers)``."""

    def _register(name="Alice Johnson", email="alice@example.com", password="password123"):
        res = client.post(
            "/users/register",
            json={"name": name, "email": email, "password": password},
        )
        assert res.status_code == 201, res.text
        login = client.post("/users/login", json={"email": email, "password": password})
        assert login.status_code == 200, login.text
        return res.json()["id"], {"Authorization": f"Bearer {login.json()['token']}"}

    return _register


@pytest.fixture
def alice(register):
    return register("Alice Johnson", "alice@example.com")


@pytest.fixture
def bob(register):
    return register("Bob Williams", "bob@example.com")


@pytest.fixture
def add_book(client):
    def _add_book(headers, title="The Hobbit", author="J.R.R. Tolkien", genre="Fantasy",
                  year=1937, description=None):
        res = client.post(
            "/books/",
            json={
                "title": title,
                "author": author,
                "genre": genre,
                "year": year,
                "description": description,
            },
            headers=headers,
        )
        assert res.status_code == 201, res.text
        return res.json()

    return _add_book


@pytest.fixture
def add_review(client):
    def _add_review(headers, book_id, rating, review_text="Worth reading"):
        return client.post(
            f"/books/{book_id}/reviews",
            json={"rating": rating, "review_text": review_text},
            headers=headers,
        )

    return _add_review
