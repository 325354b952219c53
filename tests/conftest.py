import pytest
import uuid
from decimal import Decimal
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from bookstore.core.config import Settings
from bookstore.core.security import hash_password
from bookstore.main import create_app
from bookstore.models.book import Book
from bookstore.models.genre import Genre
from bookstore.models.user import User

TEST_PASSWORD = "s3cret-pass"


@pytest.fixture
def test_settings(tmp_path):
    """Settings pointing at a throwaway SQLite file and upload dir."""
    return Settings(
        DATABASE_URL=f"sqlite:///{tmp_path / 'bookstore_test.db'}",
        AUTO_CREATE_TABLES=True,
        JWT_SECRET="test-secret",
        UPLOAD_DIR=str(tmp_path / "uploads"),
        LOG_LEVEL="WARNING",
    )


@pytest.fixture
def app(test_settings):
    return create_app(test_settings)


@pytest.fixture
def test_client(app):
    """Create a test client for FastAPI app (runs the lifespan)."""
    with TestClient(app) as client:
        yield client


@pytest.fixture
def database(app, test_client):
    """Storage handle opened by the app lifespan."""
    return app.state.db


@pytest.fixture
def db_session(database):
    """Create a fresh database session for each test."""
    session: Session = database.session()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


def register_and_login(client: TestClient, email: str, username: str | None = None) -> dict[str, str]:
    """Register a user through the API and return bearer headers."""
    payload = {"email": email, "password": TEST_PASSWORD}
    if username is not None:
        payload["username"] = username
    resp = client.post("/auth/register", json=payload)
    assert resp.status_code == 201, f"Failed to register: {resp.text}"

    resp = client.post("/auth/login", json={"email": email, "password": TEST_PASSWORD})
    assert resp.status_code == 200, f"Failed to login: {resp.text}"
    return {"Authorization": f"Bearer {resp.json()['data']['token']}"}


@pytest.fixture
def auth_headers(test_client):
    """HTTP headers carrying a valid bearer token."""
    return register_and_login(test_client, f"reader-{uuid.uuid4().hex[:8]}@example.com")


@pytest.fixture
def other_auth_headers(test_client):
    """Bearer headers for a second user."""
    return register_and_login(test_client, f"other-{uuid.uuid4().hex[:8]}@example.com")


@pytest.fixture
def sample_genre(test_client, auth_headers):
    """Create a sample genre using the API."""
    resp = test_client.post("/genres", json={"name": "Fantasy"}, headers=auth_headers)
    assert resp.status_code == 201, f"Failed to create sample genre: {resp.text}"
    return resp.json()["data"]


def book_form(genre_id: str, **overrides: str) -> dict[str, str]:
    form = {
        "title": f"Test Book {uuid.uuid4().hex[:8]}",
        "writer": "Jane Writer",
        "publisher": "Acme Press",
        "publication_year": "2023",
        "description": "A book used in tests",
        "price": "29.99",
        "stock_quantity": "10",
        "genre_id": genre_id,
    }
    form.update(overrides)
    return form


@pytest.fixture
def sample_book(test_client, sample_genre, auth_headers):
    """Create a sample book using the API and return its detail."""
    resp = test_client.post("/books", data=book_form(sample_genre["id"]), headers=auth_headers)
    assert resp.status_code == 201, f"Failed to create sample book: {resp.text}"
    detail = test_client.get(f"/books/{resp.json()['data']['id']}")
    return detail.json()["data"]


# Fixtures for repository/service tests that need SQLAlchemy model objects
@pytest.fixture
def genre_model(db_session):
    genre = Genre(name=f"Genre {uuid.uuid4().hex[:8]}")
    db_session.add(genre)
    db_session.commit()
    db_session.refresh(genre)
    return genre


@pytest.fixture
def make_book(db_session, genre_model):
    """Factory for book models."""

    def _make(stock: int = 10, price: str = "29.99", genre: Genre | None = None, title: str | None = None) -> Book:
        book = Book(
            title=title or f"Book {uuid.uuid4().hex[:8]}",
            writer="Jane Writer",
            publisher="Acme Press",
            publication_year=2023,
            price=Decimal(price),
            stock_quantity=stock,
            genre_id=(genre or genre_model).id,
        )
        db_session.add(book)
        db_session.commit()
        db_session.refresh(book)
        return book

    return _make


@pytest.fixture
def user_model(db_session):
    user = User(
        email=f"model-{uuid.uuid4().hex[:8]}@example.com",
        password_hash=hash_password(TEST_PASSWORD),
    )
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user
