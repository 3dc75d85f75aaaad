# tests/test_api/conftest.py
import pytest
from fastapi.testclient import TestClient
from api.main import app
from api.dependencies import get_clock
from lending.sa.database import get_db, set_database


@pytest.fixture
def client(database, clock):
    """TestClient bound to the test database and the fixed clock"""
    def override_get_db():
        session = database.get_session()
        try:
            yield session
        finally:
            session.close()

    set_database(database)
    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_clock] = lambda: clock
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
    set_database(None)


@pytest.fixture
def book_payload():
    return {
        "title": "Dune",
        "author": "Frank Herbert",
        "isbn": "9780441172719",
        "publisher": "Ace",
        "publication_date": "1965-08-01",
        "category": "Fiction",
        "pages": 412,
        "price": "9.99",
        "total_copies": 2,
    }


@pytest.fixture
def patron_payload():
    return {
        "first_name": "Jane",
        "last_name": "Doe",
        "email": "jane@example.com",
        "phone_number": "5551234567",
        "date_of_birth": "2000-01-01",
        "address": "12 Library Lane, Springfield",
        "username": "janedoe",
        "password": "password123",
    }
