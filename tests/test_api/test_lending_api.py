# tests/test_api/test_lending_api.py
import pytest
from datetime import timedelta


@pytest.fixture
def book_id(client, book_payload):
    return client.post("/api/v1/books", json=dict(book_payload, total_copies=1)).json()["id"]


@pytest.fixture
def patron_id(client, patron_payload):
    return client.post("/api/v1/patrons", json=patron_payload).json()["id"]


def test_register_patron(client, patron_payload):
    response = client.post("/api/v1/patrons", json=patron_payload)
    assert response.status_code == 201
    patron = response.json()
    assert patron["full_name"] == "Jane Doe"
    assert patron["role"] == "STUDENT"
    assert patron["can_borrow_books"] is True
    assert patron["max_books_allowed"] == 5
    assert "password" not in patron
    assert "password_hash" not in patron

    response = client.post("/api/v1/patrons", json=patron_payload)
    assert response.status_code == 400


def test_register_patron_schema_validation(client, patron_payload):
    assert client.post("/api/v1/patrons", json=dict(patron_payload, password="short")).status_code == 422
    assert client.post("/api/v1/patrons", json=dict(patron_payload, username="a b")).status_code == 422
    assert client.post("/api/v1/patrons", json=dict(patron_payload, role="WIZARD")).status_code == 422


def test_patron_queries(client, patron_id):
    assert client.get("/api/v1/patrons/by-email", params={"email": "jane@example.com"}).json()["id"] == patron_id
    assert client.get("/api/v1/patrons/by-username", params={"username": "janedoe"}).json()["id"] == patron_id
    assert client.get("/api/v1/patrons/by-username", params={"username": "nobody"}).status_code == 404
    assert client.get("/api/v1/patrons", params={"query": "jane"}).json()["total"] == 1
    assert len(client.get("/api/v1/patrons/role/STUDENT").json()) == 1
    assert len(client.get("/api/v1/patrons/status/ACTIVE").json()) == 1
    assert len(client.get("/api/v1/patrons/can-borrow").json()) == 1
    assert client.get("/api/v1/patrons/with-overdue").json() == []
    assert client.get("/api/v1/patrons/with-fines").json() == []


def test_update_and_delete_patron(client, patron_id):
    response = client.put(f"/api/v1/patrons/{patron_id}", json={"status": "SUSPENDED"})
    assert response.status_code == 200
    assert response.json()["can_borrow_books"] is False

    assert client.delete(f"/api/v1/patrons/{patron_id}").status_code == 204
    assert client.get(f"/api/v1/patrons/{patron_id}").status_code == 404


def test_borrow_return_lifecycle(client, patron_id, book_id, today):
    response = client.post("/api/v1/borrowings", json={"patron_id": patron_id, "book_id": book_id})
    assert response.status_code == 201
    loan = response.json()
    assert loan["status"] == "BORROWED"
    assert loan["borrowed_date"] == today.isoformat()
    assert loan["expected_return_date"] == (today + timedelta(days=14)).isoformat()
    assert loan["book_title"] == "Dune"
    assert loan["patron_full_name"] == "Jane Doe"
    assert loan["can_be_renewed"] is True

    book = client.get(f"/api/v1/books/{book_id}").json()
    assert (book["copies_available"], book["status"]) == (0, "BORROWED")

    response = client.post("/api/v1/borrowings", json={"patron_id": patron_id, "book_id": book_id})
    assert response.status_code == 400
    assert "no copies available" in response.json()["detail"]

    assert client.delete(f"/api/v1/books/{book_id}").status_code == 409

    response = client.post(f"/api/v1/borrowings/{loan['id']}/renew", json={"additional_days": 7})
    assert response.status_code == 200
    assert response.json()["renewal_count"] == 1

    response = client.post(f"/api/v1/borrowings/{loan['id']}/return", json={"notes": "All good"})
    assert response.status_code == 200
    returned = response.json()
    assert returned["status"] == "RETURNED"
    assert returned["actual_return_date"] == today.isoformat()
    assert returned["fine_amount"] == 0.0
    assert returned["notes"] == "All good"

    book = client.get(f"/api/v1/books/{book_id}").json()
    assert (book["copies_available"], book["status"]) == (1, "AVAILABLE")

    assert client.post(f"/api/v1/borrowings/{loan['id']}/return").status_code == 400
    assert client.post(f"/api/v1/borrowings/{loan['id']}/pay-fine").status_code == 400

    history = client.get(f"/api/v1/patrons/{patron_id}/loans").json()
    assert history["total"] == 1


def test_borrow_with_unknown_ids(client, patron_id, book_id):
    response = client.post("/api/v1/borrowings", json={"patron_id": 9999, "book_id": book_id})
    assert response.status_code == 404
    assert response.json()["code"] == "patron_not_found"

    response = client.post("/api/v1/borrowings", json={"patron_id": patron_id, "book_id": 9999})
    assert response.status_code == 404
    assert client.get("/api/v1/borrowings/9999").status_code == 404


def test_borrowing_queries(client, patron_id, book_id, today):
    due = (today + timedelta(days=2)).isoformat()
    loan_id = client.post(
        "/api/v1/borrowings", json={"patron_id": patron_id, "book_id": book_id, "expected_return_date": due}
    ).json()["id"]

    assert client.get(f"/api/v1/borrowings/{loan_id}").json()["expected_return_date"] == due
    assert [r["id"] for r in client.get("/api/v1/borrowings/active").json()] == [loan_id]
    assert [r["id"] for r in client.get("/api/v1/borrowings/due-soon").json()] == [loan_id]
    assert [r["id"] for r in client.get("/api/v1/borrowings/renewable").json()] == [loan_id]
    assert client.get("/api/v1/borrowings/overdue").json() == []
    assert client.get("/api/v1/borrowings/outstanding-fines").json() == []

    body = client.get("/api/v1/borrowings", params={"patron_id": patron_id, "status": "BORROWED"}).json()
    assert body["total"] == 1

    stats = client.get("/api/v1/borrowings/statistics").json()
    assert stats["active_loans"] == 1
    assert stats["status_counts"]["BORROWED"] == 1


def test_loans_by_book_status_and_date_range(client, patron_id, book_id, today):
    loan_id = client.post("/api/v1/borrowings", json={"patron_id": patron_id, "book_id": book_id}).json()["id"]

    history = client.get(f"/api/v1/books/{book_id}/loans").json()
    assert [r["id"] for r in history["items"]] == [loan_id]
    assert client.get("/api/v1/books/9999/loans").status_code == 404
    assert client.get("/api/v1/books/popular").json()["items"][0]["borrow_count"] == 1

    assert [r["id"] for r in client.get("/api/v1/borrowings/status/BORROWED").json()] == [loan_id]
    assert client.get("/api/v1/borrowings/status/RETURNED").json() == []

    window = {"start_date": (today - timedelta(days=1)).isoformat(), "end_date": today.isoformat()}
    assert [r["id"] for r in client.get("/api/v1/borrowings/borrowed-range", params=window).json()] == [loan_id]
    assert client.get("/api/v1/borrowings/returned-range", params=window).json() == []

    client.post(f"/api/v1/borrowings/{loan_id}/return")
    assert [r["id"] for r in client.get("/api/v1/borrowings/returned-range", params=window).json()] == [loan_id]

    backwards = {"start_date": window["end_date"], "end_date": window["start_date"]}
    assert client.get("/api/v1/borrowings/borrowed-range", params=backwards).status_code == 400
