"""
Tests for book and account endpoints.

These test the HTTP layer: status codes, camelCase response
format and the error body. Business logic is tested in
tests/services.
"""

from fastapi.testclient import TestClient

from ledger_api.main import app
from ledger_api.services.book_service import BookService


def create_book(client, name="TestA", currency="ZAR"):
    response = client.post("/books", json={"name": name, "currency": currency})
    assert response.status_code == 200
    return response.json()


class TestCreateBook:

    def test_new_book(self, client):
        data = create_book(client)
        assert data["success"] is True
        assert data["message"] == "Book TestA (ZAR) created"
        assert data["name"] == "TestA"
        assert data["currency"] == "ZAR"
        assert "createdAt" in data
        assert isinstance(data["id"], int)

    def test_existing_book(self, client):
        first = create_book(client)
        second = create_book(client)
        assert second["success"] is False
        assert second["message"] == "Book TestA already exists"
        assert second["id"] == first["id"]

    def test_mismatched_currency(self, client):
        create_book(client)
        response = client.post("/books", json={"name": "TestA", "currency": "THB"})
        assert response.status_code == 400
        data = response.json()
        assert data["success"] is False
        assert data["errorCode"] == 100
        assert "THB" in data["message"]

    def test_missing_name(self, client):
        response = client.post("/books", json={"currency": "USD"})
        assert response.status_code == 400
        assert response.json()["errorCode"] == 500

    def test_malformed_body(self, client):
        response = client.post("/books", json={"name": ["not", "a", "string"]})
        assert response.status_code == 400
        data = response.json()
        assert data["success"] is False
        assert data["errorCode"] == 600


class TestReadBooks:

    def test_list_books_by_name(self, client):
        create_book(client, "TestB", "USD")
        create_book(client, "TestA", "ZAR")
        response = client.get("/books")
        assert response.status_code == 200
        assert [b["name"] for b in response.json()] == ["TestA", "TestB"]

    def test_get_book(self, client):
        book = create_book(client)
        response = client.get(f"/books/{book['id']}")
        assert response.status_code == 200
        assert response.json()["currency"] == "ZAR"

    def test_unknown_book(self, client):
        response = client.get("/books/999")
        assert response.status_code == 400
        assert response.json() == {
            "success": False,
            "message": "Book with id 999 does not exist",
            "errorCode": 510,
        }

    def test_unexpected_error_is_unknown_error(self, client, monkeypatch):
        def broken(self):
            raise RuntimeError("disk on fire")

        monkeypatch.setattr(BookService, "list_books", broken)

        # The client fixture has already overridden get_db on the app
        quiet_client = TestClient(app, raise_server_exceptions=False)
        response = quiet_client.get("/books")

        assert response.status_code == 400
        assert response.json() == {
            "success": False,
            "message": "disk on fire",
            "errorCode": -1,
        }


class TestAccounts:

    def test_register_and_list(self, client):
        book = create_book(client)
        response = client.post(f"/books/{book['id']}/accounts", json={
            "accountCode": 1000,
            "accountName": "Assets:Receivable",
            "toIncrease": "debit",
            "accountClassification": "Asset",
        })
        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert isinstance(data["id"], int)

        registered = client.get(f"/books/{book['id']}/accounts/registered").json()
        assert registered[0]["accountName"] == "Assets:Receivable"
        assert registered[0]["toIncrease"] == "DEBIT"
        assert registered[0]["accountClassification"] == "Asset"

    def test_duplicate_code(self, client):
        book = create_book(client)
        body = {"accountCode": 1000, "accountName": "Assets", "toIncrease": "DEBIT"}
        client.post(f"/books/{book['id']}/accounts", json=body)
        response = client.post(
            f"/books/{book['id']}/accounts", json={**body, "accountName": "Bank"}
        )
        assert response.status_code == 400
        assert response.json()["errorCode"] == 320

    def test_bad_side(self, client):
        book = create_book(client)
        response = client.post(f"/books/{book['id']}/accounts", json={
            "accountCode": 1000, "accountName": "Assets", "toIncrease": "SIDEWAYS",
        })
        assert response.status_code == 400
        assert response.json()["errorCode"] == 600

    def test_account_closure(self, client):
        book = create_book(client)
        client.post(f"/books/{book['id']}/ledger", json={
            "memo": "Rent",
            "transactions": [
                {"account": "Assets:Receivable", "debit": 500},
                {"account": "Income:Rent", "credit": 500},
            ],
        })
        response = client.get(f"/books/{book['id']}/accounts")
        assert response.json() == [
            "Assets", "Assets:Receivable", "Income", "Income:Rent",
        ]
