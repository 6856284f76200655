from datetime import timedelta

from flask_jwt_extended import create_access_token

from library_app import create_app
from library_app.config import TestConfig
from tests.conftest import PASSWORD

NEW_BOOK = {"title": "Pride and Prejudice", "author": "Jane Austen", "isbn": "978-0-14-143951-8"}


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.get_json()["success"] is True


def test_openapi_document_is_served(client):
    response = client.get("/openapi.yaml")
    assert response.status_code == 200
    assert b"/api/books/{id}/borrow" in response.data


def test_unknown_route_uses_error_envelope(client):
    response = client.get("/api/nope")
    assert response.status_code == 404
    assert response.get_json()["error"]["code"] == "ROUTE_NOT_FOUND"


def test_register_login_verify_flow(client):
    response = client.post("/api/auth/register", json={
        "username": "carol", "email": "carol@library.org", "password": PASSWORD,
    })
    assert response.status_code == 201
    assert response.get_json()["user"]["role"] == "MEMBER"

    response = client.post("/api/auth/login", json={"email": "carol@library.org", "password": PASSWORD})
    assert response.status_code == 200
    token = response.get_json()["token"]

    response = client.get("/api/auth/verify", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 200
    assert response.get_json()["user"]["username"] == "carol"


def test_register_validation_and_duplicates(client, alice):
    response = client.post("/api/auth/register", json={"username": "dave", "email": "dave@library.org"})
    assert response.status_code == 400
    body = response.get_json()
    assert body["error"]["code"] == "VALIDATION_ERROR"
    assert body["error"]["details"][0]["field"] == "password"

    response = client.post("/api/auth/register", json={
        "username": "alice", "email": "new@library.org", "password": PASSWORD,
    })
    assert response.status_code == 409
    assert response.get_json()["error"]["code"] == "USER_EXISTS"


def test_login_with_bad_credentials(client, alice):
    response = client.post("/api/auth/login", json={"email": alice.email, "password": "Nope1234"})
    assert response.status_code == 401
    assert response.get_json()["error"]["code"] == "INVALID_CREDENTIALS"


def test_token_errors(client, alice, book):
    response = client.post(f"/api/books/{book.id}/borrow")
    assert response.status_code == 401
    assert response.get_json()["error"]["code"] == "NO_TOKEN"

    response = client.post(f"/api/books/{book.id}/borrow", headers={"Authorization": "Bearer garbage"})
    assert response.status_code == 401
    assert response.get_json()["error"]["code"] == "INVALID_TOKEN"

    expired = create_access_token(
        identity=str(alice.id), additional_claims={"role": alice.role}, expires_delta=timedelta(seconds=-10)
    )
    response = client.post(f"/api/books/{book.id}/borrow", headers={"Authorization": f"Bearer {expired}"})
    assert response.status_code == 401
    assert response.get_json()["error"]["code"] == "TOKEN_EXPIRED"


def test_member_cannot_manage_catalog(client, alice, auth_headers):
    response = client.post("/api/books", json=NEW_BOOK, headers=auth_headers(alice))
    assert response.status_code == 403
    error = response.get_json()["error"]
    assert error["code"] == "INSUFFICIENT_PERMISSIONS"
    assert error["details"] == {"userRole": "MEMBER", "requiredRoles": ["ADMIN"]}


def test_admin_catalog_crud(client, admin, auth_headers):
    headers = auth_headers(admin)

    response = client.post("/api/books", json=NEW_BOOK, headers=headers)
    assert response.status_code == 201
    created = response.get_json()["book"]
    assert created["availabilityStatus"] is True

    response = client.post("/api/books", json=NEW_BOOK, headers=headers)
    assert response.status_code == 409
    assert response.get_json()["error"]["code"] == "BOOK_EXISTS"

    response = client.put(f"/api/books/{created['id']}", json={"title": "Pride & Prejudice"}, headers=headers)
    assert response.status_code == 200
    assert response.get_json()["book"]["title"] == "Pride & Prejudice"

    response = client.put(f"/api/books/{created['id']}", json={"availabilityStatus": False}, headers=headers)
    assert response.status_code == 400

    response = client.delete(f"/api/books/{created['id']}", headers=headers)
    assert response.status_code == 200

    response = client.get(f"/api/books/{created['id']}")
    assert response.status_code == 404
    assert response.get_json()["error"]["code"] == "BOOK_NOT_FOUND"


def test_add_book_with_invalid_isbn(client, admin, auth_headers):
    response = client.post("/api/books", json={**NEW_BOOK, "isbn": "12-34"}, headers=auth_headers(admin))
    assert response.status_code == 400
    assert response.get_json()["error"]["message"] == "Please provide a valid ISBN number"


def test_borrow_and_return_over_http(client, book, alice, bob, auth_headers):
    response = client.post(f"/api/books/{book.id}/borrow", headers=auth_headers(alice))
    assert response.status_code == 201
    record = response.get_json()["borrowRecord"]
    assert record["status"] == "BORROWED"
    assert record["returnDate"] is None

    response = client.post(f"/api/books/{book.id}/borrow", headers=auth_headers(bob))
    assert response.status_code == 409
    assert response.get_json()["error"]["code"] == "BOOK_NOT_AVAILABLE"

    response = client.post(f"/api/books/{book.id}/borrow", headers=auth_headers(alice))
    assert response.status_code == 409
    assert response.get_json()["error"]["code"] == "ALREADY_BORROWED"

    detail = client.get(f"/api/books/{book.id}").get_json()["book"]
    assert detail["availabilityStatus"] is False
    assert detail["borrowRecords"][0]["user"]["username"] == "alice"

    response = client.post(f"/api/books/{book.id}/return", headers=auth_headers(bob))
    assert response.status_code == 404

    response = client.post(f"/api/books/{book.id}/return", headers=auth_headers(alice))
    assert response.status_code == 200
    returned = response.get_json()["borrowRecord"]
    assert returned["status"] == "RETURNED"
    assert returned["returnDate"] is not None

    response = client.post(f"/api/books/{book.id}/return", headers=auth_headers(alice))
    assert response.status_code == 404
    assert response.get_json()["error"]["code"] == "BORROW_RECORD_NOT_FOUND"

    response = client.post(f"/api/books/{book.id}/borrow", headers=auth_headers(bob))
    assert response.status_code == 201


def test_borrow_unknown_book(client, alice, auth_headers):
    response = client.post("/api/books/999/borrow", headers=auth_headers(alice))
    assert response.status_code == 404
    assert response.get_json()["error"]["code"] == "BOOK_NOT_FOUND"


def test_list_books_and_available(client, make_book, alice, auth_headers):
    dune = make_book()
    make_book(title="Emma", author="Jane Austen", isbn="9780141439587")
    client.post(f"/api/books/{dune.id}/borrow", headers=auth_headers(alice))

    body = client.get("/api/books?search=emma").get_json()
    assert [b["title"] for b in body["books"]] == ["Emma"]
    assert body["pagination"]["totalItems"] == 1

    body = client.get("/api/books/available").get_json()
    assert [b["title"] for b in body["books"]] == ["Emma"]

    response = client.get("/api/books?limit=0")
    assert response.status_code == 400


def test_my_borrows_history(client, make_book, alice, auth_headers):
    dune = make_book()
    emma = make_book(title="Emma", author="Jane Austen", isbn="9780141439587")
    headers = auth_headers(alice)
    client.post(f"/api/books/{dune.id}/borrow", headers=headers)
    client.post(f"/api/books/{dune.id}/return", headers=headers)
    client.post(f"/api/books/{emma.id}/borrow", headers=headers)

    body = client.get("/api/users/me/borrows", headers=headers).get_json()
    assert body["pagination"]["totalItems"] == 2

    body = client.get("/api/users/me/borrows?status=borrowed", headers=headers).get_json()
    assert [r["book"]["title"] for r in body["borrowRecords"]] == ["Emma"]


def test_admin_reports(client, admin, alice, book, auth_headers):
    client.post(f"/api/books/{book.id}/borrow", headers=auth_headers(alice))
    headers = auth_headers(admin)

    stats = client.get("/api/admin/stats", headers=headers).get_json()["stats"]
    assert stats == {
        "totalBooks": 1, "availableBooks": 0, "borrowedBooks": 1, "totalUsers": 2, "activeBorrows": 1,
    }

    users = client.get("/api/admin/users", headers=headers).get_json()["users"]
    assert {u["username"]: u["activeBorrows"] for u in users} == {"admin": 0, "alice": 1}

    borrows = client.get("/api/admin/borrows?status=BORROWED", headers=headers).get_json()
    assert borrows["borrowRecords"][0]["user"]["username"] == "alice"

    report = client.get("/api/admin/consistency", headers=headers).get_json()
    assert report["consistent"] is True
    assert report["checkedBooks"] == 1

    response = client.get("/api/admin/consistency", headers=auth_headers(alice))
    assert response.status_code == 403


class RateLimitedConfig(TestConfig):
    RATELIMIT_ENABLED = True


def test_requests_over_the_ip_limit_get_429():
    app = create_app(RateLimitedConfig)
    client = app.test_client()

    for _ in range(100):
        assert client.get("/health").status_code == 200

    response = client.get("/health")
    assert response.status_code == 429
    error = response.get_json()["error"]
    assert error["code"] == "TOO_MANY_REQUESTS"
    assert error["message"] == "Too many requests from this IP, please try again later."
