import gemini_service
from tests.conftest import FakeClient


def test_root(client):
    response = client.get("/")
    assert response.status_code == 200
    assert response.json() == {"message": "Kavithedal Book Store API"}


def test_health_reports_store(client):
    body = client.get("/test").json()
    assert body["collections"] == {"books": 6, "orders": 3, "cart": 0}
    assert body["admin_session"] == "Closed"


def test_list_and_filter_books(client):
    assert len(client.get("/books").json()) == 6
    tamil = client.get("/books", params={"language": "Tamil"}).json()
    assert {b["id"] for b in tamil} == {"b1", "b3", "b6"}
    assert client.get("/books", params={"q": "cauvery"}).json()[0]["id"] == "b2"


def test_get_book(client):
    assert client.get("/books/b4").json()["title"] == "Digital Dravidian"
    assert client.get("/books/missing").status_code == 404


def test_cart_flow(client):
    client.post("/cart/items", json={"book_id": "b1"})
    client.post("/cart/items", json={"book_id": "b1"})
    response = client.post("/cart/items", json={"book_id": "b3"})
    body = response.json()
    assert [(i["book"]["id"], i["quantity"]) for i in body["items"]] == [("b1", 2), ("b3", 1)]
    assert body["total"] == 1100
    assert body["count"] == 3

    body = client.delete("/cart/items/b1").json()
    assert [i["book"]["id"] for i in body["items"]] == ["b3"]
    assert client.delete("/cart/items/b1").status_code == 200

    assert client.delete("/cart").json()["items"] == []


def test_add_unknown_book_to_cart(client):
    assert client.post("/cart/items", json={"book_id": "nope"}).status_code == 404


def test_checkout_scenario(client, db):
    client.post("/cart/items", json={"book_id": "b1"})
    client.post("/cart/items", json={"book_id": "b3"})
    client.post("/cart/items", json={"book_id": "b3"})
    response = client.post(
        "/checkout",
        json={"customer": {"name": "R", "email": "r@example.com", "address": "X"}, "payment_method": "upi"},
    )
    assert response.status_code == 201
    order = response.json()
    assert order["total_amount"] == 850
    assert len(order["items"]) == 2
    assert order["status"] == "Pending"
    assert client.get("/books/b1").json()["stock"] == 44
    assert client.get("/books/b3").json()["stock"] == 1
    assert client.get("/cart").json()["items"] == []
    assert db.orders[0].id == order["id"]


def test_checkout_requires_cart_and_details(client):
    details = {"customer": {"name": "R", "address": "X"}}
    assert client.post("/checkout", json=details).status_code == 400
    client.post("/cart/items", json={"book_id": "b2"})
    missing = client.post("/checkout", json={"customer": {"name": "R", "address": "  "}})
    assert missing.status_code == 400
    assert client.get("/cart").json()["count"] == 1


def test_login(client):
    assert client.post("/auth/login", json={"password": "wrong"}).status_code == 401
    assert client.get("/test").json()["admin_session"] == "Closed"
    response = client.post("/auth/login", json={"password": "admin123"})
    assert response.status_code == 200
    assert response.json()["token_type"] == "bearer"
    assert client.get("/test").json()["admin_session"] == "Open"


def test_admin_routes_require_token(client):
    assert client.get("/orders").status_code == 401
    assert client.get("/admin/stats").status_code == 401
    assert client.post("/books", json={"title": "T", "author": "A", "price": 10}).status_code == 401
    bad = {"Authorization": "Bearer not-a-token"}
    assert client.get("/orders", headers=bad).status_code == 401


def test_logout_revokes_tokens(client, admin_headers):
    assert client.get("/orders", headers=admin_headers).status_code == 200
    assert client.post("/auth/logout", headers=admin_headers).status_code == 200
    assert client.get("/orders", headers=admin_headers).status_code == 401


def test_admin_stats(client, admin_headers):
    stats = client.get("/admin/stats", headers=admin_headers).json()
    assert stats == {"total_revenue": 2000, "total_orders": 3, "books_sold": 5, "low_stock_count": 1}
    low = client.get("/admin/low-stock", headers=admin_headers).json()
    assert [b["id"] for b in low] == ["b3"]


def test_book_crud(client, admin_headers):
    created = client.post(
        "/books",
        json={"title": "Kadal", "author": "A. Muthu", "price": 250, "stock": 4, "language": "Tamil"},
        headers=admin_headers,
    )
    assert created.status_code == 201
    book = created.json()
    assert book["sold"] == 0

    updated = client.put(f"/books/{book['id']}", json={"stock": 20}, headers=admin_headers).json()
    assert updated["stock"] == 20
    assert updated["title"] == "Kadal"

    assert client.put("/books/missing", json={"stock": 1}, headers=admin_headers).status_code == 404
    assert client.delete(f"/books/{book['id']}", headers=admin_headers).json() == {"status": "deleted"}
    assert client.delete(f"/books/{book['id']}", headers=admin_headers).status_code == 404


def test_book_validation(client, admin_headers):
    response = client.post("/books", json={"title": "T", "author": "A", "price": 0}, headers=admin_headers)
    assert response.status_code == 422


def test_order_status_updates(client, admin_headers):
    orders = client.get("/orders", headers=admin_headers).json()
    assert [o["id"] for o in orders] == ["ORD-001", "ORD-002", "ORD-003"]
    response = client.put("/orders/ORD-001/status", json={"status": "Pending"}, headers=admin_headers)
    assert response.json()["status"] == "Pending"
    assert client.get("/orders/ORD-001", headers=admin_headers).json()["status"] == "Pending"
    assert client.put("/orders/ORD-404/status", json={"status": "Shipped"}, headers=admin_headers).status_code == 404
    assert client.put("/orders/ORD-001/status", json={"status": "Lost"}, headers=admin_headers).status_code == 422


def test_chat_streams_reply(client, chat_session):
    response = client.post("/chat/messages", json={"text": "suggest a novel"})
    assert response.status_code == 200
    assert response.text == "Hello reader"
    messages = client.get("/chat/messages").json()
    assert [m["role"] for m in messages] == ["model", "user", "model"]
    assert messages[-1]["text"] == "Hello reader"
    assert messages[-1]["is_streaming"] is False


def test_chat_rejects_blank_message(client):
    assert client.post("/chat/messages", json={"text": "   "}).status_code == 400


def test_chat_without_api_key(client):
    def missing():
        raise gemini_service.MissingAPIKeyError("API Key not found")

    from gemini_service import ChatSession, get_chat_session
    from main import app

    app.dependency_overrides[get_chat_session] = lambda: ChatSession(client_factory=missing)
    assert client.post("/chat/messages", json={"text": "hello"}).status_code == 503


def test_marketing_copy(client, admin_headers, monkeypatch):
    monkeypatch.setattr(gemini_service, "_client", FakeClient(copy_text="Read more! #Books"))
    response = client.post("/marketing/copy", json={"topic": "new poetry"}, headers=admin_headers)
    assert response.json() == {"topic": "new poetry", "text": "Read more! #Books"}


def test_marketing_copy_without_api_key(client, admin_headers, monkeypatch):
    monkeypatch.delenv("API_KEY", raising=False)
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    monkeypatch.setattr(gemini_service, "_client", None)
    response = client.post("/marketing/copy", json={"topic": "new poetry"}, headers=admin_headers)
    assert response.status_code == 503
    assert response.json()["detail"] == "Assistant is not configured"
