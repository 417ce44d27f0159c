"""Integration tests for the backend REST API via TestClient."""

import pytest
from fastapi.testclient import TestClient
from protean import current_domain

from backend.account.account import Account
from backend.api.application import create_app

ALICE = {
    "email": "alice@example.com",
    "password": "secret123",
    "full_name": "Alice Tan",
    "address": "Jl. Merdeka 1, Jakarta",
}


@pytest.fixture()
def client(backend_bed):
    from backend.domain import backend

    return TestClient(create_app(backend))


def _register(client, **overrides):
    response = client.post("/users", json={**ALICE, **overrides})
    assert response.status_code == 201
    return response.json()


def _order_payload(user_id, **overrides):
    payload = {
        "user_id": user_id,
        "items": [{"id": "1", "name": "Mie Ayam Original", "price": 25000, "quantity": 2}],
        "total_price": 50000,
        "payment_method": "cod",
        "address": "Jl. Merdeka 1, Jakarta",
    }
    payload.update(overrides)
    return payload


def test_health(client):
    response = client.get("/health")
    assert response.json() == {"status": "ok", "domain": "backend"}


class TestUsers:
    def test_register_returns_token_and_profile(self, client):
        body = _register(client)

        assert body["access_token"]
        assert body["user"]["email"] == "alice@example.com"
        assert "password_hash" not in body["user"]
        assert current_domain.repository_for(Account).get(body["user"]["id"]).full_name == "Alice Tan"

    def test_duplicate_email_is_409(self, client):
        _register(client)
        response = client.post("/users", json=ALICE)
        assert response.status_code == 409
        assert response.json()["detail"] == "Email is already registered"

    def test_short_password_is_422(self, client):
        response = client.post("/users", json={**ALICE, "password": "123"})
        assert response.status_code == 422
        assert "password" in response.json()["errors"]

    def test_missing_field_is_422(self, client):
        response = client.post("/users", json={"email": "alice@example.com"})
        assert response.status_code == 422

    def test_get_unknown_user_is_404(self, client):
        assert client.get("/users/no-such-user").status_code == 404

    def test_update_profile(self, client):
        user_id = _register(client)["user"]["id"]

        response = client.patch(f"/users/{user_id}", json={"phone": "0899"})

        assert response.status_code == 200
        assert response.json()["phone"] == "0899"
        assert response.json()["address"] == ALICE["address"]

    def test_change_password(self, client):
        user_id = _register(client)["user"]["id"]

        assert client.put(f"/users/{user_id}/password", json={"new_password": "another1"}).status_code == 200
        assert client.post("/sessions", json={"email": ALICE["email"], "password": "another1"}).status_code == 201

    def test_verify_password(self, client):
        user_id = _register(client)["user"]["id"]

        ok = client.post(f"/users/{user_id}/password/verify", json={"password": ALICE["password"]})
        wrong = client.post(f"/users/{user_id}/password/verify", json={"password": "wrong1"})

        assert ok.status_code == 200
        assert wrong.status_code == 401
        assert wrong.json()["detail"] == "Current password is incorrect"
        assert client.post("/users/no-such-user/password/verify", json={"password": "x"}).status_code == 404


class TestSessions:
    def test_sign_in_and_out(self, client):
        _register(client)

        response = client.post("/sessions", json={"email": ALICE["email"], "password": ALICE["password"]})
        assert response.status_code == 201
        token = response.json()["access_token"]

        session = client.get(f"/sessions/{token}").json()
        assert session["user_id"] == response.json()["user"]["id"]

        assert client.delete(f"/sessions/{token}").status_code == 200
        assert client.get(f"/sessions/{token}").status_code == 404

    def test_wrong_password_is_401(self, client):
        _register(client)
        response = client.post("/sessions", json={"email": ALICE["email"], "password": "wrong1"})
        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid email or password"


class TestOrders:
    def test_create_and_list(self, client):
        user_id = _register(client)["user"]["id"]

        created = client.post("/orders", json=_order_payload(user_id))
        assert created.status_code == 201
        assert created.json()["status"] == "processing"
        assert created.json()["sender_account"] == "-"

        listed = client.get(f"/users/{user_id}/orders").json()
        assert [order["id"] for order in listed] == [created.json()["id"]]
        assert listed[0]["items"][0]["quantity"] == 2

    def test_empty_items_rejected(self, client):
        user_id = _register(client)["user"]["id"]
        response = client.post("/orders", json=_order_payload(user_id, items=[]))
        assert response.status_code == 422

    def test_transfer_needs_sender(self, client):
        user_id = _register(client)["user"]["id"]
        response = client.post("/orders", json=_order_payload(user_id, payment_method="transfer"))
        assert response.status_code == 422
        assert response.json()["detail"] == "Sender account is required for bank transfer"

    def test_update_status(self, client):
        user_id = _register(client)["user"]["id"]
        order_id = client.post("/orders", json=_order_payload(user_id)).json()["id"]

        response = client.patch(f"/orders/{order_id}/status", json={"status": "delivered"})

        assert response.status_code == 200
        assert response.json()["status"] == "delivered"
