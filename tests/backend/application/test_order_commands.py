"""Order placement and status commands processed through the domain."""

import json
from datetime import UTC, datetime, timedelta

import pytest
from protean import current_domain
from protean.exceptions import ObjectNotFoundError, ValidationError

from backend.account.registration import RegisterAccount
from backend.order.order import Order
from backend.order.placement import PlaceOrder
from backend.order.status import UpdateOrderStatus

ITEMS = json.dumps([{"id": "1", "name": "Mie Ayam Original", "price": 25000, "quantity": 1}])


@pytest.fixture
def account_id():
    return current_domain.process(
        RegisterAccount(email="alice@example.com", password="secret123", full_name="Alice Tan"),
        asynchronous=False,
    )


def _place(user_id, **overrides):
    fields = {
        "user_id": user_id,
        "items": ITEMS,
        "total_price": 25000,
        "payment_method": "cod",
        "address": "Jl. Merdeka 1",
    }
    fields.update(overrides)
    return current_domain.process(PlaceOrder(**fields), asynchronous=False)


class TestPlaceOrder:
    def test_places_order(self, account_id):
        order_id = _place(account_id)

        order = current_domain.repository_for(Order).get(order_id)
        assert str(order.user_id) == account_id
        assert order.status == "processing"
        assert order.sender_account == "-"

    def test_unknown_user(self):
        with pytest.raises(ObjectNotFoundError):
            _place("no-such-user")

    def test_transfer_without_sender(self, account_id):
        with pytest.raises(ValidationError):
            _place(account_id, payment_method="transfer", sender_account="-")


class TestOrderQueries:
    def test_for_user_newest_first(self, account_id):
        repo = current_domain.repository_for(Order)
        older = repo.get(_place(account_id))
        older.created_at = datetime.now(UTC) - timedelta(hours=1)
        repo.add(older)
        newer_id = _place(account_id)

        assert [str(order.id) for order in repo.for_user(account_id)] == [newer_id, str(older.id)]

    def test_for_user_only_returns_own_orders(self, account_id):
        other = current_domain.process(
            RegisterAccount(email="bob@example.com", password="hunter22", full_name="Bob Lim"),
            asynchronous=False,
        )
        _place(other)

        assert current_domain.repository_for(Order).for_user(account_id) == []


class TestUpdateOrderStatus:
    def test_marks_delivered(self, account_id):
        order_id = _place(account_id)

        current_domain.process(UpdateOrderStatus(order_id=order_id, status="delivered"), asynchronous=False)

        assert current_domain.repository_for(Order).get(order_id).status == "delivered"
