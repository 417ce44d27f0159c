import json
from datetime import datetime

import pytest
from protean.exceptions import ValidationError

from backend.order.order import NO_SENDER_ACCOUNT, Order, OrderStatus, PaymentMethod
from storefront import models as client_models

ITEMS = [{"id": "1", "name": "Mie Ayam Original", "price": 25000, "quantity": 2}]


def _order(**overrides):
    fields = {
        "user_id": "user-1",
        "items": ITEMS,
        "total_price": 50000,
        "payment_method": "cod",
        "address": "Jl. Merdeka 1, Jakarta",
    }
    fields.update(overrides)
    return Order.place(**fields)


class TestPlacement:
    def test_defaults(self):
        order = _order()
        assert order.status == OrderStatus.PROCESSING.value
        assert order.sender_account == NO_SENDER_ACCOUNT
        assert order.created_at is not None

    def test_items_accept_json_string(self):
        order = _order(items=json.dumps(ITEMS))
        assert json.loads(order.items) == ITEMS

    def test_items_required(self):
        with pytest.raises(ValidationError) as exc:
            _order(items=[])
        assert "items" in exc.value.messages

    def test_unknown_payment_method(self):
        with pytest.raises(ValidationError):
            _order(payment_method="crypto")

    def test_transfer_requires_sender(self):
        with pytest.raises(ValidationError) as exc:
            _order(payment_method="transfer")
        assert "sender_account" in exc.value.messages

    def test_transfer_with_sender(self):
        order = _order(payment_method="transfer", sender_account="8800123456")
        assert order.sender_account == "8800123456"

    def test_negative_total_rejected(self):
        with pytest.raises(ValidationError):
            _order(total_price=-1)


class TestStatus:
    def test_update_status(self):
        order = _order()
        order.update_status(OrderStatus.DELIVERED.value)
        assert order.status == "delivered"

    def test_status_required(self):
        with pytest.raises(ValidationError):
            _order().update_status("")


def test_to_record():
    order = _order()
    record = order.to_record()
    assert record["items"] == ITEMS
    assert record["user_id"] == "user-1"
    assert datetime.fromisoformat(record["created_at"]) == order.created_at


def test_vocabulary_matches_client_copy():
    assert [status.value for status in OrderStatus] == [status.value for status in client_models.OrderStatus]
    assert [method.value for method in PaymentMethod] == [method.value for method in client_models.PaymentMethod]
    assert NO_SENDER_ACCOUNT == client_models.NO_SENDER_ACCOUNT
