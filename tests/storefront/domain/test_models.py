"""Tests for the store's value types and the order item boundary parsing."""

from datetime import UTC, datetime, timedelta, timezone

import pytest

from storefront.models import (
    CartItem,
    LineItem,
    Order,
    OrderDraft,
    User,
    parse_line_items,
    parse_timestamp,
)


class TestParseLineItems:
    def test_json_string(self):
        items = parse_line_items('[{"id": 1, "name": "Mie", "price": 25000, "quantity": 2}]')
        assert items == (LineItem(id="1", name="Mie", price=25000.0, quantity=2),)

    def test_list_of_mappings(self):
        items = parse_line_items([{"id": "2", "name": "Spesial", "price": "30000", "quantity": 1}])
        assert items[0].price == 30000.0
        assert items[0].name == "Spesial"

    def test_typed_items_pass_through(self):
        line = LineItem(id="1", name="Mie", price=1.0, quantity=1)
        cart_item = CartItem(id="2", name="Spesial", price=2.0, quantity=3)
        assert parse_line_items([line, cart_item]) == (line, LineItem.from_cart_item(cart_item))

    @pytest.mark.parametrize("raw", ["{broken", '{"id": 1}', "42", [1, 2], [{"price": "free"}]])
    def test_malformed_input_yields_empty(self, raw):
        assert parse_line_items(raw) == ()

    def test_none_yields_empty(self):
        assert parse_line_items(None) == ()


class TestParseTimestamp:
    def test_naive_values_are_utc(self):
        assert parse_timestamp("2026-10-19T09:00:00").tzinfo == UTC

    def test_z_suffix(self):
        assert parse_timestamp("2026-10-19T09:00:00Z") == datetime(2026, 10, 19, 9, tzinfo=UTC)

    def test_offset_is_kept(self):
        moment = parse_timestamp("2026-10-19T16:00:00+07:00")
        assert moment.utcoffset() == timedelta(hours=7)
        assert moment == datetime(2026, 10, 19, 9, tzinfo=UTC)

    def test_datetime_passes_through(self):
        moment = datetime(2026, 1, 1, tzinfo=timezone(timedelta(hours=7)))
        assert parse_timestamp(moment) is moment


class TestRecords:
    def test_user_from_record_blanks_become_none(self):
        user = User.from_record({"id": 7, "email": "a@b.c", "full_name": "A", "phone": "", "address": None})
        assert user.id == "7"
        assert user.phone is None
        assert user.address is None

    def test_order_from_record(self):
        order = Order.from_record(
            {
                "id": "o1",
                "user_id": "u1",
                "items": '[{"id": "1", "name": "Mie", "price": 25000, "quantity": 2}]',
                "total_price": 50000,
                "status": "processing",
                "payment_method": "cod",
                "address": "Jl. Merdeka 1",
                "created_at": "2026-10-19T09:00:00+00:00",
            }
        )
        assert order.items[0].quantity == 2
        assert order.sender_account == "-"
        assert order.updated_at == order.created_at

    def test_cart_item_subtotal(self):
        assert CartItem(id="1", name="Mie", price=25000, quantity=3).subtotal == 75000

    def test_draft_payload(self):
        draft = OrderDraft(
            user_id="u1",
            items=(LineItem(id="1", name="Mie", price=25000, quantity=2),),
            total_price=50000,
            payment_method="cod",
            address="Jl. Merdeka 1",
        )
        payload = draft.to_payload()
        assert payload["status"] == "processing"
        assert payload["sender_account"] == "-"
        assert payload["items"] == [
            {"id": "1", "name": "Mie", "price": 25000, "quantity": 2, "image": "", "description": None}
        ]
