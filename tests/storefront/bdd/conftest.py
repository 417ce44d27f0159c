"""Shared BDD fixtures and step definitions for the storefront."""

import asyncio

import pytest
from pytest_bdd import given, parsers, then, when

from storefront.menu import find_menu_item


@pytest.fixture
def context():
    return {}


@given("an empty cart")
def empty_cart(store):
    assert store.state.cart == ()


@when(parsers.cfparse('the shopper adds menu item "{item_id}"'))
def add_menu_item(store, item_id):
    store.add_to_cart(find_menu_item(item_id).to_cart_item())


@then(parsers.cfparse("the cart total is {total:d}"))
def cart_total_is(store, total):
    assert store.state.cart_total == total


@given("a registered shopper with a delivery address")
def registered_shopper(store, alice_data):
    assert asyncio.run(store.register(alice_data)) is not None
    assert store.state.user.address
