"""CartLedger: the products and quantities a user intends to buy.

Lives only in memory. Holds at most one line per product id, each with a
quantity of at least 1. All mutations are synchronous and replace the
state's cart tuple in one step.
"""

from collections.abc import Iterable

import structlog

from storefront.models import CartItem

logger = structlog.get_logger(__name__)


def cart_total(items: Iterable[CartItem]) -> float:
    """Sum of price × quantity; computed on every read, never cached."""
    return sum(item.price * item.quantity for item in items)


def cart_count(items: Iterable[CartItem]) -> int:
    return sum(item.quantity for item in items)


def add_item(cart: tuple[CartItem, ...], item: CartItem) -> tuple[CartItem, ...]:
    """Bump an existing line by exactly one, or append a new line of one.

    Any quantity carried by ``item`` is ignored.
    """
    for index, existing in enumerate(cart):
        if existing.id == item.id:
            return cart[:index] + (existing.with_quantity(existing.quantity + 1),) + cart[index + 1 :]
    return cart + (item.with_quantity(1),)


def remove_item(cart: tuple[CartItem, ...], item_id: str) -> tuple[CartItem, ...]:
    return tuple(item for item in cart if item.id != item_id)


def set_quantity(cart: tuple[CartItem, ...], item_id: str, quantity: int) -> tuple[CartItem, ...]:
    """Set a line's quantity; quantities below 1 leave the cart untouched."""
    if quantity < 1:
        return cart
    return tuple(item.with_quantity(quantity) if item.id == item_id else item for item in cart)


class CartLedger:
    def __init__(self, container):
        self._container = container

    @property
    def items(self) -> tuple[CartItem, ...]:
        return self._container.state.cart

    @property
    def total(self) -> float:
        return cart_total(self.items)

    @property
    def count(self) -> int:
        return cart_count(self.items)

    def _replace(self, cart):
        if cart != self.items:
            self._container.set(cart=cart)

    def add_to_cart(self, item: CartItem) -> None:
        self._replace(add_item(self.items, item))
        logger.debug("Added to cart", product_id=item.id)

    def remove_from_cart(self, item_id: str) -> None:
        self._replace(remove_item(self.items, item_id))

    def update_quantity(self, item_id: str, quantity: int) -> None:
        if quantity < 1:
            logger.debug("Ignored quantity below one", product_id=item_id, quantity=quantity)
        self._replace(set_quantity(self.items, item_id, quantity))

    def clear_cart(self) -> None:
        self._replace(())
