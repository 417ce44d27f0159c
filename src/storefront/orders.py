"""OrderLedger: the signed-in user's confirmed orders, newest first.

Orders only enter the ledger once the collaborator has confirmed them; there
is no optimistic insert. The client never edits an order: status changes
made on the server side show up on the next ``fetch_orders``.
"""

import structlog

from storefront.cart import cart_total
from storefront.errors import AuthError, ValidationError
from storefront.gateway.port import PersistenceGateway
from storefront.models import NO_SENDER_ACCOUNT, LineItem, Order, OrderDraft, PaymentMethod
from storefront.state import StoreState

logger = structlog.get_logger(__name__)


def build_order_draft(state: StoreState, payment_method: str, sender_account: str | None = None) -> OrderDraft:
    """Check out the current cart: validate, then snapshot items and total."""
    user = state.user
    if user is None:
        raise AuthError("Please log in to place an order")
    if not state.cart:
        raise ValidationError("Your cart is empty")
    if not user.address:
        raise ValidationError("Delivery address is not set. Please complete your profile first.")

    try:
        method = PaymentMethod(payment_method)
    except ValueError as exc:
        raise ValidationError(f"Unknown payment method: {payment_method}") from exc

    if method is PaymentMethod.TRANSFER:
        if not sender_account or not sender_account.strip():
            raise ValidationError("Please enter the sender account number")
        sender = sender_account.strip()
    else:
        sender = NO_SENDER_ACCOUNT

    return OrderDraft(
        user_id=user.id,
        items=tuple(LineItem.from_cart_item(item) for item in state.cart),
        total_price=cart_total(state.cart),
        payment_method=method.value,
        sender_account=sender,
        address=user.address,
    )


class OrderLedger:
    def __init__(self, container, gateway: PersistenceGateway):
        self._container = container
        self._gateway = gateway
        self._placing = False
        self._fetch_generation = 0

    @property
    def orders(self) -> tuple[Order, ...]:
        return self._container.state.orders

    async def create_order(self, payment_method: str, sender_account: str | None = None) -> Order | None:
        """Place an order for the cart's contents. The cart itself is left as is."""
        if self._placing:
            logger.warning("Rejected order while another is being placed")
            return None

        async def action():
            draft = build_order_draft(self._container.state, payment_method, sender_account)
            self._placing = True
            try:
                order = await self._container.call(self._gateway.create_order(draft))
            finally:
                self._placing = False

            if self._container.state.user is None or self._container.state.user.id != draft.user_id:
                # Signed out meanwhile; the order exists but belongs to another ledger
                return order
            self._container.set(orders=(order, *self.orders))
            logger.info("Order placed", order_id=order.id, total_price=order.total_price)
            return order

        return await self._container.run("create_order", action)

    async def fetch_orders(self) -> tuple[Order, ...] | None:
        """Reload the ledger; an older fetch never overwrites a newer one."""
        user = self._container.state.user
        if user is None:
            return None

        self._fetch_generation += 1
        generation = self._fetch_generation

        def is_stale():
            current = self._container.state.user
            return generation != self._fetch_generation or current is None or current.id != user.id

        async def action():
            orders = tuple(await self._container.call(self._gateway.get_orders_by_user_id(user.id)))
            if is_stale():
                logger.debug("Dropped superseded order fetch", user_id=user.id)
                return None
            self._container.set(orders=orders)
            return orders

        return await self._container.run("fetch_orders", action, is_stale=is_stale)
