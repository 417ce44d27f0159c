"""Store: the single source of truth the app's screens observe.

Composes Session, CartLedger and OrderLedger over one observable state
container, and exposes the notification feed derived from the orders.
There is no module-level instance: the app builds a Store at startup
(see ``storefront.bootstrap``), calls ``start()`` and hands it to the UI;
``close()`` tears it down.

Operations never raise. A failure is logged, its message lands in
``state.error`` and the operation returns None (or False).
"""

from collections.abc import Callable

import structlog

from storefront.cart import CartLedger
from storefront.config import StoreConfig
from storefront.gateway.port import PersistenceGateway
from storefront.models import CartItem, Notification, Order, User
from storefront.notifications import project_notifications
from storefront.orders import OrderLedger
from storefront.session import Session
from storefront.state import Listener, Selector, StateContainer, StoreState

logger = structlog.get_logger(__name__)


class Store:
    def __init__(self, gateway: PersistenceGateway, config: StoreConfig | None = None):
        self.config = config or StoreConfig()
        self.gateway = gateway
        self._container = StateContainer(request_timeout=self.config.request_timeout)
        self.session = Session(self._container, gateway, self.config)
        self.cart = CartLedger(self._container)
        self.orders = OrderLedger(self._container, gateway)
        self._unsubscribe_events: Callable[[], None] | None = None

    # -------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------
    async def start(self) -> None:
        """Listen for collaborator session events, then restore any session."""
        if self._unsubscribe_events is None:
            self._unsubscribe_events = self.gateway.subscribe(self.session.handle_event)
        await self.session.restore_session()

    async def close(self) -> None:
        if self._unsubscribe_events is not None:
            self._unsubscribe_events()
            self._unsubscribe_events = None
        await self.gateway.close()

    # -------------------------------------------------------------------
    # Observation
    # -------------------------------------------------------------------
    @property
    def state(self) -> StoreState:
        return self._container.state

    def subscribe(self, listener: Listener, selector: Selector | None = None) -> Callable[[], None]:
        return self._container.subscribe(listener, selector)

    @property
    def notifications(self) -> tuple[Notification, ...]:
        return project_notifications(self.state.orders, self.config.timezone)

    def set_loading(self, is_loading: bool) -> None:
        self._container.set(is_loading=is_loading)

    def set_error(self, error: str | None) -> None:
        self._container.set_error(error)

    def clear_error(self) -> None:
        self._container.set_error(None)

    # -------------------------------------------------------------------
    # Session
    # -------------------------------------------------------------------
    async def login(self, email: str, password: str) -> User | None:
        return await self.session.login(email, password)

    async def register(self, user_data: dict) -> User | None:
        return await self.session.register(user_data)

    async def logout(self) -> bool:
        return await self.session.logout()

    def set_user(self, user: User | None) -> None:
        self.session.set_user(user)

    async def restore_session(self) -> User | None:
        return await self.session.restore_session()

    async def update_profile(self, changes: dict) -> User | None:
        return await self.session.update_profile(changes)

    async def change_password(self, old_password: str, new_password: str, confirm_password: str) -> bool:
        return await self.session.change_password(old_password, new_password, confirm_password)

    # -------------------------------------------------------------------
    # Cart
    # -------------------------------------------------------------------
    def add_to_cart(self, item: CartItem) -> None:
        self.cart.add_to_cart(item)

    def remove_from_cart(self, item_id: str) -> None:
        self.cart.remove_from_cart(item_id)

    def update_quantity(self, item_id: str, quantity: int) -> None:
        self.cart.update_quantity(item_id, quantity)

    def clear_cart(self) -> None:
        self.cart.clear_cart()

    # -------------------------------------------------------------------
    # Orders
    # -------------------------------------------------------------------
    async def create_order(self, payment_method: str, sender_account: str | None = None) -> Order | None:
        return await self.orders.create_order(payment_method, sender_account)

    async def fetch_orders(self) -> tuple[Order, ...] | None:
        return await self.orders.fetch_orders()

    async def checkout(self, payment_method: str, sender_account: str | None = None) -> Order | None:
        """Place the order, then empty the cart.

        Placing the order is the point of no return; the cart is only cleared
        once the collaborator has confirmed it.
        """
        order = await self.orders.create_order(payment_method, sender_account)
        if order is not None:
            self.cart.clear_cart()
            logger.info("Checked out", order_id=order.id)
        return order
