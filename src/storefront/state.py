"""Observable state container shared by the store's components.

The whole application state is one frozen ``StoreState``. Every change
builds a new snapshot and swaps it in at once, then notifies subscribers
synchronously, so an observer never sees half of an update.
"""

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, replace
from typing import Any

import structlog

from storefront.cart import cart_count, cart_total
from storefront.errors import CollaboratorTimeoutError, StoreError
from storefront.models import CartItem, Order, User

logger = structlog.get_logger(__name__)

Listener = Callable[[Any], None]
Selector = Callable[["StoreState"], Any]


@dataclass(frozen=True)
class StoreState:
    user: User | None = None
    cart: tuple[CartItem, ...] = ()
    orders: tuple[Order, ...] = ()
    is_loading: bool = False
    is_restoring: bool = False
    error: str | None = None

    @property
    def cart_total(self) -> float:
        return cart_total(self.cart)

    @property
    def cart_count(self) -> int:
        return cart_count(self.cart)

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None


class _Subscription:
    def __init__(self, listener: Listener, selector: Selector | None, state: StoreState):
        self.listener = listener
        self.selector = selector
        self.last = selector(state) if selector else state

    def notify(self, state: StoreState) -> None:
        if self.selector is None:
            self.listener(state)
            return
        selected = self.selector(state)
        if selected != self.last:
            self.last = selected
            self.listener(selected)


class StateContainer:
    def __init__(self, request_timeout: float | None = None):
        self.request_timeout = request_timeout
        self._state = StoreState()
        self._subscriptions: list[_Subscription] = []
        self._in_flight = 0
        self._started = 0
        self._error_seq: int | None = None

    @property
    def state(self) -> StoreState:
        return self._state

    def set(self, **changes) -> None:
        """Swap in a new snapshot with ``changes`` applied and notify subscribers."""
        new_state = replace(self._state, **changes)
        if new_state == self._state:
            return
        self._state = new_state
        for subscription in list(self._subscriptions):
            try:
                subscription.notify(new_state)
            except Exception:
                logger.exception("State subscriber failed")

    def set_error(self, message: str | None) -> None:
        """Publish ``error`` as if raised by the most recently started operation."""
        self._error_seq = self._started if message is not None else None
        self.set(error=message)

    def subscribe(self, listener: Listener, selector: Selector | None = None) -> Callable[[], None]:
        """Call ``listener`` after every change, or only when ``selector(state)`` changes.

        Returns a callable that removes the subscription.
        """
        subscription = _Subscription(listener, selector, self._state)
        self._subscriptions.append(subscription)

        def unsubscribe():
            if subscription in self._subscriptions:
                self._subscriptions.remove(subscription)

        return unsubscribe

    # -------------------------------------------------------------------
    # Async operation plumbing
    # -------------------------------------------------------------------
    async def call(self, awaitable: Awaitable):
        """Await a gateway call, bounded by the request timeout."""
        try:
            return await asyncio.wait_for(awaitable, timeout=self.request_timeout)
        except asyncio.TimeoutError as exc:
            raise CollaboratorTimeoutError() from exc

    async def run(
        self,
        operation: str,
        action: Callable[[], Awaitable],
        *,
        is_stale: Callable[[], bool] | None = None,
        track_loading: bool = True,
        clears_error: bool = True,
    ):
        """Run one store operation with loading and error bookkeeping.

        Clears ``error`` when the operation starts, unless ``clears_error`` is
        false (background work the user did not ask for). A ``StoreError``
        raised by ``action`` is logged and its message published as
        ``error``; the operation then returns None. When ``is_stale()`` is true at the end,
        the outcome belongs to a superseded call and its error is dropped.

        Operations are numbered as they start. A successful operation that
        clears errors also clears one left behind by an operation that started
        before it and finished later, e.g. a failed login queued ahead of it.
        """
        self._started += 1
        seq = self._started
        changes = {}
        if clears_error:
            changes["error"] = None
            self._error_seq = None
        if track_loading:
            self._in_flight += 1
            changes["is_loading"] = True
        self.set(**changes)
        try:
            result = await action()
        except StoreError as exc:
            if is_stale is not None and is_stale():
                logger.debug("Dropped error from superseded call", operation=operation, error=exc.message)
                return None
            logger.warning("Store operation failed", operation=operation, error=exc.message, kind=type(exc).__name__)
            self._error_seq = seq
            self.set(error=exc.message)
            return None
        else:
            if clears_error and self._error_seq is not None and self._error_seq < seq:
                logger.debug("Cleared error left by an earlier call", operation=operation)
                self.set_error(None)
            return result
        finally:
            if track_loading:
                self._in_flight -= 1
                if self._in_flight == 0:
                    self.set(is_loading=False)
