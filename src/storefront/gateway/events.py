"""Session event fan-out shared by the gateway adapters."""

import asyncio
from collections.abc import Callable

import structlog

from storefront.gateway.port import SessionListener
from storefront.models import SessionEvent

logger = structlog.get_logger(__name__)


class SessionEventHub:
    """Delivers session events to listeners on the running event loop.

    ``publish`` never calls a listener directly: each delivery is scheduled
    as its own task, so listeners observe events after the call that caused
    them has returned, the way a hosted auth client pushes state changes.
    """

    def __init__(self):
        self._listeners: list[SessionListener] = []
        self._pending: set[asyncio.Task] = set()

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def publish(self, event: SessionEvent) -> None:
        loop = asyncio.get_running_loop()
        for listener in list(self._listeners):
            task = loop.create_task(self._deliver(listener, event))
            self._pending.add(task)
            task.add_done_callback(self._pending.discard)

    async def _deliver(self, listener: SessionListener, event: SessionEvent) -> None:
        try:
            await listener(event)
        except Exception:
            # A failing listener must not stop delivery to the others
            logger.exception("Session listener failed", kind=event.kind)

    async def drain(self) -> None:
        """Wait until every scheduled delivery has finished."""
        while self._pending:
            await asyncio.gather(*list(self._pending))

    @property
    def listener_count(self) -> int:
        return len(self._listeners)
