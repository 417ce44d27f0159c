"""Persistence gateway port (abstract interface).

Defines the contract the store expects from the hosted backend: account and
session management, order storage, and a push channel for sign-in/sign-out
events. This enables swapping between LocalGateway (in-process backend, dev
and tests) and HttpGateway (remote backend) without changing the store.

Adapters translate every failure into a ``storefront.errors`` kind and every
record into ``storefront.models`` values, so nothing transport-specific
leaks past this boundary.
"""

from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable

from storefront.models import AuthSession, Order, OrderDraft, SessionEvent, User

SessionListener = Callable[[SessionEvent], Awaitable[None]]


class PersistenceGateway(ABC):
    """Abstract persistence/auth collaborator."""

    @abstractmethod
    async def login(self, email: str, password: str) -> tuple[User, AuthSession]:
        """Authenticate and open a session. Raises AuthError on bad credentials."""
        ...

    @abstractmethod
    async def create_user(self, user_data: dict) -> tuple[User, AuthSession]:
        """Register a user and open a session for it. Raises ConflictError on duplicate email."""
        ...

    @abstractmethod
    async def get_user(self, user_id: str) -> User:
        """Fetch a user by id."""
        ...

    @abstractmethod
    async def update_user(self, user_id: str, changes: dict) -> User:
        """Apply a partial profile update and return the updated user."""
        ...

    @abstractmethod
    async def update_user_password(self, user_id: str, new_password: str) -> User:
        """Replace the user's password."""
        ...

    @abstractmethod
    async def verify_password(self, user_id: str, password: str) -> bool:
        """Check ``password`` against the user's credentials without opening a session."""
        ...

    @abstractmethod
    async def get_orders_by_user_id(self, user_id: str) -> list[Order]:
        """All orders of the user, most recently created first."""
        ...

    @abstractmethod
    async def create_order(self, draft: OrderDraft) -> Order:
        """Persist a new order; returns it with server-assigned id and timestamps."""
        ...

    @abstractmethod
    async def get_current_session(self) -> AuthSession | None:
        """The still-valid session this client holds, if any."""
        ...

    @abstractmethod
    async def sign_out(self) -> None:
        """Invalidate the current session."""
        ...

    @abstractmethod
    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        """Register for session events; returns a callable that unsubscribes.

        Events are delivered asynchronously, independent of the calls that
        caused them.
        """
        ...

    async def close(self) -> None:  # noqa: B027
        """Release any resources held by the adapter."""
