"""Session: who is signed in, and every transition that changes it.

Login, registration, logout, restoration at startup, profile and password
changes, and sign-in/sign-out events pushed by the collaborator all go
through one FIFO lock, one at a time in arrival order. An event that arrives
while an explicit login is in flight waits for it. Events about a session
other than the collaborator's active one are dropped as stale.
"""

import asyncio

import structlog

from storefront.config import StoreConfig
from storefront.errors import AuthError, StoreError, ValidationError
from storefront.gateway.port import PersistenceGateway
from storefront.models import SessionEvent, User
from storefront.utils.logging import add_context, clear_context

logger = structlog.get_logger(__name__)

MIN_PASSWORD_LENGTH = 6


# ---------------------------------------------------------------------------
# Client-side input checks
# ---------------------------------------------------------------------------
def validate_credentials(email, password) -> None:
    if not email or not password:
        raise ValidationError("Email and password are required")


def validate_registration(user_data: dict) -> None:
    """Reject incomplete sign-up forms before they reach the collaborator."""
    if not user_data.get("full_name") or not user_data.get("email") or not user_data.get("password"):
        raise ValidationError("Full name, email and password are required")
    if len(user_data["password"]) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")


def validate_profile(changes: dict) -> None:
    for field in ("full_name", "email"):
        if field in changes and not (changes[field] or "").strip():
            raise ValidationError("Full name and email are required")


def validate_password_change(old_password, new_password, confirm_password) -> None:
    if not old_password or not new_password or not confirm_password:
        raise ValidationError("All fields are required")
    if new_password != confirm_password:
        raise ValidationError("New password and confirmation do not match")
    if len(new_password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"New password must be at least {MIN_PASSWORD_LENGTH} characters")


class Session:
    def __init__(self, container, gateway: PersistenceGateway, config: StoreConfig):
        self._container = container
        self._gateway = gateway
        self._config = config
        self._lock = asyncio.Lock()

    @property
    def user(self) -> User | None:
        return self._container.state.user

    def set_user(self, user: User | None) -> None:
        self._container.set(user=user)

    # -------------------------------------------------------------------
    # State transitions
    # -------------------------------------------------------------------
    async def _load_orders(self, user: User):
        return tuple(await self._container.call(self._gateway.get_orders_by_user_id(user.id)))

    async def _begin(self, user: User, load_orders: bool = True) -> None:
        """Make ``user`` current, together with their order history.

        A failed history fetch does not undo the sign-in: the user becomes
        current with no orders and the failure is published as ``error``.
        """
        add_context(user_id=user.id)
        if not load_orders:
            self._container.set(user=user, orders=())
            return
        try:
            orders = await self._load_orders(user)
        except StoreError as exc:
            logger.warning("Order history unavailable", user_id=user.id, error=exc.message)
            self._container.set(user=user, orders=())
            self._container.set_error(exc.message)
            return
        self._container.set(user=user, orders=orders)

    def _end(self) -> None:
        changes = {"user": None, "orders": ()}
        if self._config.clear_cart_on_logout:
            changes["cart"] = ()
        self._container.set(**changes)
        clear_context()

    # -------------------------------------------------------------------
    # Operations
    # -------------------------------------------------------------------
    async def login(self, email: str, password: str) -> User | None:
        async def action():
            validate_credentials(email, password)
            async with self._lock:
                user, _ = await self._container.call(self._gateway.login(email, password))
                await self._begin(user)
                logger.info("Logged in", user_id=user.id)
                return user

        return await self._container.run("login", action)

    async def register(self, user_data: dict) -> User | None:
        async def action():
            validate_registration(user_data)
            async with self._lock:
                user, _ = await self._container.call(self._gateway.create_user(user_data))
                await self._begin(user, load_orders=False)
                logger.info("Registered", user_id=user.id)
                return user

        return await self._container.run("register", action)

    async def logout(self) -> bool:
        async def action():
            async with self._lock:
                await self._container.call(self._gateway.sign_out())
                self._end()
                logger.info("Logged out")
                return True

        return bool(await self._container.run("logout", action))

    async def restore_session(self) -> User | None:
        """Pick up a session the collaborator still considers valid."""

        async def action():
            async with self._lock:
                session = await self._container.call(self._gateway.get_current_session())
                if session is None:
                    return None
                user = await self._container.call(self._gateway.get_user(session.user_id))
                await self._begin(user)
                logger.info("Session restored", user_id=user.id)
                return user

        self._container.set(is_restoring=True)
        try:
            return await self._container.run("restore_session", action, track_loading=False)
        finally:
            self._container.set(is_restoring=False)

    async def update_profile(self, changes: dict) -> User | None:
        async def action():
            validate_profile(changes)
            async with self._lock:
                if self.user is None:
                    raise AuthError("Please log in first")
                user = await self._container.call(self._gateway.update_user(self.user.id, changes))
                self._container.set(user=user)
                return user

        return await self._container.run("update_profile", action)

    async def change_password(self, old_password: str, new_password: str, confirm_password: str) -> bool:
        async def action():
            validate_password_change(old_password, new_password, confirm_password)
            async with self._lock:
                if self.user is None:
                    raise AuthError("Please log in first")
                if not await self._container.call(self._gateway.verify_password(self.user.id, old_password)):
                    raise AuthError("Current password is incorrect")
                await self._container.call(self._gateway.update_user_password(self.user.id, new_password))
                return True

        return bool(await self._container.run("change_password", action))

    # -------------------------------------------------------------------
    # Collaborator events
    # -------------------------------------------------------------------
    async def _is_superseded(self, event: SessionEvent) -> bool:
        """True when the collaborator's active session is not the event's."""
        active = await self._container.call(self._gateway.get_current_session())
        if event.kind == SessionEvent.SIGNED_OUT:
            return active is not None and active.access_token != event.session.access_token
        return active is None or active.access_token != event.session.access_token

    async def handle_event(self, event: SessionEvent) -> None:
        async def action():
            async with self._lock:
                current = self.user
                event_user_id = event.session.user_id if event.session else None

                if event.kind == SessionEvent.SIGNED_OUT:
                    if current is None or current.id != event_user_id or await self._is_superseded(event):
                        logger.debug("Ignored stale sign-out", user_id=event_user_id)
                        return
                    self._end()
                    logger.info("Signed out by collaborator", user_id=event_user_id)

                elif event.kind == SessionEvent.SIGNED_IN:
                    if event_user_id is None or (current is not None and current.id == event_user_id):
                        return
                    if await self._is_superseded(event):
                        logger.debug("Ignored stale sign-in", user_id=event_user_id)
                        return
                    user = await self._container.call(self._gateway.get_user(event_user_id))
                    await self._begin(user)
                    logger.info("Signed in by collaborator", user_id=user.id)

        await self._container.run(f"session_event:{event.kind}", action, track_loading=False, clears_error=False)
