"""Local gateway adapter: runs the backend domain in-process.

Commands go through ``domain.process`` and reads go straight to the
backend's repositories, each inside the backend's domain context. Used for
offline development and as the collaborator in tests.
"""

import asyncio
import json
from collections.abc import Callable, Iterator
from contextlib import contextmanager

import structlog
from protean.domain import Domain
from protean.exceptions import InvalidOperationError, ObjectNotFoundError
from protean.exceptions import ValidationError as DomainValidationError
from protean.utils.globals import current_domain

from backend.account.account import Account
from backend.account.authentication import SignIn, SignOut, check_password, resolve_token
from backend.account.profile import ChangePassword, UpdateProfile
from backend.account.registration import RegisterAccount
from backend.errors import AuthenticationFailed, first_error_message
from backend.order.order import Order as OrderRecord
from backend.order.placement import PlaceOrder
from storefront.errors import AuthError, ConflictError, PersistenceError, ValidationError
from storefront.gateway.events import SessionEventHub
from storefront.gateway.port import PersistenceGateway, SessionListener
from storefront.models import AuthSession, Order, OrderDraft, SessionEvent, User

logger = structlog.get_logger(__name__)

_PROFILE_FIELDS = ("full_name", "email", "phone", "address")


@contextmanager
def translate_domain_errors() -> Iterator[None]:
    """Re-raise backend domain failures as storefront error kinds."""
    try:
        yield
    except AuthenticationFailed as exc:
        raise AuthError(exc.message) from exc
    except InvalidOperationError as exc:
        raise ConflictError(str(exc)) from exc
    except DomainValidationError as exc:
        raise ValidationError(first_error_message(exc.messages)) from exc
    except ObjectNotFoundError as exc:
        raise PersistenceError("Record not found") from exc


class LocalGateway(PersistenceGateway):
    def __init__(self, domain: Domain):
        self.domain = domain
        self._session: AuthSession | None = None
        self._events = SessionEventHub()

    # -------------------------------------------------------------------
    # Plumbing
    #
    # Helpers block and push the domain context themselves; the async
    # methods run them through asyncio.to_thread. Session bookkeeping and
    # event publishing stay on the event loop.
    # -------------------------------------------------------------------
    def _process(self, command_cls, **fields):
        with translate_domain_errors(), self.domain.domain_context():
            return current_domain.process(command_cls(**fields), asynchronous=False)

    def _load_user(self, user_id) -> User:
        with translate_domain_errors(), self.domain.domain_context():
            account = current_domain.repository_for(Account).get(user_id)
            return User.from_record(account.profile_dict())

    def _load_order(self, order_id) -> Order:
        with translate_domain_errors(), self.domain.domain_context():
            record = current_domain.repository_for(OrderRecord).get(order_id)
            return Order.from_record(record.to_record())

    def _load_orders(self, user_id) -> list[Order]:
        with translate_domain_errors(), self.domain.domain_context():
            records = current_domain.repository_for(OrderRecord).for_user(user_id)
            return [Order.from_record(record.to_record()) for record in records]

    def _sign_in(self, email, password) -> tuple[User, AuthSession]:
        token_id = self._process(SignIn, email=email, password=password)
        with self.domain.domain_context():
            account_id = str(resolve_token(token_id).account_id)
        return self._load_user(account_id), AuthSession(access_token=token_id, user_id=account_id)

    def _check_password(self, user_id, password) -> bool:
        with translate_domain_errors(), self.domain.domain_context():
            return check_password(user_id, password)

    def _token_is_active(self, token_id) -> bool:
        with self.domain.domain_context():
            return resolve_token(token_id) is not None

    def _open(self, user: User, session: AuthSession) -> tuple[User, AuthSession]:
        self._session = session
        self._events.publish(SessionEvent(kind=SessionEvent.SIGNED_IN, session=session))
        return user, session

    # -------------------------------------------------------------------
    # Accounts and sessions
    # -------------------------------------------------------------------
    async def login(self, email, password):
        user, session = await asyncio.to_thread(self._sign_in, email, password)
        return self._open(user, session)

    async def create_user(self, user_data):
        account_id = await asyncio.to_thread(
            self._process,
            RegisterAccount,
            email=user_data.get("email"),
            password=user_data.get("password"),
            full_name=user_data.get("full_name"),
            phone=user_data.get("phone") or None,
            address=user_data.get("address") or None,
        )
        logger.info("Account registered", user_id=account_id)
        user, session = await asyncio.to_thread(self._sign_in, user_data["email"], user_data["password"])
        return self._open(user, session)

    async def get_user(self, user_id):
        return await asyncio.to_thread(self._load_user, user_id)

    async def update_user(self, user_id, changes):
        fields = {key: changes[key] for key in _PROFILE_FIELDS if key in changes}
        await asyncio.to_thread(self._process, UpdateProfile, account_id=user_id, **fields)
        return await asyncio.to_thread(self._load_user, user_id)

    async def update_user_password(self, user_id, new_password):
        await asyncio.to_thread(self._process, ChangePassword, account_id=user_id, new_password=new_password)
        return await asyncio.to_thread(self._load_user, user_id)

    async def verify_password(self, user_id, password):
        return await asyncio.to_thread(self._check_password, user_id, password)

    async def get_current_session(self):
        session = self._session
        if session is None:
            return None
        if not await asyncio.to_thread(self._token_is_active, session.access_token):
            if self._session is session:
                self._session = None
        return self._session

    async def sign_out(self):
        session = self._session
        if session is None:
            return
        await asyncio.to_thread(self._process, SignOut, token=session.access_token)
        if self._session is session:
            self._session = None
        self._events.publish(SessionEvent(kind=SessionEvent.SIGNED_OUT, session=session))

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        return self._events.subscribe(listener)

    async def drain(self):
        """Wait for every pending session event delivery."""
        await self._events.drain()

    # -------------------------------------------------------------------
    # Orders
    # -------------------------------------------------------------------
    async def get_orders_by_user_id(self, user_id):
        return await asyncio.to_thread(self._load_orders, user_id)

    async def create_order(self, draft: OrderDraft):
        payload = draft.to_payload()
        order_id = await asyncio.to_thread(
            self._process,
            PlaceOrder,
            user_id=payload["user_id"],
            items=json.dumps(payload["items"]),
            total_price=payload["total_price"],
            payment_method=payload["payment_method"],
            sender_account=payload["sender_account"],
            address=payload["address"],
            status=payload["status"],
        )
        return await asyncio.to_thread(self._load_order, order_id)
