import asyncio
from datetime import UTC, datetime
from uuid import uuid4

import pytest

from storefront.config import StoreConfig
from storefront.errors import AuthError, ConflictError
from storefront.gateway.events import SessionEventHub
from storefront.gateway.port import PersistenceGateway
from storefront.models import AuthSession, CartItem, Order, SessionEvent, User
from storefront.store import Store

NOODLES = CartItem(id="1", name="Mie Ayam Original", price=25000)
SPECIAL = CartItem(id="2", name="Mie Ayam Spesial", price=30000)

ALICE = {
    "full_name": "Alice Tan",
    "email": "alice@example.com",
    "password": "secret123",
    "phone": "0811000111",
    "address": "Jl. Merdeka 1, Jakarta",
}

BOB = {
    "full_name": "Bob Lim",
    "email": "bob@example.com",
    "password": "hunter22",
    "address": "Jl. Sudirman 5, Bandung",
}


class ScriptedGateway(PersistenceGateway):
    """In-memory collaborator whose calls can be delayed or made to fail.

    ``delays[name]`` is a list of per-call sleeps and ``failures[name]`` a
    list of per-call exceptions (None for "succeed"); both are consumed in
    call order.
    """

    def __init__(self):
        self.accounts: dict[str, tuple[User, str]] = {}
        self.orders: dict[str, list[Order]] = {}
        self.delays: dict[str, list[float]] = {}
        self.failures: dict[str, list[Exception | None]] = {}
        self.calls: list[str] = []
        self.session: AuthSession | None = None
        self.events = SessionEventHub()

    def add_account(self, data: dict) -> User:
        user = User(
            id=str(uuid4()),
            email=data["email"],
            full_name=data["full_name"],
            phone=data.get("phone"),
            address=data.get("address"),
        )
        self.accounts[user.email] = (user, data["password"])
        self.orders[user.id] = []
        return user

    def add_order(self, user_id: str, status="processing", created_at=None) -> Order:
        moment = created_at or datetime.now(UTC)
        order = Order(
            id=str(uuid4()),
            user_id=user_id,
            items=(),
            total_price=0.0,
            status=status,
            payment_method="cod",
            sender_account="-",
            address="somewhere",
            created_at=moment,
            updated_at=moment,
        )
        self.orders[user_id].insert(0, order)
        return order

    async def _step(self, name):
        self.calls.append(name)
        delays = self.delays.get(name)
        delay = delays.pop(0) if delays else 0
        failures = self.failures.get(name)
        failure = failures.pop(0) if failures else None
        if delay:
            await asyncio.sleep(delay)
        if failure is not None:
            raise failure

    def _user(self, user_id) -> User:
        return next(user for user, _ in self.accounts.values() if user.id == user_id)

    def _open(self, user: User):
        self.session = AuthSession(access_token=str(uuid4()), user_id=user.id)
        self.events.publish(SessionEvent(kind=SessionEvent.SIGNED_IN, session=self.session))
        return user, self.session

    async def login(self, email, password):
        await self._step("login")
        account = self.accounts.get(email)
        if account is None or account[1] != password:
            raise AuthError()
        return self._open(account[0])

    async def create_user(self, user_data):
        await self._step("create_user")
        if user_data["email"] in self.accounts:
            raise ConflictError("Email is already registered")
        return self._open(self.add_account(user_data))

    async def get_user(self, user_id):
        await self._step("get_user")
        return self._user(user_id)

    async def update_user(self, user_id, changes):
        await self._step("update_user")
        raise NotImplementedError

    async def update_user_password(self, user_id, new_password):
        await self._step("update_user_password")
        raise NotImplementedError

    async def verify_password(self, user_id, password):
        await self._step("verify_password")
        return any(user.id == user_id and secret == password for user, secret in self.accounts.values())

    async def get_orders_by_user_id(self, user_id):
        snapshot = list(self.orders.get(user_id, []))
        await self._step("get_orders_by_user_id")
        return snapshot

    async def create_order(self, draft):
        await self._step("create_order")
        order = Order(
            id=str(uuid4()),
            user_id=draft.user_id,
            items=draft.items,
            total_price=draft.total_price,
            status=draft.status,
            payment_method=draft.payment_method,
            sender_account=draft.sender_account,
            address=draft.address,
            created_at=datetime.now(UTC),
            updated_at=datetime.now(UTC),
        )
        self.orders[draft.user_id].insert(0, order)
        return order

    async def get_current_session(self):
        await self._step("get_current_session")
        return self.session

    async def sign_out(self):
        await self._step("sign_out")
        session, self.session = self.session, None
        if session is not None:
            self.events.publish(SessionEvent(kind=SessionEvent.SIGNED_OUT, session=session))

    def subscribe(self, listener):
        return self.events.subscribe(listener)


@pytest.fixture
def scripted_gateway():
    return ScriptedGateway()


@pytest.fixture
def scripted_store(scripted_gateway):
    return Store(scripted_gateway, StoreConfig(request_timeout=1.0))


@pytest.fixture
def local_gateway(backend_bed):
    from backend.domain import backend
    from storefront.gateway.local import LocalGateway

    return LocalGateway(backend)


@pytest.fixture
def store(local_gateway):
    return Store(local_gateway, StoreConfig(request_timeout=5.0))


@pytest.fixture
def noodles():
    return NOODLES


@pytest.fixture
def special():
    return SPECIAL


@pytest.fixture
def alice_data():
    return dict(ALICE)


@pytest.fixture
def bob_data():
    return dict(BOB)
