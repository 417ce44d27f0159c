"""HTTP gateway adapter: talks to the backend REST API with httpx.

The access token is held in memory; pass a saved one to ``HttpGateway`` to
resume a session across restarts. Sign-in and sign-out events are emitted by
this client when its own session changes.
"""

from collections.abc import Callable

import httpx
import structlog

from storefront.errors import (
    AuthError,
    CollaboratorTimeoutError,
    ConflictError,
    PersistenceError,
    ValidationError,
)
from storefront.gateway.events import SessionEventHub
from storefront.gateway.port import PersistenceGateway, SessionListener
from storefront.models import AuthSession, Order, OrderDraft, SessionEvent, User

logger = structlog.get_logger(__name__)

_PROFILE_FIELDS = ("full_name", "email", "phone", "address")


class RecordNotFound(PersistenceError):
    default_message = "Record not found"


_STATUS_ERRORS = {
    400: ValidationError,
    401: AuthError,
    404: RecordNotFound,
    409: ConflictError,
    422: ValidationError,
}


def _error_detail(response: httpx.Response) -> str | None:
    try:
        detail = response.json().get("detail")
    except (ValueError, AttributeError):
        return None
    # FastAPI's own request validation reports a list of {loc, msg, type}
    if isinstance(detail, list) and detail:
        first = detail[0]
        return first.get("msg") if isinstance(first, dict) else str(first)
    return detail if isinstance(detail, str) else None


class HttpGateway(PersistenceGateway):
    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        access_token: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._client = httpx.AsyncClient(base_url=base_url, timeout=timeout, transport=transport)
        self._access_token = access_token
        self._session: AuthSession | None = None
        self._events = SessionEventHub()

    @property
    def access_token(self) -> str | None:
        return self._access_token

    async def _request(self, method: str, path: str, json: dict | None = None):
        try:
            response = await self._client.request(method, path, json=json)
        except httpx.TimeoutException as exc:
            logger.warning("Backend request timed out", method=method, path=path)
            raise CollaboratorTimeoutError() from exc
        except httpx.HTTPError as exc:
            logger.warning("Backend request failed", method=method, path=path, error=str(exc))
            raise PersistenceError() from exc

        if response.is_success:
            return response.json()

        error_cls = _STATUS_ERRORS.get(response.status_code, PersistenceError)
        logger.info("Backend rejected request", method=method, path=path, status=response.status_code)
        raise error_cls(_error_detail(response))

    def _start_session(self, body: dict) -> tuple[User, AuthSession]:
        user = User.from_record(body["user"])
        session = AuthSession(access_token=body["access_token"], user_id=user.id)
        self._access_token = session.access_token
        self._session = session
        self._events.publish(SessionEvent(kind=SessionEvent.SIGNED_IN, session=session))
        return user, session

    # -------------------------------------------------------------------
    # Accounts and sessions
    # -------------------------------------------------------------------
    async def login(self, email, password):
        body = await self._request("POST", "/sessions", json={"email": email, "password": password})
        return self._start_session(body)

    async def create_user(self, user_data):
        payload = {
            "email": user_data.get("email"),
            "password": user_data.get("password"),
            "full_name": user_data.get("full_name"),
            "phone": user_data.get("phone") or None,
            "address": user_data.get("address") or None,
        }
        body = await self._request("POST", "/users", json=payload)
        return self._start_session(body)

    async def get_user(self, user_id):
        return User.from_record(await self._request("GET", f"/users/{user_id}"))

    async def update_user(self, user_id, changes):
        payload = {key: changes[key] for key in _PROFILE_FIELDS if key in changes}
        return User.from_record(await self._request("PATCH", f"/users/{user_id}", json=payload))

    async def update_user_password(self, user_id, new_password):
        body = await self._request("PUT", f"/users/{user_id}/password", json={"new_password": new_password})
        return User.from_record(body)

    async def verify_password(self, user_id, password):
        try:
            await self._request("POST", f"/users/{user_id}/password/verify", json={"password": password})
        except AuthError:
            return False
        return True

    async def get_current_session(self):
        if not self._access_token:
            return None
        try:
            body = await self._request("GET", f"/sessions/{self._access_token}")
        except RecordNotFound:
            # Unknown or revoked token: forget it
            self._access_token = None
            self._session = None
            return None
        self._session = AuthSession(access_token=body["access_token"], user_id=body["user_id"])
        return self._session

    async def sign_out(self):
        if not self._access_token:
            return
        await self._request("DELETE", f"/sessions/{self._access_token}")
        session = self._session or AuthSession(access_token=self._access_token, user_id="")
        self._access_token = None
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
        records = await self._request("GET", f"/users/{user_id}/orders")
        return [Order.from_record(record) for record in records]

    async def create_order(self, draft: OrderDraft):
        return Order.from_record(await self._request("POST", "/orders", json=draft.to_payload()))

    async def close(self):
        await self._client.aclose()
