"""Value types held by the store and returned by the persistence gateway.

All of them are frozen: the store never edits a value in place, it replaces
it (a cart line with a new quantity is a new ``CartItem``). Order item
snapshots arrive from the backend either as a JSON string or as a list of
mappings; ``parse_line_items`` resolves both, once, at the gateway boundary.
"""

import json
from dataclasses import asdict, dataclass, replace
from datetime import UTC, datetime
from enum import Enum
from typing import Any

import structlog

from storefront.errors import ParseError

logger = structlog.get_logger(__name__)


# Values the backend sends and accepts; backend.order.order keeps the
# server's copy of the same vocabulary.
class OrderStatus(Enum):
    PROCESSING = "processing"
    DELIVERED = "delivered"


class PaymentMethod(Enum):
    COD = "cod"
    TRANSFER = "transfer"


NO_SENDER_ACCOUNT = "-"


@dataclass(frozen=True)
class User:
    id: str
    email: str
    full_name: str
    phone: str | None = None
    address: str | None = None

    @classmethod
    def from_record(cls, record: dict) -> "User":
        return cls(
            id=str(record["id"]),
            email=record["email"],
            full_name=record["full_name"],
            phone=record.get("phone") or None,
            address=record.get("address") or None,
        )


@dataclass(frozen=True)
class AuthSession:
    """The collaborator's handle on a signed-in user."""

    access_token: str
    user_id: str


@dataclass(frozen=True)
class SessionEvent:
    """Sign-in/sign-out notification pushed by the collaborator."""

    SIGNED_IN = "signed_in"
    SIGNED_OUT = "signed_out"

    kind: str
    session: AuthSession | None = None


@dataclass(frozen=True)
class CartItem:
    id: str
    name: str
    price: float
    quantity: int = 1
    image: str = ""
    description: str | None = None

    @property
    def subtotal(self) -> float:
        return self.price * self.quantity

    def with_quantity(self, quantity: int) -> "CartItem":
        return replace(self, quantity=quantity)


@dataclass(frozen=True)
class LineItem:
    """One line of an order's item snapshot."""

    id: str
    name: str
    price: float
    quantity: int
    image: str = ""
    description: str | None = None

    @classmethod
    def from_cart_item(cls, item: CartItem) -> "LineItem":
        return cls(
            id=item.id,
            name=item.name,
            price=item.price,
            quantity=item.quantity,
            image=item.image,
            description=item.description,
        )

    @classmethod
    def from_mapping(cls, data: dict) -> "LineItem":
        return cls(
            id=str(data.get("id", "")),
            name=str(data.get("name", "")),
            price=float(data.get("price") or 0),
            quantity=int(data.get("quantity") or 1),
            image=data.get("image") or "",
            description=data.get("description"),
        )

    def to_dict(self) -> dict:
        return asdict(self)


def _decode_line_items(raw: Any) -> tuple[LineItem, ...]:
    if raw is None:
        return ()
    if isinstance(raw, (bytes, str)):
        try:
            raw = json.loads(raw)
        except ValueError as exc:
            raise ParseError(f"Order items are not valid JSON: {exc}") from exc
    if not isinstance(raw, (list, tuple)):
        raise ParseError(f"Order items must be a list, got {type(raw).__name__}")

    items = []
    for entry in raw:
        if isinstance(entry, LineItem):
            items.append(entry)
        elif isinstance(entry, CartItem):
            items.append(LineItem.from_cart_item(entry))
        elif isinstance(entry, dict):
            try:
                items.append(LineItem.from_mapping(entry))
            except (TypeError, ValueError) as exc:
                raise ParseError(f"Malformed order item: {entry!r}") from exc
        else:
            raise ParseError(f"Malformed order item: {entry!r}")
    return tuple(items)


def parse_line_items(raw: Any) -> tuple[LineItem, ...]:
    """Resolve an order's item snapshot into line items.

    Accepts a JSON string, a list of mappings, or already typed items.
    Anything malformed yields an empty tuple; the failure is logged and never
    raised to the caller.
    """
    try:
        return _decode_line_items(raw)
    except ParseError as exc:
        logger.warning("Discarding unreadable order items", error=exc.message)
        return ()


def parse_timestamp(value: Any) -> datetime:
    if isinstance(value, datetime):
        moment = value
    elif value:
        moment = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    else:
        moment = datetime.now(UTC)
    return moment if moment.tzinfo else moment.replace(tzinfo=UTC)


@dataclass(frozen=True)
class OrderDraft:
    """Everything sent to the collaborator to create an order."""

    user_id: str
    items: tuple[LineItem, ...]
    total_price: float
    payment_method: str
    address: str
    sender_account: str = NO_SENDER_ACCOUNT
    status: str = OrderStatus.PROCESSING.value

    def to_payload(self) -> dict:
        return {
            "user_id": self.user_id,
            "items": [item.to_dict() for item in self.items],
            "total_price": self.total_price,
            "status": self.status,
            "payment_method": self.payment_method,
            "sender_account": self.sender_account,
            "address": self.address,
        }


@dataclass(frozen=True)
class Order:
    id: str
    user_id: str
    items: tuple[LineItem, ...]
    total_price: float
    status: str
    payment_method: str
    sender_account: str
    address: str
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_record(cls, record: dict) -> "Order":
        created_at = parse_timestamp(record.get("created_at"))
        return cls(
            id=str(record["id"]),
            user_id=str(record["user_id"]),
            items=parse_line_items(record.get("items")),
            total_price=float(record.get("total_price") or 0),
            status=record.get("status") or "",
            payment_method=record.get("payment_method") or "",
            sender_account=record.get("sender_account") or NO_SENDER_ACCOUNT,
            address=record.get("address") or "",
            created_at=created_at,
            updated_at=parse_timestamp(record.get("updated_at") or created_at),
        )


@dataclass(frozen=True)
class Notification:
    id: str
    kind: str
    title: str
    message: str
    date: str
    order_id: str
    created_at: datetime
