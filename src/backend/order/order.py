"""Order aggregate (CQRS): an order placed from a client's cart.

The item snapshot is stored as a JSON array exactly as the client sent it at
checkout; it is never edited afterwards. Status starts as ``processing`` and
is moved on by the operator (e.g. to ``delivered``); clients only read it.
"""

import json
from datetime import UTC, datetime
from enum import Enum

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, Identifier, String, Text

from backend.domain import backend


# Wire vocabulary shared with clients over the API. storefront.models holds
# the client's own copy; the two must list the same values.
class OrderStatus(Enum):
    PROCESSING = "processing"
    DELIVERED = "delivered"


class PaymentMethod(Enum):
    COD = "cod"
    TRANSFER = "transfer"


NO_SENDER_ACCOUNT = "-"


@backend.aggregate
class Order:
    user_id = Identifier(required=True)
    items = Text(required=True)  # JSON: list of cart item dicts
    total_price = Float(required=True, min_value=0.0)
    status = String(max_length=50, default=OrderStatus.PROCESSING.value)
    payment_method = String(required=True, choices=PaymentMethod)
    sender_account = String(max_length=100, default=NO_SENDER_ACCOUNT)
    address = Text(required=True)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def order_must_have_items(self):
        if not json.loads(self.items or "[]"):
            raise ValidationError({"items": ["An order must contain at least one item"]})

    @invariant.post
    def transfer_requires_sender_account(self):
        if self.payment_method == PaymentMethod.TRANSFER.value and (
            not self.sender_account or self.sender_account.strip() in ("", NO_SENDER_ACCOUNT)
        ):
            raise ValidationError({"sender_account": ["Sender account is required for bank transfer"]})

    @classmethod
    def place(cls, user_id, items, total_price, payment_method, address, sender_account=None, status=None):
        now = datetime.now(UTC)
        return cls(
            user_id=user_id,
            items=items if isinstance(items, str) else json.dumps(items),
            total_price=total_price,
            status=status or OrderStatus.PROCESSING.value,
            payment_method=payment_method,
            sender_account=sender_account or NO_SENDER_ACCOUNT,
            address=address,
            created_at=now,
            updated_at=now,
        )

    def update_status(self, status):
        if not status:
            raise ValidationError({"status": ["Status is required"]})
        self.status = status
        self.updated_at = datetime.now(UTC)

    def to_record(self):
        return {
            "id": str(self.id),
            "user_id": str(self.user_id),
            "items": json.loads(self.items),
            "total_price": self.total_price,
            "status": self.status,
            "payment_method": self.payment_method,
            "sender_account": self.sender_account,
            "address": self.address,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }


@backend.repository(part_of=Order)
class OrderRepository:
    def for_user(self, user_id) -> list[Order]:
        """All orders of one user, most recently created first."""
        orders = self._dao.query.filter(user_id=str(user_id)).all().items
        return sorted(orders, key=lambda order: order.created_at, reverse=True)
