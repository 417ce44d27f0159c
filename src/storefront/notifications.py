"""NotificationProjector: the in-app notification feed, derived from orders.

Nothing here is stored. Every read projects the current order list afresh:
one "received" notification per order, plus one for the ``processing`` and
``delivered`` statuses. The result is ordered newest first; notifications of
the same order keep their generation order ("received" before the status
one).
"""

from collections.abc import Iterable
from datetime import datetime, tzinfo

from storefront.models import Notification, Order, OrderStatus, parse_line_items

KIND_CREATED = "created"
KIND_PROCESSING = "processing"
KIND_DELIVERED = "delivered"

# kind -> title shown in the feed
TITLES = {
    KIND_CREATED: "Order Received",
    KIND_PROCESSING: "Order Being Processed",
    KIND_DELIVERED: "Order Completed",
}

_STATUS_KINDS = {
    OrderStatus.PROCESSING.value: KIND_PROCESSING,
    OrderStatus.DELIVERED.value: KIND_DELIVERED,
}

_MONTHS = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)


def format_date(moment: datetime, tz: tzinfo | None = None) -> str:
    """Display form of a timestamp in zone ``tz``, e.g. ``19 October 2026 16:00``.

    ``tz=None`` means the device's local zone. Month names are spelled out
    here rather than via ``strftime("%B")``, which follows the process locale.
    """
    moment = moment.astimezone(tz)
    return f"{moment.day:02d} {_MONTHS[moment.month - 1]} {moment.year} {moment.hour:02d}:{moment.minute:02d}"


def _notification(order: Order, kind: str, message: str, date: str) -> Notification:
    return Notification(
        id=f"{order.id}-{kind}",
        kind=kind,
        title=TITLES[kind],
        message=message,
        date=date,
        order_id=order.id,
        created_at=order.created_at,
    )


def notifications_for_order(order: Order, tz: tzinfo | None = None) -> list[Notification]:
    names = ", ".join(item.name for item in parse_line_items(order.items))
    message = f"Order: {names}"
    date = format_date(order.created_at, tz)

    notifications = [_notification(order, KIND_CREATED, message, date)]
    status_kind = _STATUS_KINDS.get(order.status)
    if status_kind is not None:
        notifications.append(_notification(order, status_kind, message, date))
    return notifications


def project_notifications(orders: Iterable[Order], tz: tzinfo | None = None) -> tuple[Notification, ...]:
    """Derive the notification feed for ``orders``, dated in zone ``tz``; pure and idempotent."""
    generated = [notification for order in orders for notification in notifications_for_order(order, tz)]
    # sorted() is stable, so equal timestamps keep generation order
    return tuple(sorted(generated, key=lambda notification: notification.created_at, reverse=True))
