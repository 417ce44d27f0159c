"""Operator-side order status changes: command and handler."""

from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from backend.domain import backend
from backend.order.order import Order


@backend.command(part_of="Order")
class UpdateOrderStatus:
    """Move an order to a new status, e.g. ``delivered``."""

    order_id = Identifier(required=True)
    status = String(required=True, max_length=50)


@backend.command_handler(part_of=Order)
class UpdateOrderStatusHandler:
    @handle(UpdateOrderStatus)
    def update_status(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.update_status(command.status)
        repo.add(order)
