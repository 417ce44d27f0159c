"""Order placement: command and handler."""

import structlog
from protean import handle
from protean.fields import Float, Identifier, String, Text
from protean.utils.globals import current_domain

from backend.account.account import Account
from backend.domain import backend
from backend.order.order import Order

logger = structlog.get_logger(__name__)


@backend.command(part_of="Order")
class PlaceOrder:
    user_id = Identifier(required=True)
    items = Text(required=True)  # JSON: list of cart item dicts
    total_price = Float(required=True)
    payment_method = String(required=True, max_length=20)
    sender_account = String(max_length=100)
    address = Text(required=True)
    status = String(max_length=50)


@backend.command_handler(part_of=Order)
class PlaceOrderHandler:
    @handle(PlaceOrder)
    def place_order(self, command):
        # Raises ObjectNotFoundError for unknown users
        current_domain.repository_for(Account).get(command.user_id)

        order = Order.place(
            user_id=command.user_id,
            items=command.items,
            total_price=command.total_price,
            payment_method=command.payment_method,
            sender_account=command.sender_account,
            address=command.address,
            status=command.status,
        )
        current_domain.repository_for(Order).add(order)
        logger.info("Order placed", order_id=str(order.id), user_id=str(command.user_id))
        return str(order.id)
