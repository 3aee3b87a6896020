"""Order status change — command and handler."""

from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from settlement.domain import settlement
from settlement.order.order import Order


@settlement.command(part_of="Order")
class ChangeOrderStatus:
    order_id = Identifier(required=True)
    status = String(required=True, max_length=30)


@settlement.command_handler(part_of=Order)
class ChangeOrderStatusHandler:
    @handle(ChangeOrderStatus)
    def change_status(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        previous_status = order.status
        order.change_status(command.status)
        repo.add(order)
        return previous_status
