"""Repository for the Order aggregate."""

from settlement.domain import settlement
from settlement.order.order import Order, OrderStatus


@settlement.repository(part_of=Order)
class OrderRepository:
    def find_pending_settlement(self) -> list[Order]:
        """Delivered orders whose profits have not been distributed yet."""
        return (
            self._dao.query.filter(
                status=OrderStatus.DELIVERED.value,
                profits_distributed=False,
            )
            .all()
            .items
        )
