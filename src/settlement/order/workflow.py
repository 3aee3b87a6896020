"""Status changes and the work they trigger.

``ready_for_shipping`` creates the package, ``delivered`` distributes
profits, ``cancelled``, ``returned`` and ``refunded`` reverse them (a no-op
once nothing is left to reverse). The status change is committed first; a
failing trigger is logged and reported but never undoes it.
"""

from dataclasses import dataclass, field

import structlog
from protean.utils.globals import current_domain

from settlement.order.order import OrderStatus
from settlement.order.status import ChangeOrderStatus
from settlement.package.creation import PackageCreationResult, create_package_from_order
from settlement.profits.distribution import DistributionResult, distribute_order_profits
from settlement.profits.reversal import ReversalResult, reverse_order_profits

logger = structlog.get_logger(__name__)

_REVERSING_STATUSES = (
    OrderStatus.CANCELLED.value,
    OrderStatus.RETURNED.value,
    OrderStatus.REFUNDED.value,
)


@dataclass
class StatusChangeOutcome:
    order_id: str
    previous_status: str
    status: str
    package: PackageCreationResult | None = None
    distribution: DistributionResult | None = None
    reversal: ReversalResult | None = None
    errors: list[str] = field(default_factory=list)


def change_order_status(order_id: str, status: str) -> StatusChangeOutcome:
    previous_status = current_domain.process(
        ChangeOrderStatus(order_id=order_id, status=status),
        asynchronous=False,
    )
    outcome = StatusChangeOutcome(order_id=order_id, previous_status=previous_status, status=status)
    logger.info("Order status changed", order_id=order_id, previous_status=previous_status, status=status)

    try:
        if status == OrderStatus.READY_FOR_SHIPPING.value:
            outcome.package = create_package_from_order(order_id)
            if not outcome.package.carrier_accepted:
                outcome.errors.append(outcome.package.error)
        elif status == OrderStatus.DELIVERED.value:
            outcome.distribution = distribute_order_profits(order_id)
        elif status in _REVERSING_STATUSES:
            outcome.reversal = reverse_order_profits(order_id)
    except Exception as exc:
        logger.error(
            "Status change side effect failed",
            order_id=order_id,
            status=status,
            error=str(exc),
        )
        outcome.errors.append(str(exc))

    return outcome
