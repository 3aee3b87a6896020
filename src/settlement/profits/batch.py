"""Out-of-band settlement of delivered orders that are still unsettled."""

from dataclasses import dataclass, field

import structlog
from protean.utils.globals import current_domain

from settlement.order.order import Order
from settlement.profits.distribution import distribute_order_profits

logger = structlog.get_logger(__name__)


@dataclass
class BatchDistributionResult:
    succeeded: list[str] = field(default_factory=list)
    skipped: list[dict] = field(default_factory=list)
    failed: list[dict] = field(default_factory=list)

    @property
    def processed(self) -> int:
        return len(self.succeeded) + len(self.skipped) + len(self.failed)


def pending_settlements() -> list[Order]:
    return current_domain.repository_for(Order).find_pending_settlement()


def distribute_pending_profits(order_ids: list[str] | None = None) -> BatchDistributionResult:
    """Settle ``order_ids``, or every delivered unsettled order when none are given.

    A failing order is recorded and the batch moves on.
    """
    if order_ids is None:
        order_ids = [str(order.id) for order in pending_settlements()]

    batch = BatchDistributionResult()
    for order_id in order_ids:
        try:
            result = distribute_order_profits(order_id)
        except Exception as exc:
            logger.error("Settlement failed for order", order_id=order_id, error=str(exc))
            batch.failed.append({"order_id": order_id, "error": str(exc)})
            continue

        if result.distributed:
            batch.succeeded.append(order_id)
        else:
            batch.skipped.append({"order_id": order_id, "reason": result.reason})

    logger.info(
        "Batch settlement finished",
        succeeded=len(batch.succeeded),
        skipped=len(batch.skipped),
        failed=len(batch.failed),
    )
    return batch
