"""Profit distribution on delivery.

The credits form a saga: each committed credit is recorded with its
compensation, and the first failure compensates everything already
committed, newest first, before the error propagates. The order's
``profits_distributed`` latch is set only after every credit has committed.
"""

from dataclasses import dataclass

import structlog
from protean.utils.globals import current_domain

from settlement.locks import order_locks
from settlement.notifier import notify_safely
from settlement.order.order import Order, OrderStatus
from settlement.profits.shares import Beneficiary, ProfitShare, profit_shares
from settlement.wallet import ledger

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class CompletedStep:
    share: ProfitShare
    reference: str
    entry_id: str

    def compensate(self, order_id: str) -> None:
        ledger.compensate_transaction(
            self.share.user_id,
            self.reference,
            self.share.rollback_reference(order_id, self.entry_id),
        )


@dataclass(frozen=True)
class DistributionResult:
    order_id: str
    distributed: bool
    marketer_profit: float = 0.0
    commission: float = 0.0
    reason: str | None = None


def _rollback(order_id: str, completed: list[CompletedStep]) -> None:
    for step in reversed(completed):
        try:
            step.compensate(order_id)
        except Exception:
            logger.exception(
                "Compensation failed, wallet needs manual correction",
                order_id=order_id,
                user_id=step.share.user_id,
                reference=step.reference,
            )


def _notify(order: Order, share: ProfitShare) -> None:
    if share.beneficiary == Beneficiary.MARKETER:
        notify_safely(
            share.user_id,
            title="New profit added",
            message=f"A profit of {share.amount:.2f} from order {order.barcode} was added to your wallet",
            notification_type="marketer_profit",
            data={"order_id": str(order.id), "amount": share.amount},
        )
    else:
        notify_safely(
            share.user_id,
            title="Commission added",
            message=f"A commission of {share.amount:.2f} from order {order.barcode} was added",
            notification_type="admin_profit",
            data={"order_id": str(order.id), "amount": share.amount},
        )


def distribute_order_profits(order_id: str) -> DistributionResult:
    """Credit the marketer and platform wallets for a delivered order.

    Returns without touching any wallet when the order is not delivered or
    has already been settled.
    """
    with order_locks.hold(order_id):
        repo = current_domain.repository_for(Order)
        order = repo.get(order_id)

        if order.status != OrderStatus.DELIVERED.value:
            logger.warning("Order not delivered, profits not distributed", order_id=order_id, status=order.status)
            return DistributionResult(order_id=order_id, distributed=False, reason="order_not_delivered")

        if order.profits_distributed:
            logger.info("Profits already distributed", order_id=order_id)
            return DistributionResult(order_id=order_id, distributed=False, reason="already_distributed")

        shares = profit_shares(order)
        completed: list[CompletedStep] = []

        try:
            for share in shares:
                reference = share.reference(order_id)
                entry_id = ledger.credit(
                    share.user_id,
                    share.amount,
                    description=f"{share.beneficiary.value.capitalize()} profit from order {order.barcode}",
                    reference=reference,
                    metadata={"order_id": order_id, "order_number": order.order_number},
                )
                completed.append(CompletedStep(share=share, reference=reference, entry_id=entry_id))

            order.mark_profits_distributed()
            repo.add(order)
        except Exception:
            logger.error(
                "Profit distribution failed, compensating committed credits",
                order_id=order_id,
                committed=[step.reference for step in completed],
            )
            _rollback(order_id, completed)
            raise

    logger.info(
        "Profits distributed",
        order_id=order_id,
        marketer_profit=order.marketer_payout,
        commission=order.platform_commission,
    )
    for share in shares:
        _notify(order, share)

    return DistributionResult(
        order_id=order_id,
        distributed=True,
        marketer_profit=order.marketer_payout,
        commission=order.platform_commission,
    )
